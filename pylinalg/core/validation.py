"""
Input validation utilities for pylinalg.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Design principles:
    - No silent type coercion (except integer -> float64 promotion)
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

from __future__ import annotations

import operator
from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pylinalg.core.exceptions import dimension_mismatch, invalid_argument
from pylinalg.core.modes import ALL_MODES

# Element types the kernels accept
SUPPORTED_DTYPES = (np.dtype(np.float32), np.dtype(np.float64))


def check_mode(mode: str, name: str) -> str:
    """
    Verify an execution mode string.

    Args:
        mode: Mode to check
        name: Parameter name for error messages

    Returns:
        The mode, unchanged

    Raises:
        LinalgError(INVALID_ARGUMENT): If mode is not a known mode
    """
    if mode not in ALL_MODES:
        raise invalid_argument(
            f"{name}: unknown execution mode {mode!r}, "
            f"expected one of {sorted(ALL_MODES)}",
            expected=sorted(ALL_MODES),
            actual=mode,
        )
    return mode


def check_float_dtype(dtype: Any, name: str) -> np.dtype:
    """
    Verify that dtype is float32 or float64.

    Args:
        dtype: Anything np.dtype() accepts
        name: Parameter name for error messages

    Returns:
        The normalised np.dtype

    Raises:
        LinalgError(INVALID_ARGUMENT): For any other element type
    """
    resolved = np.dtype(dtype)
    if resolved not in SUPPORTED_DTYPES:
        raise invalid_argument(
            f"{name}: unsupported element type {resolved}, "
            f"expected float32 or float64",
            expected=[str(d) for d in SUPPORTED_DTYPES],
            actual=str(resolved),
        )
    return resolved


def as_float_buffer(
    data: ArrayLike,
    name: str,
    dtype: Any = None,
) -> NDArray[np.floating[Any]]:
    """
    Convert array-like input to a contiguous 1-D float buffer.

    Integer input is promoted to float64. Multi-dimensional input is
    flattened in row-major order. A copy is always made so the caller's
    array is never aliased.

    Args:
        data: Input to convert
        name: Parameter name for error messages
        dtype: Target dtype (float32/float64), or None to infer

    Returns:
        numpy.ndarray of ndim 1

    Raises:
        LinalgError(INVALID_ARGUMENT): If input is non-numeric or of an
            unsupported floating type
    """
    try:
        result = np.array(data, copy=True)
    except (ValueError, TypeError) as e:
        raise invalid_argument(f"{name}: cannot convert to array: {e}") from e

    numeric = (
        np.issubdtype(result.dtype, np.floating)
        or np.issubdtype(result.dtype, np.integer)
        or result.dtype == np.bool_
    )
    if result.dtype == object or not numeric:
        raise invalid_argument(
            f"{name}: non-numeric dtype {result.dtype}, expected real numeric data",
            actual=str(result.dtype),
        )

    if dtype is not None:
        target = check_float_dtype(dtype, name)
    elif np.issubdtype(result.dtype, np.floating):
        target = check_float_dtype(result.dtype, name)
    else:
        target = np.dtype(np.float64)

    return np.ascontiguousarray(result.reshape(-1), dtype=target)


def check_index(index: int, bound: int, name: str, operation: str) -> int:
    """
    Verify 0 <= index < bound.

    Args:
        index: Index to check
        bound: Exclusive upper bound
        name: What is being indexed ('row', 'col', ...)
        operation: Operation name for diagnostics

    Returns:
        The index as a Python int

    Raises:
        TypeError: If the index is not an integer
        LinalgError(DIMENSION_MISMATCH): If the index is out of range
    """
    index = operator.index(index)
    if not 0 <= index < bound:
        raise dimension_mismatch(
            f"{operation}: {name} index {index} outside [0, {bound})",
            operation=operation,
            expected=bound,
            actual=index,
        )
    return int(index)


def check_insert_position(position: int, bound: int, name: str, operation: str) -> int:
    """
    Verify 0 <= position <= bound (insertion may target the end).

    Raises:
        TypeError: If the position is not an integer
        LinalgError(DIMENSION_MISMATCH): If the position is out of range
    """
    position = operator.index(position)
    if not 0 <= position <= bound:
        raise dimension_mismatch(
            f"{operation}: {name} position {position} outside [0, {bound}]",
            operation=operation,
            expected=bound,
            actual=position,
        )
    return int(position)


def check_same_length(a_len: int, b_len: int, operation: str) -> None:
    """
    Verify two vector operands have equal length.

    Raises:
        LinalgError(DIMENSION_MISMATCH): If lengths differ
    """
    if a_len != b_len:
        raise dimension_mismatch(
            f"{operation}: vectors of different sizes ({a_len} vs {b_len})",
            operation=operation,
            expected=a_len,
            actual=b_len,
        )


def check_same_shape(
    a_shape: tuple[int, int],
    b_shape: tuple[int, int],
    operation: str,
) -> None:
    """
    Verify two matrix operands have identical shape.

    Raises:
        LinalgError(DIMENSION_MISMATCH): If shapes differ
    """
    if a_shape != b_shape:
        raise dimension_mismatch(
            f"{operation}: incompatible dimensions {a_shape[0]}x{a_shape[1]} "
            f"and {b_shape[0]}x{b_shape[1]}",
            operation=operation,
            expected=a_shape,
            actual=b_shape,
        )


def check_inner_dimensions(
    a_shape: tuple[int, int],
    b_shape: tuple[int, int],
    operation: str,
) -> None:
    """
    Verify a.cols == b.rows for a matrix product.

    Raises:
        LinalgError(DIMENSION_MISMATCH): If inner dimensions differ
    """
    if a_shape[1] != b_shape[0]:
        raise dimension_mismatch(
            f"{operation}: cannot multiply {a_shape[0]}x{a_shape[1]} "
            f"by {b_shape[0]}x{b_shape[1]}",
            operation=operation,
            expected=a_shape[1],
            actual=b_shape[0],
        )


def check_square(shape: tuple[int, int], name: str, operation: str) -> None:
    """
    Verify a matrix is square.

    Raises:
        LinalgError(DIMENSION_MISMATCH): If rows != cols
    """
    if shape[0] != shape[1]:
        raise dimension_mismatch(
            f"{operation}: {name} must be square, got {shape[0]}x{shape[1]}",
            operation=operation,
            expected=(shape[0], shape[0]),
            actual=shape,
        )
