"""
Matrix arithmetic.

add/subtract/scale/matmul run on the storage vectors through the kernel
dispatch policy: offloaded only when every matrix operand is offloaded.
Shapes are validated before a backend is chosen, so both paths fail the
same way. transpose, sqrt, diag and identity are host-side structural
operations that keep the operand's mode.
"""

from __future__ import annotations

from typing import Any
import numpy as np

from pylinalg.core.exceptions import domain_error
from pylinalg.core.modes import MODE_OFFLOADED, MODE_SEQUENTIAL
from pylinalg.core.protocols import AcceleratorContext, KernelBackend
from pylinalg.core.tolerances import SQRT_ZERO_SNAP
from pylinalg.core.validation import (
    check_float_dtype,
    check_inner_dimensions,
    check_mode,
    check_same_shape,
)
from pylinalg.kernels.dispatch import select_backend
from pylinalg.matrix.matrix import Matrix


def _result_mode(backend: KernelBackend) -> str:
    return MODE_OFFLOADED if backend.offloaded else MODE_SEQUENTIAL


def add(a: Matrix, b: Matrix, *, context: AcceleratorContext | None = None) -> Matrix:
    """
    Element-wise sum.

    Raises:
        LinalgError(DIMENSION_MISMATCH): If the shapes differ
    """
    check_same_shape(a.shape, b.shape, 'add')
    a._check_storage('add')
    b._check_storage('add')
    backend = select_backend(a.mode, b.mode, context=context)
    data = backend.add(a.storage.data, b.storage.data)
    return Matrix._wrap(data, a.rows, a.cols, _result_mode(backend))


def subtract(a: Matrix, b: Matrix, *, context: AcceleratorContext | None = None) -> Matrix:
    """
    Element-wise difference a - b.

    Raises:
        LinalgError(DIMENSION_MISMATCH): If the shapes differ
    """
    check_same_shape(a.shape, b.shape, 'subtract')
    a._check_storage('subtract')
    b._check_storage('subtract')
    backend = select_backend(a.mode, b.mode, context=context)
    data = backend.subtract(a.storage.data, b.storage.data)
    return Matrix._wrap(data, a.rows, a.cols, _result_mode(backend))


def scale(a: Matrix, scalar: float, *, context: AcceleratorContext | None = None) -> Matrix:
    """Multiply every element by `scalar`."""
    a._check_storage('scale')
    backend = select_backend(a.mode, context=context)
    data = backend.scale(a.storage.data, float(scalar))
    return Matrix._wrap(data, a.rows, a.cols, _result_mode(backend))


def matmul(a: Matrix, b: Matrix, *, context: AcceleratorContext | None = None) -> Matrix:
    """
    Matrix product; the result is a.rows x b.cols.

    Raises:
        LinalgError(DIMENSION_MISMATCH): If a.cols != b.rows
    """
    check_inner_dimensions(a.shape, b.shape, 'matmul')
    a._check_storage('matmul')
    b._check_storage('matmul')
    backend = select_backend(a.mode, b.mode, context=context)
    n, k, m = a.rows, a.cols, b.cols
    data = backend.matmul(a.storage.data, b.storage.data, n, k, m)
    return Matrix._wrap(data, n, m, _result_mode(backend))


def transpose(a: Matrix) -> Matrix:
    """Same as a.t()."""
    return a.t()


def sqrt(a: Matrix) -> Matrix:
    """
    Element-wise square root.

    Elements with magnitude below 1e-7 are snapped to exactly 0 first, so
    rounding noise around zero is accepted.

    Raises:
        LinalgError(DOMAIN_ERROR): If any element is negative after snapping
    """
    values = a.to_array().reshape(-1)
    values[np.abs(values) < SQRT_ZERO_SNAP] = 0.0
    negative = np.flatnonzero(values < 0)
    if negative.size:
        first = int(negative[0])
        raise domain_error(
            f"sqrt: negative element {values[first]} at "
            f"({first // a.cols}, {first % a.cols})",
            operation='sqrt',
            actual=float(values[first]),
        )
    return Matrix._wrap(np.sqrt(values), a.rows, a.cols, a.mode)


def diag(a: Matrix) -> Matrix:
    """Leading diagonal as a min(rows, cols) x 1 column matrix."""
    k = min(a.rows, a.cols)
    values = [a.getelem(i, i) for i in range(k)]
    return Matrix(values, k, 1, mode=a.mode, dtype=a.dtype)


def identity(n: int, mode: str = MODE_SEQUENTIAL, dtype: Any = np.float64) -> Matrix:
    """n x n identity matrix."""
    check_mode(mode, 'mode')
    resolved = check_float_dtype(dtype, 'dtype')
    return Matrix._wrap(np.eye(n, dtype=resolved).reshape(-1), n, n, mode)
