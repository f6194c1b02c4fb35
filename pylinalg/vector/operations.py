"""
Vector arithmetic.

Every function validates operand sizes first, then asks the dispatch
policy for a backend. The result is flagged offloaded exactly when the
offloaded backend produced it.
"""

from __future__ import annotations

from typing import Any
import numpy as np
from numpy.typing import NDArray

from pylinalg.core.exceptions import domain_error
from pylinalg.core.modes import MODE_OFFLOADED, MODE_SEQUENTIAL
from pylinalg.core.protocols import AcceleratorContext, KernelBackend
from pylinalg.core.tolerances import DEFAULT_COMPARISON_TOL
from pylinalg.core.validation import check_same_length
from pylinalg.kernels.dispatch import select_backend
from pylinalg.vector.vector import Vector


def _produced(data: NDArray[np.floating[Any]], backend: KernelBackend) -> Vector:
    return Vector._wrap(data, MODE_OFFLOADED if backend.offloaded else MODE_SEQUENTIAL)


def add(a: Vector, b: Vector, *, context: AcceleratorContext | None = None) -> Vector:
    """
    Element-wise sum.

    Raises:
        LinalgError(DIMENSION_MISMATCH): If the vectors differ in length
    """
    check_same_length(len(a), len(b), 'add')
    backend = select_backend(a.mode, b.mode, context=context)
    return _produced(backend.add(a.data, b.data), backend)


def subtract(a: Vector, b: Vector, *, context: AcceleratorContext | None = None) -> Vector:
    """
    Element-wise difference a - b.

    Raises:
        LinalgError(DIMENSION_MISMATCH): If the vectors differ in length
    """
    check_same_length(len(a), len(b), 'subtract')
    backend = select_backend(a.mode, b.mode, context=context)
    return _produced(backend.subtract(a.data, b.data), backend)


def scale(a: Vector, scalar: float, *, context: AcceleratorContext | None = None) -> Vector:
    """Multiply every element by `scalar`."""
    backend = select_backend(a.mode, context=context)
    return _produced(backend.scale(a.data, float(scalar)), backend)


def dot(a: Vector, b: Vector, *, context: AcceleratorContext | None = None) -> float:
    """
    Inner product.

    Raises:
        LinalgError(DIMENSION_MISMATCH): If the vectors differ in length
    """
    check_same_length(len(a), len(b), 'dot')
    return select_backend(a.mode, b.mode, context=context).dot(a.data, b.data)


def magnitude(a: Vector, *, context: AcceleratorContext | None = None) -> float:
    """Euclidean norm. The empty vector has magnitude 0."""
    return select_backend(a.mode, context=context).norm(a.data)


def unit(a: Vector, *, context: AcceleratorContext | None = None) -> Vector:
    """
    a scaled to magnitude 1.

    Raises:
        LinalgError(DOMAIN_ERROR): If a has magnitude 0
    """
    mag = magnitude(a, context=context)
    if mag == 0.0:
        raise domain_error(
            "unit: cannot normalise a vector of magnitude 0",
            operation='unit',
            actual=mag,
        )
    return scale(a, 1.0 / mag, context=context)


def vcomp(a: Vector, b: Vector, tol: float = DEFAULT_COMPARISON_TOL) -> bool:
    """
    Tolerance comparison: same length and |a[i] - b[i]| <= tol for every i.

    Vectors of different length compare unequal rather than raising.
    """
    if len(a) != len(b):
        return False
    return bool(np.all(np.abs(a.data - b.data) <= tol))
