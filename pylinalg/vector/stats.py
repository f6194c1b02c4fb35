"""
Summary statistics over Vectors.

The sequential backend computes variance with Welford's single-pass
recurrence; the offloaded backend reduces on the device in two centered
passes. Both use the Bessel (n - 1) denominator.
"""

from __future__ import annotations

import math

from pylinalg.core.exceptions import domain_error, invalid_argument
from pylinalg.core.protocols import AcceleratorContext
from pylinalg.core.validation import check_same_length
from pylinalg.kernels.dispatch import select_backend
from pylinalg.vector.vector import Vector


def mean(a: Vector, *, context: AcceleratorContext | None = None) -> float:
    """
    Arithmetic mean.

    Raises:
        LinalgError(INVALID_ARGUMENT): If a is empty
    """
    if a.is_empty():
        raise invalid_argument("mean: vector is empty", operation='mean', actual=0)
    return select_backend(a.mode, context=context).mean(a.data)


def variance(a: Vector, *, context: AcceleratorContext | None = None) -> float:
    """Sample variance. Fewer than two elements give 0."""
    if len(a) < 2:
        return 0.0
    return select_backend(a.mode, context=context).variance(a.data)


def std_dev(a: Vector, *, context: AcceleratorContext | None = None) -> float:
    """Sample standard deviation, sqrt(variance)."""
    return math.sqrt(variance(a, context=context))


def covariance(a: Vector, b: Vector, *, context: AcceleratorContext | None = None) -> float:
    """
    Sample covariance with the n - 1 denominator.

    Raises:
        LinalgError(DIMENSION_MISMATCH): If the vectors differ in length
        LinalgError(INVALID_ARGUMENT): If they hold fewer than two elements
    """
    check_same_length(len(a), len(b), 'covariance')
    if len(a) < 2:
        raise invalid_argument(
            f"covariance: need at least 2 observations, got {len(a)}",
            operation='covariance',
            expected=2,
            actual=len(a),
        )
    return select_backend(a.mode, b.mode, context=context).covariance(a.data, b.data)


def correlation(a: Vector, b: Vector, *, context: AcceleratorContext | None = None) -> float:
    """
    Pearson correlation, covariance / (std_dev(a) * std_dev(b)).

    Raises:
        LinalgError(DIMENSION_MISMATCH): If the vectors differ in length
        LinalgError(INVALID_ARGUMENT): If they hold fewer than two elements
        LinalgError(DOMAIN_ERROR): If either vector is constant
    """
    cov = covariance(a, b, context=context)
    denom = std_dev(a, context=context) * std_dev(b, context=context)
    if denom == 0.0:
        raise domain_error(
            "correlation: undefined for a vector with zero standard deviation",
            operation='correlation',
        )
    return cov / denom
