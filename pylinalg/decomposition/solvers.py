"""
General matrix inversion.

    invert(A, 'qr')   A = QR, A^-1 = R^-1 Q^t     any nonsingular square A
    invert(A, 'spd')  A = LL^t, A^-1 = L^-t L^-1  symmetric positive definite A

Inversion is expensive and nothing is cached; callers inverting the same
matrix repeatedly should keep the result.
"""

from __future__ import annotations

import logging

from pylinalg.core.exceptions import invalid_argument
from pylinalg.core.protocols import AcceleratorContext
from pylinalg.core.validation import check_square
from pylinalg.decomposition._cholesky import spd
from pylinalg.decomposition._householder import qr_decomp
from pylinalg.decomposition._substitution import triangularinvert
from pylinalg.matrix.matrix import Matrix
from pylinalg.matrix.operations import matmul

logger = logging.getLogger(__name__)

ALGORITHMS = ('qr', 'spd')


def invert(
    A: Matrix,
    algorithm: str = 'qr',
    *,
    context: AcceleratorContext | None = None,
) -> Matrix:
    """
    Inverse of a square matrix.

    Args:
        A: Square matrix to invert
        algorithm: 'qr' (default, general) or 'spd' (Cholesky, SPD input only)
        context: Accelerator context for the matrix products, if offloaded

    Returns:
        A^-1

    Raises:
        LinalgError(INVALID_ARGUMENT): If algorithm is not 'qr' or 'spd'
        LinalgError(DIMENSION_MISMATCH): If A is not square
        LinalgError(SINGULAR_SYSTEM): If A is singular
        LinalgError(DOMAIN_ERROR): For 'spd' on a non positive-definite A
    """
    if algorithm not in ALGORITHMS:
        raise invalid_argument(
            f"invert: unknown algorithm {algorithm!r}, expected one of {list(ALGORITHMS)}",
            operation='invert',
            expected=list(ALGORITHMS),
            actual=algorithm,
        )
    check_square(A.shape, 'A', 'invert')
    logger.debug("invert: %dx%d matrix via %s", A.rows, A.cols, algorithm)

    if algorithm == 'spd':
        return spd(A, context=context)

    Q, R = qr_decomp(A, context=context)
    return matmul(triangularinvert(R, lower=False), Q.t(), context=context)
