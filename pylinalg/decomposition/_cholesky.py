"""
Cholesky factorization and the Cholesky-based SPD inverse.
"""

from __future__ import annotations

import math
import numpy as np

from pylinalg.core.exceptions import domain_error, singular_system
from pylinalg.core.protocols import AcceleratorContext
from pylinalg.core.validation import check_square
from pylinalg.decomposition._substitution import triangularinvert
from pylinalg.matrix.matrix import Matrix
from pylinalg.matrix.operations import matmul


def cholesky(A: Matrix) -> Matrix:
    """
    Lower-triangular L with L @ L.t() == A, built column by column.

        L[j, j] = sqrt(A[j, j] - sum_{k<j} L[j, k]^2)
        L[i, j] = (A[i, j] - sum_{k<j} L[i, k] L[j, k]) / L[j, j]   for i > j

    Only the lower triangle of A is read; symmetry is not checked.

    Raises:
        LinalgError(DIMENSION_MISMATCH): If A is not square
        LinalgError(SINGULAR_SYSTEM): If a pivot radicand is exactly 0
        LinalgError(DOMAIN_ERROR): If a pivot radicand is negative, i.e.
            A is not positive definite
    """
    check_square(A.shape, 'A', 'cholesky')
    a = A.to_array().astype(np.float64)
    n = A.rows
    L = np.zeros((n, n), dtype=np.float64)

    for j in range(n):
        radicand = a[j, j] - np.dot(L[j, :j], L[j, :j])
        if radicand == 0:
            raise singular_system(
                f"cholesky: zero pivot at column {j}",
                operation='cholesky',
                actual=j,
            )
        if radicand < 0:
            raise domain_error(
                f"cholesky: matrix is not positive definite "
                f"(pivot radicand {radicand} at column {j})",
                operation='cholesky',
                actual=float(radicand),
            )
        L[j, j] = math.sqrt(radicand)
        for i in range(j + 1, n):
            L[i, j] = (a[i, j] - np.dot(L[i, :j], L[j, :j])) / L[j, j]

    return Matrix(L.reshape(-1), n, n, mode=A.mode, dtype=A.dtype)


def spd(A: Matrix, *, context: AcceleratorContext | None = None) -> Matrix:
    """
    Inverse of a symmetric positive-definite matrix via Cholesky.

    With A = L L^t, A^-1 = (L^-1)^t L^-1.

    Args:
        A: Square SPD matrix
        context: Accelerator context for the final product, if offloaded

    Returns:
        A^-1. An empty A is returned as an empty copy.

    Raises:
        LinalgError(DIMENSION_MISMATCH): If A is not square
        LinalgError(SINGULAR_SYSTEM): For a 1x1 zero matrix or a zero pivot
        LinalgError(DOMAIN_ERROR): If A is not positive definite
    """
    check_square(A.shape, 'A', 'spd')
    if A.is_empty():
        return A.copy()
    if A.shape == (1, 1):
        value = A.getelem(0, 0)
        if value == 0:
            raise singular_system(
                "spd: 1x1 matrix is zero",
                operation='spd',
                actual=value,
            )
        return Matrix([1.0 / value], 1, 1, mode=A.mode, dtype=A.dtype)

    Linv = triangularinvert(cholesky(A), lower=True)
    return matmul(Linv.t(), Linv, context=context)
