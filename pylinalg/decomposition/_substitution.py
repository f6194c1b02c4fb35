"""
Triangular substitution and triangular inversion.
"""

from __future__ import annotations

from typing import Any
import numpy as np
from numpy.typing import ArrayLike

from pylinalg.core.exceptions import singular_system
from pylinalg.core.validation import check_same_length, check_square
from pylinalg.matrix.matrix import Matrix
from pylinalg.vector.vector import Vector


def _prepare(T: Matrix, b: ArrayLike | Vector, name: str, operation: str) -> tuple[Any, Vector]:
    rhs = b if isinstance(b, Vector) else Vector(b)
    check_square(T.shape, name, operation)
    check_same_length(T.rows, len(rhs), operation)
    return T.to_array(), rhs


def _zero_pivot(operation: str, row: int):
    return singular_system(
        f"{operation}: zero on the diagonal at row {row}",
        operation=operation,
        actual=row,
    )


def forwardsolve(L: Matrix, b: ArrayLike | Vector) -> Vector:
    """
    Solve L x = b for lower-triangular L by forward substitution.

    Only the lower triangle (diagonal included) of L is read.

    Args:
        L: Square lower-triangular matrix
        b: Right-hand side, len(b) == L.rows

    Returns:
        x as a Vector with b's mode

    Raises:
        LinalgError(DIMENSION_MISMATCH): If L is not square or len(b) != L.rows
        LinalgError(SINGULAR_SYSTEM): If a diagonal entry of L is exactly 0
    """
    grid, rhs = _prepare(L, b, 'L', 'forwardsolve')
    n = L.rows
    x = np.zeros(n, dtype=np.float64)
    for m in range(n):
        pivot = grid[m, m]
        if pivot == 0:
            raise _zero_pivot('forwardsolve', m)
        x[m] = (rhs[m] - np.dot(grid[m, :m], x[:m])) / pivot
    return Vector(x, mode=rhs.mode, dtype=L.dtype)


def backsolve(U: Matrix, b: ArrayLike | Vector) -> Vector:
    """
    Solve U x = b for upper-triangular U by back substitution.

    Mirror of forwardsolve: rows are processed from last to first and only
    the upper triangle of U is read.

    Raises:
        LinalgError(DIMENSION_MISMATCH): If U is not square or len(b) != U.rows
        LinalgError(SINGULAR_SYSTEM): If a diagonal entry of U is exactly 0
    """
    grid, rhs = _prepare(U, b, 'U', 'backsolve')
    n = U.rows
    x = np.zeros(n, dtype=np.float64)
    for m in reversed(range(n)):
        pivot = grid[m, m]
        if pivot == 0:
            raise _zero_pivot('backsolve', m)
        x[m] = (rhs[m] - np.dot(grid[m, m + 1:], x[m + 1:])) / pivot
    return Vector(x, mode=rhs.mode, dtype=U.dtype)


def triangularinvert(T: Matrix, lower: bool) -> Matrix:
    """
    Invert a triangular matrix one column at a time.

    Column i of the inverse solves T x = e_i. Lower-triangular columns
    are appended in order; upper-triangular ones are solved for the basis
    vectors in reverse and inserted at column 0, which leaves them in
    ascending order.

    Raises:
        LinalgError(DIMENSION_MISMATCH): If T is not square
        LinalgError(SINGULAR_SYSTEM): If a diagonal entry of T is exactly 0
    """
    check_square(T.shape, 'T', 'triangularinvert')
    n = T.rows
    inverse = Matrix(mode=T.mode, dtype=T.dtype)

    def basis(i: int) -> Vector:
        e = Vector.full(n, 0.0, mode=T.mode, dtype=T.dtype)
        e[i] = 1.0
        return e

    if lower:
        for i in range(n):
            inverse.appendcol(forwardsolve(T, basis(i)))
    else:
        for i in reversed(range(n)):
            inverse.insertcol(backsolve(T, basis(i)), 0)
    return inverse
