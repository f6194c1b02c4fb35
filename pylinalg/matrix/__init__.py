"""
Dense matrices and matrix arithmetic.
"""

from pylinalg.matrix.matrix import Matrix
from pylinalg.matrix.operations import (
    add,
    subtract,
    scale,
    matmul,
    transpose,
    sqrt,
    diag,
    identity,
)

__all__ = [
    "Matrix",
    "add",
    "subtract",
    "scale",
    "matmul",
    "transpose",
    "sqrt",
    "diag",
    "identity",
]
