"""
Decompositions and solvers built on Matrix and Vector.
"""

from pylinalg.decomposition.solution import QRResult
from pylinalg.decomposition._substitution import (
    forwardsolve,
    backsolve,
    triangularinvert,
)
from pylinalg.decomposition._cholesky import cholesky, spd
from pylinalg.decomposition._householder import qr_dive, qr_decomp
from pylinalg.decomposition.solvers import ALGORITHMS, invert

__all__ = [
    "QRResult",
    "forwardsolve",
    "backsolve",
    "triangularinvert",
    "cholesky",
    "spd",
    "qr_dive",
    "qr_decomp",
    "ALGORITHMS",
    "invert",
]
