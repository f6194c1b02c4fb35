"""
Result types for decompositions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from pylinalg.matrix.matrix import Matrix


@dataclass(frozen=True)
class QRResult:
    """
    Result of Householder QR decomposition.

    Unpacks as a pair: ``Q, R = qr_decomp(A)``.

    Attributes:
        Q: Orthogonal matrix (m x m for an m x n input)
        R: Upper triangular matrix (m x n)
        reflectors: Number of Householder reflectors applied
    """
    Q: Matrix
    R: Matrix
    reflectors: int = 0

    def __iter__(self) -> Iterator[Matrix]:
        yield self.Q
        yield self.R
