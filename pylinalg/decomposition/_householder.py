"""
Householder QR decomposition.

qr_dive peels one column per call: it builds the reflector that zeroes
the leading column of the trailing block below its first entry, embeds
it in an n x n identity at the pivot offset, applies it to the block, and
recurses on the block with its leading row and column dropped. The
embedded reflectors are returned as a list rather than accumulated in a
shared container.
"""

from __future__ import annotations

import logging
import numpy as np

from pylinalg.core.protocols import AcceleratorContext
from pylinalg.decomposition.solution import QRResult
from pylinalg.matrix.matrix import Matrix
from pylinalg.matrix.operations import identity, matmul
from pylinalg.matrix.operations import scale as scale_matrix
from pylinalg.matrix.operations import subtract as subtract_matrix
from pylinalg.vector.operations import magnitude, scale, subtract, unit
from pylinalg.vector.vector import Vector

logger = logging.getLogger(__name__)


def _reflector(col0: Vector, *, context: AcceleratorContext | None = None) -> Matrix:
    """
    H = I - 2 v v^t with v = unit(col0 - alpha e0), alpha = -sign(col0[0]) ||col0||.

    The sign choice keeps col0[0] - alpha free of cancellation; sign(0) is
    taken as +1. A zero column needs no reflection and yields I.
    """
    m = len(col0)
    norm = magnitude(col0, context=context)
    sign = -1.0 if col0[0] < 0 else 1.0
    alpha = -sign * norm

    e0 = Vector.full(m, 0.0, mode=col0.mode, dtype=col0.dtype)
    e0[0] = 1.0
    u = subtract(col0, scale(e0, alpha, context=context), context=context)
    eye = identity(m, mode=col0.mode, dtype=col0.dtype)
    if magnitude(u, context=context) == 0.0:
        return eye

    v = unit(u, context=context)
    V = Matrix(v, m, 1, mode=col0.mode)
    outer = matmul(V, V.t(), context=context)
    return subtract_matrix(eye, scale_matrix(outer, 2.0, context=context), context=context)


def _embed(H: Matrix, pivot: int, n: int) -> Matrix:
    """H placed in the trailing corner of an n x n identity."""
    full = np.eye(n, dtype=H.dtype)
    full[pivot:, pivot:] = H.to_array()
    return Matrix.from_array(full, mode=H.mode)


def qr_dive(
    block: Matrix,
    pivot: int,
    n: int,
    *,
    context: AcceleratorContext | None = None,
) -> list[Matrix]:
    """
    Householder reflectors for `block`, embedded in n x n identities.

    Args:
        block: Active trailing (n - pivot) x k block
        pivot: Number of columns already reduced
        n: Row count of the matrix being decomposed

    Returns:
        [H_pivot, H_pivot+1, ...] in application order; empty once the
        trailing block is exhausted
    """
    if block.is_empty():
        return []
    logger.debug("qr_dive: pivot %d, trailing block %dx%d", pivot, block.rows, block.cols)

    H = _reflector(block.getcol(0), context=context)
    trailing = matmul(H, block, context=context)
    trailing.droprow(0)
    if not trailing.is_empty():
        trailing.dropcol(0)
    return [_embed(H, pivot, n)] + qr_dive(trailing, pivot + 1, n, context=context)


def qr_decomp(A: Matrix, *, context: AcceleratorContext | None = None) -> QRResult:
    """
    Householder QR decomposition of an m x n matrix.

    R = H_last ... H_1 H_0 A is upper triangular and
    Q = (H_last ... H_0)^t is orthogonal, so A = Q R.

    Args:
        A: Matrix to decompose, any shape
        context: Accelerator context for the products, if offloaded

    Returns:
        QRResult(Q, R); unpacks as ``Q, R``

    Example:
        >>> Q, R = qr_decomp(A)
        >>> (Q % R).allclose(A)
        True
    """
    n = A.rows
    reflectors = qr_dive(A, 0, n, context=context)

    product = identity(n, mode=A.mode, dtype=A.dtype)
    for H in reflectors:
        product = matmul(H, product, context=context)

    R = matmul(product, A, context=context)
    Q = product.t()
    return QRResult(Q=Q, R=R, reflectors=len(reflectors))
