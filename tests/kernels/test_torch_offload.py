"""
Offloaded execution on a real PyTorch context.

Runs on the torch CPU device everywhere, and additionally on the detected
GPU when there is one. Skipped if PyTorch is not installed.
"""

from __future__ import annotations

import numpy as np
import pytest

torch = pytest.importorskip("torch")

from pylinalg import Matrix, TorchContext, Vector, identity, invert, qr_decomp
from pylinalg.core.compute import detect_gpu
from pylinalg.core.tolerances import select_tolerance
from pylinalg.kernels import OffloadedBackend
from pylinalg.matrix import matmul
from pylinalg.vector import add, covariance, dot, magnitude, mean, scale, variance

GPU = detect_gpu()

CONTEXTS = ['cpu'] + (['gpu'] if GPU is not None else [])


@pytest.fixture(params=CONTEXTS)
def torch_context(request):
    if request.param == 'cpu':
        return TorchContext('cpu')
    return TorchContext(GPU, use_fp64=GPU.supports_fp64)


@pytest.fixture
def tol(torch_context):
    tier = select_tolerance(OffloadedBackend(torch_context).name)
    return max(tier.rtol, 1e-10)


class TestTorchVector:

    def test_add(self, torch_context):
        a = Vector([3, 4, 2], mode='offloaded')
        b = Vector([5, 5, 5], mode='offloaded')
        result = add(a, b, context=torch_context)
        assert result.mode == 'offloaded'
        assert result == Vector([8, 9, 7])
        assert torch_context.live_allocations == 0

    def test_reductions(self, torch_context, rng, tol):
        x = rng.standard_normal(300)
        y = rng.standard_normal(300)
        seq_x, seq_y = Vector(x), Vector(y)
        off_x, off_y = seq_x.offloaded(), seq_y.offloaded()
        ctx = torch_context

        assert dot(off_x, off_y, context=ctx) == pytest.approx(dot(seq_x, seq_y), rel=tol)
        assert magnitude(off_x, context=ctx) == pytest.approx(magnitude(seq_x), rel=tol)
        assert mean(off_x, context=ctx) == pytest.approx(mean(seq_x), rel=tol, abs=tol)
        assert variance(off_x, context=ctx) == pytest.approx(variance(seq_x), rel=tol)
        assert covariance(off_x, off_y, context=ctx) == pytest.approx(
            covariance(seq_x, seq_y), rel=tol, abs=tol,
        )
        assert ctx.live_allocations == 0

    def test_float32_operands(self, torch_context):
        a = Vector([1.0, 2.0], mode='offloaded', dtype=np.float32)
        result = scale(a, 2.0, context=torch_context)
        assert result.dtype == np.float32
        assert result == Vector([2.0, 4.0])


class TestTorchMatrix:

    def test_product(self, torch_context):
        A = Matrix([1, 1, 2, 3, 4, 0], 2, 3, mode='offloaded')
        B = Matrix([8, 9, 8, 9, 4, 5], 3, 2, mode='offloaded')
        assert matmul(A, B, context=torch_context) == Matrix([24, 28, 56, 63], 2, 2)
        assert torch_context.submissions['matmul'] == 1

    def test_qr(self, torch_context, rng, tol):
        a = rng.standard_normal((5, 5))
        Q, R = qr_decomp(Matrix.from_array(a, mode='offloaded'), context=torch_context)
        check = 1e-4 if tol > 1e-6 else 1e-9
        assert (Q.sequential() % R.sequential()).allclose(Matrix.from_array(a), tol=check)
        assert torch_context.live_allocations == 0

    def test_invert(self, torch_context, make_spd, tol):
        A = Matrix.from_array(make_spd(4), mode='offloaded')
        check = 1e-3 if tol > 1e-6 else 1e-9
        for algorithm in ('qr', 'spd'):
            inverse = invert(A, algorithm, context=torch_context)
            assert inverse.mode == 'offloaded'
            product = A.sequential() % inverse.sequential()
            assert product.allclose(identity(4), tol=check)
