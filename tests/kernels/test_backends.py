"""
Tests for the sequential and offloaded kernel backends.

The sequential backend is the reference. The offloaded backend runs on a
HostContext here, which exercises the full allocate/copy/submit/free
protocol; test_torch_offload.py repeats the comparison on PyTorch.
"""

import numpy as np
import pytest

from pylinalg.core.compute import HostContext
from pylinalg.core.protocols import KernelBackend
from pylinalg.kernels import OffloadedBackend, SequentialBackend


@pytest.fixture
def seq():
    return SequentialBackend()


@pytest.fixture
def ctx():
    return HostContext()


@pytest.fixture
def off(ctx):
    return OffloadedBackend(ctx)


class TestBackendIdentity:

    def test_protocol(self, seq, off):
        assert isinstance(seq, KernelBackend)
        assert isinstance(off, KernelBackend)

    def test_names(self, seq, off):
        assert seq.name == 'sequential_host'
        assert off.name == 'offloaded_host'

    def test_offloaded_flag(self, seq, off):
        assert not seq.offloaded
        assert off.offloaded


class TestSequentialBackend:
    """Reference values for the host kernels."""

    def test_add(self, seq):
        np.testing.assert_array_equal(
            seq.add(np.array([3.0, 4.0, 2.0]), np.array([5.0, 5.0, 5.0])),
            [8.0, 9.0, 7.0],
        )

    def test_add_keeps_first_dtype(self, seq):
        a = np.array([1.0, 2.0], dtype=np.float32)
        assert seq.add(a, np.array([1.0, 1.0])).dtype == np.float32

    def test_dot(self, seq):
        a = np.array([1.0, 2.0, 5.0, 6.0])
        assert seq.dot(a, a) == 66.0

    def test_norm(self, seq):
        assert seq.norm(np.array([12.0, 5.0])) == 13.0

    def test_norm_of_negative_single_element(self, seq):
        assert seq.norm(np.array([-3.0])) == 3.0

    def test_variance(self, seq):
        assert seq.variance(np.array([1.0, 3.0, 4.0, 5.0, 6.0])) == pytest.approx(3.7)

    def test_variance_large_offset(self, seq):
        """Welford stays accurate where the naive sum-of-squares formula cancels."""
        data = 1e9 + np.array([4.0, 7.0, 13.0, 16.0])
        assert seq.variance(data) == pytest.approx(30.0, rel=1e-9)

    def test_variance_short(self, seq):
        assert seq.variance(np.array([2.0])) == 0.0

    def test_covariance(self, seq):
        a = np.array([1.0, 5.0, 6.0, 2.0])
        b = np.array([45.0, 4.0, 312.0, 41.0])
        assert seq.covariance(a, b) == pytest.approx(np.cov(a, b, ddof=1)[0, 1])

    def test_matmul(self, seq):
        a = np.array([1.0, 1.0, 2.0, 3.0, 4.0, 0.0])
        b = np.array([8.0, 9.0, 8.0, 9.0, 4.0, 5.0])
        np.testing.assert_array_equal(seq.matmul(a, b, 2, 3, 2), [24.0, 28.0, 56.0, 63.0])


class TestOffloadedMatchesSequential:
    """Every kernel gives the reference result within fp64 tolerance."""

    @pytest.fixture
    def data(self, rng):
        return rng.standard_normal(200), rng.standard_normal(200)

    def test_add(self, seq, off, data):
        a, b = data
        np.testing.assert_array_equal(off.add(a, b), seq.add(a, b))

    def test_subtract(self, seq, off, data):
        a, b = data
        np.testing.assert_array_equal(off.subtract(a, b), seq.subtract(a, b))

    def test_scale(self, seq, off, data):
        a, _ = data
        np.testing.assert_array_equal(off.scale(a, -2.5), seq.scale(a, -2.5))

    @pytest.mark.parametrize("kernel", ['dot', 'covariance'])
    def test_binary_reductions(self, seq, off, data, kernel):
        a, b = data
        assert getattr(off, kernel)(a, b) == pytest.approx(getattr(seq, kernel)(a, b), rel=1e-10)

    @pytest.mark.parametrize("kernel", ['norm', 'mean', 'variance'])
    def test_unary_reductions(self, seq, off, data, kernel):
        a, _ = data
        assert getattr(off, kernel)(a) == pytest.approx(getattr(seq, kernel)(a), rel=1e-10)

    def test_matmul(self, seq, off, rng):
        a = rng.standard_normal(12)
        b = rng.standard_normal(20)
        np.testing.assert_allclose(off.matmul(a, b, 3, 4, 5), seq.matmul(a, b, 3, 4, 5), rtol=1e-12)

    def test_result_dtype_follows_operand(self, off):
        a = np.array([1.0, 2.0], dtype=np.float32)
        assert off.add(a, a).dtype == np.float32


class TestOffloadedBufferHygiene:
    """Every device buffer is released, on success and on failure."""

    def test_no_leaks(self, ctx, off, rng):
        a, b = rng.standard_normal(10), rng.standard_normal(10)
        off.add(a, b)
        off.dot(a, b)
        off.variance(a)
        off.covariance(a, b)
        off.matmul(a[:4], b[:4], 2, 2, 2)
        assert ctx.live_allocations == 0

    def test_submission_log(self, ctx, off):
        a = np.array([1.0, 2.0, 3.0])
        off.variance(a)
        assert ctx.submissions['sum'] == 1
        assert ctx.submissions['centered_squares'] == 1

    def test_failed_submission_frees(self, rng):
        class FaultyContext(HostContext):
            def submit_elementwise(self, op, out, *inputs, **params):
                raise RuntimeError("device fault")

            def submit_reduce(self, op, init, out, *inputs, **params):
                raise RuntimeError("device fault")

        ctx = FaultyContext()
        off = OffloadedBackend(ctx)
        a = rng.standard_normal(5)
        with pytest.raises(RuntimeError, match="device fault"):
            off.add(a, a)
        with pytest.raises(RuntimeError, match="device fault"):
            off.dot(a, a)
        assert ctx.live_allocations == 0

    def test_empty_operands(self, ctx, off):
        empty = np.empty(0)
        assert off.add(empty, empty).shape == (0,)
        assert off.norm(empty) == 0.0
        assert ctx.live_allocations == 0
