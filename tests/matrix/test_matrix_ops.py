"""
Tests for matrix arithmetic, sqrt/diag/identity, and dual-mode dispatch.
"""

import numpy as np
import pytest

from pylinalg import ErrorKind, HostContext, LinalgError, Matrix
from pylinalg.matrix import add, diag, identity, matmul, scale, sqrt, subtract, transpose


@pytest.fixture
def pair(rng):
    A = Matrix.from_array(rng.standard_normal((3, 4)))
    B = Matrix.from_array(rng.standard_normal((3, 4)))
    return A, B


# ═══════════════════════════════════════════════════════════════════════
# Algebraic properties
# ═══════════════════════════════════════════════════════════════════════


class TestProperties:

    def test_add_then_subtract(self, pair):
        A, B = pair
        assert ((A + B) - B).allclose(A, tol=1e-12)

    def test_add_commutes(self, pair):
        A, B = pair
        assert A + B == B + A

    def test_double_transpose(self, rng):
        A = Matrix.from_array(rng.standard_normal((4, 4)))
        assert A.t().t() == A

    def test_product_transpose(self, rng):
        A = Matrix.from_array(rng.standard_normal((3, 4)))
        B = Matrix.from_array(rng.standard_normal((4, 2)))
        assert (A % B).t().allclose(B.t() % A.t(), tol=1e-12)

    def test_matches_numpy(self, rng):
        a, b = rng.standard_normal((5, 3)), rng.standard_normal((3, 6))
        product = matmul(Matrix.from_array(a), Matrix.from_array(b))
        assert product.shape == (5, 6)
        np.testing.assert_allclose(product.to_array(), a @ b, rtol=1e-12)


# ═══════════════════════════════════════════════════════════════════════
# Concrete values and errors
# ═══════════════════════════════════════════════════════════════════════


class TestArithmetic:

    def test_product(self):
        A = Matrix([1, 1, 2, 3, 4, 0], 2, 3)
        B = Matrix([8, 9, 8, 9, 4, 5], 3, 2)
        assert A % B == Matrix([24, 28, 56, 63], 2, 2)
        assert A @ B == Matrix([24, 28, 56, 63], 2, 2)

    def test_product_shape_is_outer_dims(self):
        A = Matrix.full(1.0, 2, 3)
        B = Matrix.full(1.0, 3, 5)
        assert (A % B).shape == (2, 5)

    def test_scale(self):
        A = Matrix([1, 2, 3, 4], 2, 2)
        assert A * 2 == Matrix([2, 4, 6, 8], 2, 2)
        assert 2 * A == Matrix([2, 4, 6, 8], 2, 2)
        assert scale(A, 0.5) == Matrix([0.5, 1, 1.5, 2], 2, 2)
        assert -A == Matrix([-1, -2, -3, -4], 2, 2)

    def test_free_functions(self):
        A = Matrix([1, 2, 3, 4], 2, 2)
        B = Matrix([4, 3, 2, 1], 2, 2)
        assert add(A, B) == Matrix.full(5.0, 2, 2)
        assert subtract(A, B) == Matrix([-3, -1, 1, 3], 2, 2)
        assert transpose(A) == A.t()

    def test_add_shape_mismatch(self):
        with pytest.raises(LinalgError) as exc_info:
            Matrix.full(1.0, 2, 3) + Matrix.full(1.0, 3, 2)
        assert exc_info.value.kind is ErrorKind.DIMENSION_MISMATCH

    def test_subtract_shape_mismatch(self):
        with pytest.raises(LinalgError) as exc_info:
            Matrix.full(1.0, 2, 3) - Matrix.full(1.0, 2, 2)
        assert exc_info.value.kind is ErrorKind.DIMENSION_MISMATCH

    def test_product_inner_mismatch(self):
        with pytest.raises(LinalgError) as exc_info:
            Matrix.full(1.0, 2, 3) % Matrix.full(1.0, 2, 3)
        assert exc_info.value.kind is ErrorKind.DIMENSION_MISMATCH

    def test_inconsistent_storage(self):
        bad = Matrix([1.0, 2.0, 3.0], 2, 2)
        with pytest.raises(LinalgError) as exc_info:
            bad + Matrix.full(1.0, 2, 2)
        assert exc_info.value.kind is ErrorKind.DIMENSION_MISMATCH

    def test_empty_operands(self):
        assert (Matrix() + Matrix()).is_empty()
        assert (Matrix() % Matrix()).is_empty()

    def test_operands_unchanged(self):
        A = Matrix([1, 2, 3, 4], 2, 2)
        B = Matrix([1, 0, 0, 1], 2, 2)
        A % B
        A + B
        assert A == Matrix([1, 2, 3, 4], 2, 2)
        assert B == Matrix([1, 0, 0, 1], 2, 2)


class TestSqrt:

    def test_values(self):
        assert sqrt(Matrix([9, 9, 9, 16], 2, 2)) == Matrix([3, 3, 3, 4], 2, 2)

    def test_snaps_tiny_values(self):
        result = sqrt(Matrix([-5e-8, 4.0, 5e-8, 0.0], 2, 2))
        assert result == Matrix([0.0, 2.0, 0.0, 0.0], 2, 2)

    def test_negative(self):
        with pytest.raises(LinalgError) as exc_info:
            sqrt(Matrix([4.0, -1.0], 1, 2))
        assert exc_info.value.kind is ErrorKind.DOMAIN_ERROR
        assert exc_info.value.actual == -1.0

    def test_keeps_mode(self):
        assert sqrt(Matrix([4.0], 1, 1, mode='offloaded')).mode == 'offloaded'


class TestDiagIdentity:

    def test_diag_wide(self):
        assert diag(Matrix.full(1.0, 3, 4)) == Matrix([1, 1, 1], 3, 1)

    def test_diag_values(self):
        d = diag(Matrix([1, 2, 3, 4, 5, 6], 3, 2))
        assert d == Matrix([1, 4], 2, 1)

    def test_diag_empty(self):
        assert diag(Matrix()).is_empty()

    def test_identity(self):
        np.testing.assert_array_equal(identity(3).to_array(), np.eye(3))

    def test_identity_options(self):
        eye = identity(2, mode='offloaded', dtype=np.float32)
        assert eye.mode == 'offloaded'
        assert eye.dtype == np.float32

    def test_identity_zero(self):
        assert identity(0).is_empty()

    def test_identity_is_neutral(self, rng):
        A = Matrix.from_array(rng.standard_normal((3, 3)))
        assert identity(3) % A == A
        assert A % identity(3) == A


# ═══════════════════════════════════════════════════════════════════════
# Dual-mode dispatch
# ═══════════════════════════════════════════════════════════════════════


class TestDispatch:
    """Offloaded and sequential paths agree; the result mode records the path."""

    def test_equivalence(self, pair, host_context):
        A, B = pair
        assert (A.offloaded() + B.offloaded()) == (A.sequential() + B.sequential())
        assert (A.offloaded() - B.offloaded()) == (A - B)
        assert (A.offloaded() * 3.0) == (A * 3.0)
        product_off = A.offloaded() % B.t().offloaded()
        product_seq = A % B.t()
        assert product_off.allclose(product_seq, tol=1e-12)
        assert host_context.live_allocations == 0

    def test_result_mode(self, pair, host_context):
        A, B = pair
        assert (A.offloaded() + B.offloaded()).mode == 'offloaded'
        assert (A.offloaded() + B.offloaded()).storage.mode == 'offloaded'
        assert (A.offloaded() + B).mode == 'sequential'
        assert (A.offloaded() * 2.0).mode == 'offloaded'

    def test_mixed_never_submits(self, pair, host_context):
        A, B = pair
        A.offloaded() % B.t()
        A + B.offloaded()
        assert sum(host_context.submissions.values()) == 0

    def test_concrete_product_offloaded(self, host_context):
        A = Matrix([1, 1, 2, 3, 4, 0], 2, 3, mode='offloaded')
        B = Matrix([8, 9, 8, 9, 4, 5], 3, 2, mode='offloaded')
        assert A % B == Matrix([24, 28, 56, 63], 2, 2)
        assert host_context.submissions['matmul'] == 1

    def test_shape_checked_before_dispatch(self, host_context):
        A = Matrix.full(1.0, 2, 3, mode='offloaded')
        with pytest.raises(LinalgError):
            A % A
        assert sum(host_context.submissions.values()) == 0

    def test_explicit_context(self):
        ctx = HostContext()
        A = Matrix([1, 2, 3, 4], 2, 2, mode='offloaded')
        result = matmul(A, A, context=ctx)
        assert result == Matrix([7, 10, 15, 22], 2, 2)
        assert ctx.submissions['matmul'] == 1
