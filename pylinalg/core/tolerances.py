"""
Tolerance tiers for numerical comparison.

Defines precision expectations for the different execution paths:
- Sequential FP64 (reference): host double precision
- Offloaded FP64: same as the sequential reference up to reduction order
- Offloaded FP32: relaxed for single-precision device arithmetic

Used by Vector/Matrix comparison defaults, sqrt(), and the test suite.
"""

from dataclasses import dataclass

# Element-wise tolerance used by Vector equality and Matrix.allclose()
DEFAULT_COMPARISON_TOL: float = 1e-6

# Magnitude below which sqrt() treats an element as exactly zero
SQRT_ZERO_SNAP: float = 1e-7


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance pair for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


# Host reference path
SEQUENTIAL_FP64 = ToleranceTier(
    rtol=1e-12,
    atol=1e-12,
    name='sequential_fp64',
    description='Host double precision - reference results',
)

SEQUENTIAL_FP32 = ToleranceTier(
    rtol=1e-5,
    atol=1e-6,
    name='sequential_fp32',
    description='Host single precision',
)

# Device path in double precision. Reductions may sum in a different
# order, so allow a few ulps more than the reference.
OFFLOADED_FP64 = ToleranceTier(
    rtol=1e-10,
    atol=1e-12,
    name='offloaded_fp64',
    description='Device double precision - matches sequential reference',
)

# Device path in single precision (MPS, or fp32 contexts)
OFFLOADED_FP32 = ToleranceTier(
    rtol=1e-4,
    atol=1e-5,
    name='offloaded_fp32',
    description='Device single precision - numerically equivalent',
)

# Decompositions compound rounding over O(n) products
DECOMPOSITION_FP64 = ToleranceTier(
    rtol=1e-8,
    atol=1e-9,
    name='decomposition_fp64',
    description='QR / Cholesky round trips in double precision',
)


def select_tolerance(backend_name: str, single_precision: bool = False) -> ToleranceTier:
    """Select appropriate tolerance tier for a given kernel backend."""
    if 'offloaded' in backend_name:
        if single_precision or 'fp32' in backend_name:
            return OFFLOADED_FP32
        return OFFLOADED_FP64
    if single_precision:
        return SEQUENTIAL_FP32
    return SEQUENTIAL_FP64
