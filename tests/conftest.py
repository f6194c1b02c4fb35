"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from pylinalg.core.compute import HostContext, set_default_context


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def host_context():
    """
    Fresh host-emulated accelerator installed as the default context.

    The previous default is restored afterwards, so offloaded operations in
    one test never see buffers or submissions from another.
    """
    ctx = HostContext()
    previous = set_default_context(ctx)
    yield ctx
    set_default_context(previous)


@pytest.fixture
def make_spd(rng):
    """Factory for well-conditioned symmetric positive-definite arrays."""
    def factory(n):
        M = rng.standard_normal((n, n))
        return M @ M.T + n * np.eye(n)
    return factory


@pytest.fixture
def make_general(rng):
    """Factory for well-conditioned general square arrays."""
    def factory(n):
        return rng.standard_normal((n, n)) + n * np.eye(n)
    return factory
