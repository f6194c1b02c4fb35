"""
Tests for the dual-mode dispatch policy.
"""

import logging

import pytest

from pylinalg.core.compute import HostContext
from pylinalg.kernels import (
    OffloadedBackend,
    SequentialBackend,
    select_backend,
    sequential_backend,
    wants_offload,
)


class TestWantsOffload:

    @pytest.mark.parametrize("modes, expected", [
        (('offloaded',), True),
        (('offloaded', 'offloaded'), True),
        (('sequential',), False),
        (('offloaded', 'sequential'), False),
        (('sequential', 'offloaded'), False),
        ((), False),
    ])
    def test_all_must_be_offloaded(self, modes, expected):
        assert wants_offload(*modes) is expected


class TestSelectBackend:

    def test_all_offloaded(self):
        ctx = HostContext()
        backend = select_backend('offloaded', 'offloaded', context=ctx)
        assert isinstance(backend, OffloadedBackend)
        assert backend.context is ctx

    def test_uses_default_context(self, host_context):
        backend = select_backend('offloaded')
        assert backend.context is host_context

    def test_sequential(self):
        backend = select_backend('sequential', 'sequential')
        assert isinstance(backend, SequentialBackend)
        assert backend is sequential_backend()

    def test_mixed_falls_back(self, caplog):
        ctx = HostContext()
        with caplog.at_level(logging.DEBUG, logger='pylinalg.kernels.dispatch'):
            backend = select_backend('offloaded', 'sequential', context=ctx)
        assert isinstance(backend, SequentialBackend)
        assert "mixed execution modes" in caplog.text

    def test_sequential_never_touches_default(self, monkeypatch):
        def fail():
            raise AssertionError("default context requested")
        monkeypatch.setattr("pylinalg.core.compute.context.get_default_context", fail)
        assert isinstance(select_backend('sequential', 'offloaded'), SequentialBackend)
