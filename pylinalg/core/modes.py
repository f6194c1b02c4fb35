"""
Execution mode constants for pylinalg.

This module is the SINGLE SOURCE OF TRUTH for mode strings.
Import from here, never use raw strings.

Usage:
    from pylinalg.core.modes import MODE_OFFLOADED, MODE_SEQUENTIAL

    v = Vector([1.0, 2.0], mode=MODE_OFFLOADED)
"""

from typing import Literal

# Arithmetic runs on the host, one element after another
MODE_SEQUENTIAL = 'sequential'

# Arithmetic is submitted to the accelerator context
MODE_OFFLOADED = 'offloaded'

Mode = Literal['sequential', 'offloaded']

# All modes as a frozenset for validation
ALL_MODES = frozenset({
    MODE_SEQUENTIAL,
    MODE_OFFLOADED,
})


def flipped(mode: str) -> str:
    """Return the other execution mode."""
    return MODE_SEQUENTIAL if mode == MODE_OFFLOADED else MODE_OFFLOADED


__all__ = [
    'MODE_SEQUENTIAL',
    'MODE_OFFLOADED',
    'Mode',
    'ALL_MODES',
    'flipped',
]
