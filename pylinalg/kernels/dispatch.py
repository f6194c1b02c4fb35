"""
Dual-mode dispatch policy.

One rule for every arithmetic operator: the offloaded backend is selected
only when ALL participating operands are flagged offloaded. Any sequential
operand sends the whole operation down the sequential path. There is no
partial offload and no automatic promotion of a sequential operand.

Callers validate operand sizes/shapes BEFORE calling select_backend(), so
a dimension error is raised identically on both paths.
"""

from __future__ import annotations

import logging

from pylinalg.core.modes import MODE_OFFLOADED
from pylinalg.core.protocols import AcceleratorContext, KernelBackend
from pylinalg.core.compute.context import resolve_context
from pylinalg.kernels.backends.cpu import SequentialBackend
from pylinalg.kernels.backends.gpu import OffloadedBackend

logger = logging.getLogger(__name__)

_SEQUENTIAL = SequentialBackend()


def sequential_backend() -> SequentialBackend:
    """Return the shared sequential backend."""
    return _SEQUENTIAL


def wants_offload(*modes: str) -> bool:
    """True iff there is at least one operand and every operand is offloaded."""
    return bool(modes) and all(mode == MODE_OFFLOADED for mode in modes)


def select_backend(
    *modes: str,
    context: AcceleratorContext | None = None,
) -> KernelBackend:
    """
    Select the kernel backend for an operation.

    Args:
        *modes: Execution mode of each operand taking part in the operation
        context: Accelerator context for the offloaded path. None uses the
            process-wide default, which is only created if it is needed.

    Returns:
        OffloadedBackend if every mode is offloaded, else SequentialBackend
    """
    if wants_offload(*modes):
        return OffloadedBackend(resolve_context(context))
    if MODE_OFFLOADED in modes:
        logger.debug("mixed execution modes %s, running sequentially", modes)
    return _SEQUENTIAL
