"""
Core infrastructure for pylinalg.

This module provides shared abstractions used by the vector, matrix, and
decomposition subpackages.

Key components:
    exceptions: LinalgError tagged with an ErrorKind
    validation: Input validators
    modes: Execution mode constants
    protocols: AcceleratorContext, KernelBackend protocols
    tolerances: Comparison tolerances and tiers
    compute: Device detection and accelerator contexts
"""

from pylinalg.core.exceptions import ErrorKind, LinalgError, PyLinalgError
from pylinalg.core.modes import MODE_OFFLOADED, MODE_SEQUENTIAL
from pylinalg.core.protocols import AcceleratorContext, KernelBackend, QueueHandle

__all__ = [
    # Exceptions
    "ErrorKind",
    "LinalgError",
    "PyLinalgError",
    # Modes
    "MODE_OFFLOADED",
    "MODE_SEQUENTIAL",
    # Protocols
    "AcceleratorContext",
    "KernelBackend",
    "QueueHandle",
]
