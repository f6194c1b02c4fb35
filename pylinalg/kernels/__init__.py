"""
Elementwise and reduction kernels with sequential and offloaded
implementations, plus the dispatch policy that chooses between them.
"""

from pylinalg.kernels.backends import OffloadedBackend, SequentialBackend
from pylinalg.kernels.dispatch import select_backend, sequential_backend, wants_offload

__all__ = [
    "OffloadedBackend",
    "SequentialBackend",
    "select_backend",
    "sequential_backend",
    "wants_offload",
]
