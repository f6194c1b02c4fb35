"""
Kernel backends.
"""

from pylinalg.kernels.backends.cpu import SequentialBackend
from pylinalg.kernels.backends.gpu import OffloadedBackend

__all__ = ['SequentialBackend', 'OffloadedBackend']
