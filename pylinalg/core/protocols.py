"""
Core protocols for pylinalg.

These define structural interfaces for the two seams of the dual-mode
design: the accelerator service the kernels consume, and the kernel
backends the Vector/Matrix operators dispatch to.

We use Protocol (structural typing) rather than ABC (nominal typing) so a
test can inject any object with the right methods as a fake device.

Design Principles:
    - Minimal contracts: prescribe only what the kernels actually call
    - Synchronous: every call returns only once its effect is complete
      (after synchronize() for submissions)
    - Buffers are opaque to the caller; only the context interprets them
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Any, runtime_checkable
import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class QueueHandle:
    """
    Handle to the single in-order command queue of a context.

    Attributes:
        device: Device string the queue submits to ('cpu', 'cuda:0', 'mps', 'host')
        in_order: Always True; submissions complete in submission order
    """
    device: str
    in_order: bool = True


@runtime_checkable
class AcceleratorContext(Protocol):
    """
    Opaque device service consumed by the offloaded kernels.

    One context owns one queue. acquire_queue() is idempotent: every call
    returns the same handle. The context is read, never mutated, by the
    kernels after initialisation, apart from its buffer bookkeeping.
    """

    @property
    def name(self) -> str:
        """Context identifier, e.g. 'torch_cuda_fp64', 'host'."""
        ...

    def acquire_queue(self) -> QueueHandle:
        """Return the process-lifetime queue handle, creating it on first use."""
        ...

    def allocate_device(self, count: int) -> Any:
        """Allocate an uninitialised device buffer of `count` elements."""
        ...

    def copy_to_device(self, buffer: Any, host: NDArray[np.floating[Any]]) -> None:
        """Copy a host array into a device buffer of the same length."""
        ...

    def copy_from_device(self, buffer: Any, dtype: np.dtype) -> NDArray[np.floating[Any]]:
        """Copy a device buffer back to a new host array of `dtype`."""
        ...

    def submit_elementwise(self, op: str, out: Any, *inputs: Any, **params: Any) -> None:
        """Submit an element-wise kernel writing into `out`."""
        ...

    def submit_reduce(self, op: str, init: float, out: Any, *inputs: Any, **params: Any) -> None:
        """Submit a reduction kernel writing `init + reduction` into the 1-element `out`."""
        ...

    def submit_matmul(self, out: Any, a: Any, b: Any, n: int, k: int, m: int) -> None:
        """Submit a row-major (n x k) @ (k x m) product writing into `out`."""
        ...

    def synchronize(self) -> None:
        """Block until every submitted kernel has completed."""
        ...

    def free(self, buffer: Any) -> None:
        """Release a device buffer."""
        ...


@runtime_checkable
class KernelBackend(Protocol):
    """
    Protocol for elementwise and reduction kernel implementations.

    Kernels take and return host numpy buffers; an offloading backend
    moves data to and from its device internally. Operands have already
    been validated by the caller (same sizes, compatible shapes).
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Convention: '{path}_{device}' e.g. 'sequential_host', 'offloaded_torch_cuda_fp64'
        """
        ...

    @property
    def offloaded(self) -> bool:
        """True if results are produced on an accelerator."""
        ...

    def add(self, a: NDArray, b: NDArray) -> NDArray: ...

    def subtract(self, a: NDArray, b: NDArray) -> NDArray: ...

    def scale(self, a: NDArray, scalar: float) -> NDArray: ...

    def dot(self, a: NDArray, b: NDArray) -> float: ...

    def norm(self, a: NDArray) -> float: ...

    def mean(self, a: NDArray) -> float: ...

    def variance(self, a: NDArray) -> float: ...

    def covariance(self, a: NDArray, b: NDArray) -> float: ...

    def matmul(self, a: NDArray, b: NDArray, n: int, k: int, m: int) -> NDArray: ...
