"""
Accelerator contexts for the offloaded execution path.

A context owns one in-order queue and the device buffers allocated on it.
Two implementations satisfy the AcceleratorContext protocol:

    TorchContext: buffers are PyTorch tensors on CUDA, MPS, or the torch CPU
                  device. This is the production path.
    HostContext:  buffers are host numpy arrays. Runs the full offload
                  protocol (allocate, copy, submit, synchronize, free)
                  without any accelerator, for tests and PyTorch-less hosts.

The process-wide default context is created lazily on first offloaded
operation and lives for the process. Tests and callers may replace it
(set_default_context / use_context) or pass context= explicitly.
"""

from __future__ import annotations

from collections import Counter
from contextlib import contextmanager
from typing import Any, Callable, Iterator
import logging
import warnings
import numpy as np
from numpy.typing import NDArray

from pylinalg.core.protocols import AcceleratorContext, QueueHandle
from pylinalg.core.compute.device import DeviceInfo, DevicePreference, select_device

logger = logging.getLogger(__name__)


class _ContextBase:
    """
    Queue and buffer bookkeeping shared by all contexts.

    Subclasses provide _create_queue(), the kernel tables, and the buffer
    primitives.
    """

    _elementwise_kernels: dict[str, Callable[..., None]] = {}
    _reduce_kernels: dict[str, Callable[..., Any]] = {}

    def __init__(self) -> None:
        self._queue: QueueHandle | None = None
        self._live: dict[int, Any] = {}
        self.submissions: Counter[str] = Counter()

    @property
    def live_allocations(self) -> int:
        """Number of device buffers allocated and not yet freed."""
        return len(self._live)

    def acquire_queue(self) -> QueueHandle:
        if self._queue is None:
            self._queue = self._create_queue()
            logger.debug("%s: acquired queue on %s", self.name, self._queue.device)
        return self._queue

    def _create_queue(self) -> QueueHandle:
        raise NotImplementedError

    def _track(self, buffer: Any) -> Any:
        self._live[id(buffer)] = buffer
        return buffer

    def free(self, buffer: Any) -> None:
        if self._live.pop(id(buffer), None) is None:
            raise RuntimeError(f"{self.name}: free() of a buffer this context does not own")

    def submit_elementwise(self, op: str, out: Any, *inputs: Any, **params: Any) -> None:
        kernel = self._elementwise_kernels.get(op)
        if kernel is None:
            raise ValueError(f"{self.name}: unknown elementwise kernel {op!r}")
        self.submissions[op] += 1
        kernel(out, *inputs, **params)

    def submit_reduce(self, op: str, init: float, out: Any, *inputs: Any, **params: Any) -> None:
        kernel = self._reduce_kernels.get(op)
        if kernel is None:
            raise ValueError(f"{self.name}: unknown reduce kernel {op!r}")
        self.submissions[op] += 1
        self._store_scalar(out, init, kernel(*inputs, **params))

    def submit_matmul(self, out: Any, a: Any, b: Any, n: int, k: int, m: int) -> None:
        self.submissions['matmul'] += 1
        self._matmul(out, a, b, n, k, m)

    def _store_scalar(self, out: Any, init: float, value: Any) -> None:
        raise NotImplementedError

    def _matmul(self, out: Any, a: Any, b: Any, n: int, k: int, m: int) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, live={self.live_allocations})"


# --- Host-emulated device -----------------------------------------------


def _host_add(out, a, b):
    np.add(a, b, out=out)


def _host_subtract(out, a, b):
    np.subtract(a, b, out=out)


def _host_scale(out, a, *, scalar):
    np.multiply(a, scalar, out=out)


class HostContext(_ContextBase):
    """
    Accelerator context whose device memory is emulated in host arrays.

    Follows exactly the same allocate/copy/submit/synchronize/free protocol
    as TorchContext, so the offloaded kernels can be exercised (and their
    buffer hygiene checked through live_allocations) on any machine.
    """

    _elementwise_kernels = {
        'add': _host_add,
        'subtract': _host_subtract,
        'scale': _host_scale,
    }

    _reduce_kernels = {
        'sum': lambda a: np.sum(a),
        'dot': lambda a, b: np.dot(a, b),
        'sum_squares': lambda a: np.dot(a, a),
        'centered_squares': lambda a, *, center: np.sum((a - center) ** 2),
        'centered_cross': lambda a, b, *, center_a, center_b: np.sum(
            (a - center_a) * (b - center_b)
        ),
    }

    def __init__(self, dtype: Any = np.float64):
        super().__init__()
        self.dtype = np.dtype(dtype)

    @property
    def name(self) -> str:
        return 'host'

    def _create_queue(self) -> QueueHandle:
        return QueueHandle(device='host')

    def allocate_device(self, count: int) -> NDArray[np.floating[Any]]:
        return self._track(np.empty(count, dtype=self.dtype))

    def copy_to_device(self, buffer: NDArray, host: NDArray) -> None:
        buffer[...] = host

    def copy_from_device(self, buffer: NDArray, dtype: np.dtype) -> NDArray[np.floating[Any]]:
        return np.array(buffer, dtype=dtype, copy=True)

    def synchronize(self) -> None:
        # Host "kernels" complete before submit returns
        pass

    def _store_scalar(self, out: NDArray, init: float, value: Any) -> None:
        out[0] = init + value

    def _matmul(self, out, a, b, n, k, m) -> None:
        np.matmul(a.reshape(n, k), b.reshape(k, m), out=out.reshape(n, m))


# --- PyTorch device -----------------------------------------------------


def _torch_add(out, a, b):
    import torch
    torch.add(a, b, out=out)


def _torch_subtract(out, a, b):
    import torch
    torch.sub(a, b, out=out)


def _torch_scale(out, a, *, scalar):
    import torch
    torch.mul(a, scalar, out=out)


class TorchContext(_ContextBase):
    """
    Accelerator context backed by PyTorch tensors.

    Supports CUDA (Linux/Windows), MPS (macOS Apple Silicon), and the
    torch CPU device. FP64 by default so that offloaded results match the
    sequential reference; MPS has no float64 and must use use_fp64=False.
    """

    _elementwise_kernels = {
        'add': _torch_add,
        'subtract': _torch_subtract,
        'scale': _torch_scale,
    }

    _reduce_kernels = {
        'sum': lambda a: a.sum(),
        'dot': lambda a, b: (a * b).sum(),
        'sum_squares': lambda a: (a * a).sum(),
        'centered_squares': lambda a, *, center: ((a - center) ** 2).sum(),
        'centered_cross': lambda a, b, *, center_a, center_b: (
            (a - center_a) * (b - center_b)
        ).sum(),
    }

    def __init__(
        self,
        device: DeviceInfo | DevicePreference | None = None,
        use_fp64: bool = True,
    ):
        """
        Initialize a PyTorch context.

        Args:
            device: DeviceInfo from select_device(), or a preference string
                ('cpu', 'gpu', 'auto'). None means 'auto'.
            use_fp64: If True, device buffers are float64. If False, float32
                (faster on consumer GPUs, results cast back to the operand dtype).

        Raises:
            RuntimeError: If fp64 is requested on MPS, or 'gpu' is requested
                and no GPU is available
        """
        import torch

        super().__init__()
        info = device if isinstance(device, DeviceInfo) else select_device(device or 'auto')

        if info.device_type == 'mps' and use_fp64:
            raise RuntimeError(
                "MPS does not support float64. Use use_fp64=False "
                "or a CPU/CUDA device for double precision."
            )

        self.device_info = info
        self.device = torch.device(info.torch_device)
        self.dtype = torch.float64 if use_fp64 else torch.float32
        self.use_fp64 = use_fp64

    @property
    def name(self) -> str:
        precision = 'fp64' if self.use_fp64 else 'fp32'
        return f'torch_{self.device_info.device_type}_{precision}'

    def _create_queue(self) -> QueueHandle:
        # The default CUDA stream (and the MPS/CPU executors) are in-order
        return QueueHandle(device=str(self.device))

    def allocate_device(self, count: int) -> Any:
        import torch
        return self._track(torch.empty(count, dtype=self.dtype, device=self.device))

    def copy_to_device(self, buffer: Any, host: NDArray) -> None:
        import torch
        buffer.copy_(torch.from_numpy(np.ascontiguousarray(host)))

    def copy_from_device(self, buffer: Any, dtype: np.dtype) -> NDArray[np.floating[Any]]:
        return buffer.detach().cpu().numpy().astype(dtype, copy=True)

    def synchronize(self) -> None:
        import torch
        if self.device.type == 'cuda':
            torch.cuda.synchronize(self.device)
        elif self.device.type == 'mps':
            torch.mps.synchronize()

    def _store_scalar(self, out: Any, init: float, value: Any) -> None:
        out.copy_((value + init).reshape(1))

    def _matmul(self, out, a, b, n, k, m) -> None:
        import torch
        out.copy_(torch.matmul(a.view(n, k), b.view(k, m)).reshape(-1))


# --- Process-wide default -----------------------------------------------

_default_context: AcceleratorContext | None = None


def _create_default_context() -> AcceleratorContext:
    try:
        import torch  # noqa: F401
    except ImportError as e:
        raise RuntimeError(
            "Offloaded execution requires PyTorch. Install pylinalg[gpu], "
            "or install a context with set_default_context()."
        ) from e

    device = select_device('auto')
    if not device.is_gpu:
        warnings.warn("No GPU available, offloaded operations run on the PyTorch CPU device")
    context = TorchContext(device, use_fp64=device.supports_fp64)
    logger.debug("created default accelerator context %s", context.name)
    return context


def get_default_context() -> AcceleratorContext:
    """
    Return the process-wide context, creating it on first use.

    Raises:
        RuntimeError: If no context was installed and PyTorch is missing
    """
    global _default_context
    if _default_context is None:
        _default_context = _create_default_context()
    return _default_context


def set_default_context(context: AcceleratorContext | None) -> AcceleratorContext | None:
    """
    Install `context` as the process-wide default.

    Passing None resets to lazy creation. Returns the previous default.
    """
    global _default_context
    previous = _default_context
    _default_context = context
    return previous


@contextmanager
def use_context(context: AcceleratorContext) -> Iterator[AcceleratorContext]:
    """
    Temporarily install `context` as the default.

    Usage:
        with use_context(HostContext()) as ctx:
            c = a.offloaded() + b.offloaded()
        assert ctx.live_allocations == 0
    """
    previous = set_default_context(context)
    try:
        yield context
    finally:
        set_default_context(previous)


def resolve_context(context: AcceleratorContext | None = None) -> AcceleratorContext:
    """Return `context` if given, else the process-wide default."""
    return context if context is not None else get_default_context()
