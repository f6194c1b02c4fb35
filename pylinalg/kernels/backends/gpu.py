"""
Offloaded backend: vector and matrix kernels on an accelerator context.

Every kernel call is synchronous and self-contained:

    acquire queue -> allocate device buffers -> copy operands in
    -> submit kernel -> synchronize -> copy result out -> free buffers

Buffers are freed in a finally block, so a failing submission never leaks
device memory. Nothing is cached between calls and nothing is retried.
Results come back as host arrays in the first operand's dtype.
"""

from __future__ import annotations

from typing import Any
import math
import numpy as np
from numpy.typing import NDArray

from pylinalg.core.protocols import AcceleratorContext


class OffloadedBackend:
    """
    Kernel backend that submits work to an AcceleratorContext.

    Works with any context satisfying the protocol: TorchContext for real
    devices, HostContext for device-free testing.
    """

    def __init__(self, context: AcceleratorContext):
        self.context = context

    @property
    def name(self) -> str:
        return f'offloaded_{self.context.name}'

    @property
    def offloaded(self) -> bool:
        return True

    # --- Launch helpers ---------------------------------------------------

    def _launch_elementwise(
        self, op: str, *operands: NDArray, **params: Any
    ) -> NDArray[np.floating[Any]]:
        ctx = self.context
        ctx.acquire_queue()
        inputs: list[Any] = []
        out = None
        try:
            for host in operands:
                buffer = ctx.allocate_device(len(host))
                inputs.append(buffer)
                ctx.copy_to_device(buffer, host)
            out = ctx.allocate_device(len(operands[0]))
            ctx.submit_elementwise(op, out, *inputs, **params)
            ctx.synchronize()
            return ctx.copy_from_device(out, operands[0].dtype)
        finally:
            for buffer in inputs:
                ctx.free(buffer)
            if out is not None:
                ctx.free(out)

    def _launch_reduce(
        self, op: str, *operands: NDArray, init: float = 0.0, **params: Any
    ) -> float:
        ctx = self.context
        ctx.acquire_queue()
        inputs: list[Any] = []
        out = None
        try:
            for host in operands:
                buffer = ctx.allocate_device(len(host))
                inputs.append(buffer)
                ctx.copy_to_device(buffer, host)
            out = ctx.allocate_device(1)
            ctx.submit_reduce(op, init, out, *inputs, **params)
            ctx.synchronize()
            return float(ctx.copy_from_device(out, np.dtype(np.float64))[0])
        finally:
            for buffer in inputs:
                ctx.free(buffer)
            if out is not None:
                ctx.free(out)

    # --- Elementwise ------------------------------------------------------

    def add(self, a: NDArray, b: NDArray) -> NDArray[np.floating[Any]]:
        return self._launch_elementwise('add', a, b)

    def subtract(self, a: NDArray, b: NDArray) -> NDArray[np.floating[Any]]:
        return self._launch_elementwise('subtract', a, b)

    def scale(self, a: NDArray, scalar: float) -> NDArray[np.floating[Any]]:
        return self._launch_elementwise('scale', a, scalar=float(scalar))

    # --- Reductions -------------------------------------------------------

    def dot(self, a: NDArray, b: NDArray) -> float:
        return self._launch_reduce('dot', a, b)

    def norm(self, a: NDArray) -> float:
        return math.sqrt(self._launch_reduce('sum_squares', a))

    def mean(self, a: NDArray) -> float:
        return self._launch_reduce('sum', a) / len(a)

    def variance(self, a: NDArray) -> float:
        # Centered two-pass on device: the mean reduction, then the sum of
        # squared deviations about it.
        n = len(a)
        if n < 2:
            return 0.0
        center = self.mean(a)
        return self._launch_reduce('centered_squares', a, center=center) / (n - 1)

    def covariance(self, a: NDArray, b: NDArray) -> float:
        center_a = self.mean(a)
        center_b = self.mean(b)
        total = self._launch_reduce(
            'centered_cross', a, b, center_a=center_a, center_b=center_b
        )
        return total / (len(a) - 1.0)

    # --- Products ---------------------------------------------------------

    def matmul(self, a: NDArray, b: NDArray, n: int, k: int, m: int) -> NDArray[np.floating[Any]]:
        ctx = self.context
        ctx.acquire_queue()
        buffers: list[Any] = []
        try:
            dev_a = ctx.allocate_device(n * k)
            buffers.append(dev_a)
            dev_b = ctx.allocate_device(k * m)
            buffers.append(dev_b)
            dev_c = ctx.allocate_device(n * m)
            buffers.append(dev_c)
            ctx.copy_to_device(dev_a, a)
            ctx.copy_to_device(dev_b, b)
            ctx.submit_matmul(dev_c, dev_a, dev_b, n, k, m)
            ctx.synchronize()
            return ctx.copy_from_device(dev_c, a.dtype)
        finally:
            for buffer in buffers:
                ctx.free(buffer)
