"""
Shared compute infrastructure for pylinalg.

This module provides hardware detection and the accelerator contexts the
offloaded kernels submit to.

IMPORTANT: This is NOT where kernels live. Those go in pylinalg.kernels.
This module only knows about devices, queues, and buffers.

Submodules:
    device: Hardware detection and device selection
    context: TorchContext, HostContext, process-wide default context
"""

from pylinalg.core.compute.device import (
    DeviceInfo,
    detect_gpu,
    get_cpu_info,
    select_device,
)
from pylinalg.core.compute.context import (
    HostContext,
    TorchContext,
    get_default_context,
    resolve_context,
    set_default_context,
    use_context,
)

__all__ = [
    # Device detection
    "DeviceInfo",
    "detect_gpu",
    "get_cpu_info",
    "select_device",
    # Contexts
    "HostContext",
    "TorchContext",
    "get_default_context",
    "resolve_context",
    "set_default_context",
    "use_context",
]
