"""
Tests for device detection and selection.
"""

import pytest

from pylinalg.core.compute import DeviceInfo, get_cpu_info, select_device
from pylinalg.core.tolerances import (
    OFFLOADED_FP32,
    OFFLOADED_FP64,
    SEQUENTIAL_FP32,
    SEQUENTIAL_FP64,
    select_tolerance,
)


class TestDeviceInfo:

    def test_cpu_info(self):
        info = get_cpu_info()
        assert info.device_type == 'cpu'
        assert info.device_index is None
        assert info.supports_fp64
        assert not info.is_gpu
        assert info.torch_device == 'cpu'
        assert str(info).startswith("CPU (")

    def test_cuda_str_and_device(self):
        info = DeviceInfo('cuda', 1, 'Test GPU', 8 * 1024**3, supports_fp64=True)
        assert info.is_gpu
        assert info.torch_device == 'cuda:1'
        assert str(info) == "CUDA:1 (Test GPU, 8.0GB)"

    def test_mps_device(self):
        info = DeviceInfo('mps', 0, 'Apple Silicon GPU', None, supports_fp64=False)
        assert info.is_gpu
        assert info.torch_device == 'mps'
        assert str(info) == "MPS:0 (Apple Silicon GPU)"


class TestSelectDevice:

    def test_cpu(self):
        assert select_device('cpu').device_type == 'cpu'

    def test_unknown_preference(self):
        with pytest.raises(ValueError, match="Unknown device preference"):
            select_device('tpu')

    def test_gpu_required_but_missing(self, monkeypatch):
        monkeypatch.setattr("pylinalg.core.compute.device.detect_gpu", lambda: None)
        with pytest.raises(RuntimeError, match="no GPU available"):
            select_device('gpu')

    def test_auto_falls_back_to_cpu(self, monkeypatch):
        monkeypatch.setattr("pylinalg.core.compute.device.detect_gpu", lambda: None)
        assert select_device('auto').device_type == 'cpu'

    def test_auto_prefers_gpu(self, monkeypatch):
        gpu = DeviceInfo('cuda', 0, 'Test GPU', None, supports_fp64=True)
        monkeypatch.setattr("pylinalg.core.compute.device.detect_gpu", lambda: gpu)
        assert select_device('auto') is gpu


class TestSelectTolerance:

    @pytest.mark.parametrize("backend_name, single, expected", [
        ('sequential_host', False, SEQUENTIAL_FP64),
        ('sequential_host', True, SEQUENTIAL_FP32),
        ('offloaded_torch_cuda_fp64', False, OFFLOADED_FP64),
        ('offloaded_torch_mps_fp32', False, OFFLOADED_FP32),
        ('offloaded_host', True, OFFLOADED_FP32),
    ])
    def test_tiers(self, backend_name, single, expected):
        assert select_tolerance(backend_name, single_precision=single) is expected
