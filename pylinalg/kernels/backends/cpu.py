"""
Sequential reference backend for vector and matrix kernels.

Runs on the host. Elementwise kernels and products use NumPy; the
statistical reductions are explicit single-pass loops so that variance
follows Welford's streaming recurrence exactly.
"""

from __future__ import annotations

from typing import Any
import math
import numpy as np
from numpy.typing import NDArray


class SequentialBackend:
    """Host reference backend. Stateless; one shared instance is enough."""

    @property
    def name(self) -> str:
        return 'sequential_host'

    @property
    def offloaded(self) -> bool:
        return False

    def add(self, a: NDArray, b: NDArray) -> NDArray[np.floating[Any]]:
        return np.add(a, b, dtype=a.dtype)

    def subtract(self, a: NDArray, b: NDArray) -> NDArray[np.floating[Any]]:
        return np.subtract(a, b, dtype=a.dtype)

    def scale(self, a: NDArray, scalar: float) -> NDArray[np.floating[Any]]:
        return np.multiply(a, scalar).astype(a.dtype, copy=False)

    def dot(self, a: NDArray, b: NDArray) -> float:
        return float(np.dot(a, b))

    def norm(self, a: NDArray) -> float:
        return math.sqrt(self.dot(a, a))

    def mean(self, a: NDArray) -> float:
        total = 0.0
        for x in a.tolist():
            total += x
        return total / len(a)

    def variance(self, a: NDArray) -> float:
        """
        Bessel-corrected variance by Welford's single-pass method.

        m_i = m_{i-1} + (x_i - m_{i-1}) / i
        s_i = s_{i-1} + (x_i - m_{i-1}) * (x_i - m_i)
        var = s_n / (n - 1)
        """
        n = len(a)
        if n < 2:
            return 0.0
        values = a.tolist()
        m0 = values[0]
        s = 0.0
        for i in range(1, n):
            x = values[i]
            m1 = m0 + (x - m0) / (i + 1)
            s += (x - m0) * (x - m1)
            m0 = m1
        return s / (n - 1)

    def covariance(self, a: NDArray, b: NDArray) -> float:
        a_mean = self.mean(a)
        b_mean = self.mean(b)
        total = 0.0
        for ai, bi in zip(a.tolist(), b.tolist()):
            total += (ai - a_mean) * (bi - b_mean)
        return total / (len(a) - 1.0)

    def matmul(self, a: NDArray, b: NDArray, n: int, k: int, m: int) -> NDArray[np.floating[Any]]:
        product = np.matmul(a.reshape(n, k), b.reshape(k, m))
        return product.reshape(-1).astype(a.dtype, copy=False)
