"""
Vector: a resizable float buffer tagged with an execution mode.

The mode never affects the values held, only which kernel implementation
arithmetic is dispatched to (see pylinalg.kernels.dispatch).
"""

from __future__ import annotations

from typing import Any, Iterator
import numbers
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pylinalg.core.exceptions import dimension_mismatch
from pylinalg.core.modes import MODE_OFFLOADED, MODE_SEQUENTIAL, flipped
from pylinalg.core.tolerances import DEFAULT_COMPARISON_TOL
from pylinalg.core.validation import (
    as_float_buffer,
    check_float_dtype,
    check_index,
    check_insert_position,
    check_mode,
)


class Vector:
    """
    Ordered sequence of float32 or float64 elements plus an execution mode.

    The vector exclusively owns a contiguous 1-D numpy buffer; constructors
    always copy their input. len() is the sole size.

    Args:
        elements: Initial elements (any 1-D array-like), or None for empty
        mode: 'sequential' (default) or 'offloaded'
        dtype: float32 or float64. None keeps a float input's dtype and
            promotes integers to float64.

    Example:
        >>> v = Vector([3.0, 4.0], mode='offloaded')
        >>> len(v), v.mode
        (2, 'offloaded')
    """

    def __init__(
        self,
        elements: ArrayLike | Vector | None = None,
        mode: str = MODE_SEQUENTIAL,
        dtype: Any = None,
    ):
        self._mode = check_mode(mode, 'mode')
        if elements is None:
            self._data = np.empty(0, dtype=check_float_dtype(dtype if dtype is not None else np.float64, 'dtype'))
        else:
            if isinstance(elements, Vector):
                elements = elements._data
            self._data = as_float_buffer(elements, 'elements', dtype)

    @classmethod
    def full(
        cls,
        size: int,
        fill_value: float = 0.0,
        mode: str = MODE_SEQUENTIAL,
        dtype: Any = np.float64,
    ) -> Vector:
        """Vector of `size` copies of `fill_value`."""
        if size < 0:
            raise dimension_mismatch(
                f"Vector.full: negative size {size}",
                operation='Vector.full',
                actual=size,
            )
        return cls._wrap(
            np.full(size, fill_value, dtype=check_float_dtype(dtype, 'dtype')),
            check_mode(mode, 'mode'),
        )

    @classmethod
    def _wrap(cls, data: NDArray[np.floating[Any]], mode: str) -> Vector:
        # Adopt a buffer produced by a kernel without copying it again
        vector = cls.__new__(cls)
        vector._data = data
        vector._mode = mode
        return vector

    def _assign(self, data: NDArray[np.floating[Any]]) -> None:
        self._data = np.ascontiguousarray(data, dtype=self._data.dtype)

    # --- Properties -------------------------------------------------------

    @property
    def data(self) -> NDArray[np.floating[Any]]:
        """Raw buffer, for kernel interop. Writes go straight to the vector."""
        return self._data

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def is_offloaded(self) -> bool:
        return self._mode == MODE_OFFLOADED

    @property
    def size(self) -> int:
        return len(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def is_empty(self) -> bool:
        return len(self._data) == 0

    # --- Element access ---------------------------------------------------

    def __getitem__(self, index: int) -> float:
        i = check_index(index, len(self._data), 'element', 'Vector.__getitem__')
        return float(self._data[i])

    def __setitem__(self, index: int, value: float) -> None:
        i = check_index(index, len(self._data), 'element', 'Vector.__setitem__')
        self._data[i] = value

    def __iter__(self) -> Iterator[float]:
        return iter(self._data.tolist())

    def tolist(self) -> list[float]:
        return self._data.tolist()

    def copy(self) -> Vector:
        return Vector._wrap(self._data.copy(), self._mode)

    def __array__(self, dtype: Any = None, copy: bool | None = None) -> NDArray[Any]:
        return np.array(self._data, dtype=dtype, copy=True)

    # --- Mutation ---------------------------------------------------------

    def push_back(self, value: float) -> None:
        """Append one element."""
        self._data = np.append(self._data, self._data.dtype.type(value))

    def insert(self, index: int, value: float) -> None:
        """Insert one element before position `index` (0 <= index <= len)."""
        i = check_insert_position(index, len(self._data), 'element', 'Vector.insert')
        self._data = np.insert(self._data, i, self._data.dtype.type(value))

    def erase(self, start: int, stop: int | None = None) -> None:
        """
        Remove the half-open range [start, stop).

        With stop omitted, removes the single element at `start`.

        Raises:
            LinalgError(DIMENSION_MISMATCH): If the range is not inside the vector
        """
        if stop is None:
            stop = start + 1
        n = len(self._data)
        if not 0 <= start <= stop <= n:
            raise dimension_mismatch(
                f"Vector.erase: range [{start}, {stop}) outside [0, {n})",
                operation='Vector.erase',
                expected=n,
                actual=(start, stop),
            )
        self._data = np.delete(self._data, slice(start, stop))

    def clear(self) -> None:
        self._data = np.empty(0, dtype=self._data.dtype)

    # --- Mode -------------------------------------------------------------

    def to_offloaded(self) -> None:
        self._mode = MODE_OFFLOADED

    def to_sequential(self) -> None:
        self._mode = MODE_SEQUENTIAL

    def flip_mode(self) -> None:
        self._mode = flipped(self._mode)

    def with_mode(self, mode: str) -> Vector:
        """Copy of this vector flagged with `mode`."""
        return Vector._wrap(self._data.copy(), check_mode(mode, 'mode'))

    def offloaded(self) -> Vector:
        return self.with_mode(MODE_OFFLOADED)

    def sequential(self) -> Vector:
        return self.with_mode(MODE_SEQUENTIAL)

    # --- Comparison -------------------------------------------------------

    def allclose(self, other: Vector, tol: float = DEFAULT_COMPARISON_TOL) -> bool:
        from pylinalg.vector.operations import vcomp
        return vcomp(self, other, tol)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return self.allclose(other)

    __hash__ = None  # type: ignore[assignment]

    # --- Arithmetic -------------------------------------------------------

    def __add__(self, other: Vector) -> Vector:
        if not isinstance(other, Vector):
            return NotImplemented
        from pylinalg.vector.operations import add
        return add(self, other)

    def __sub__(self, other: Vector) -> Vector:
        if not isinstance(other, Vector):
            return NotImplemented
        from pylinalg.vector.operations import subtract
        return subtract(self, other)

    def __mul__(self, other: Any) -> Vector | float:
        from pylinalg.vector.operations import dot, scale
        if isinstance(other, Vector):
            return dot(self, other)
        if isinstance(other, numbers.Real):
            return scale(self, other)
        return NotImplemented

    def __rmul__(self, other: Any) -> Vector:
        if not isinstance(other, numbers.Real):
            return NotImplemented
        from pylinalg.vector.operations import scale
        return scale(self, other)

    def __matmul__(self, other: Vector) -> float:
        if not isinstance(other, Vector):
            return NotImplemented
        from pylinalg.vector.operations import dot
        return dot(self, other)

    def __truediv__(self, other: Any) -> Vector:
        if not isinstance(other, numbers.Real):
            return NotImplemented
        from pylinalg.vector.operations import scale
        return scale(self, 1.0 / other)

    def __neg__(self) -> Vector:
        from pylinalg.vector.operations import scale
        return scale(self, -1.0)

    # --- Formatting -------------------------------------------------------

    def __str__(self) -> str:
        return '[' + ', '.join(str(x) for x in self._data.tolist()) + ']'

    def __repr__(self) -> str:
        return f"Vector({self._data.tolist()!r}, mode={self._mode!r}, dtype={self._data.dtype.name!r})"
