"""
Matrix: a dense rows x cols structure over one row-major Vector.

Element (r, c) lives at flat index c + r * cols of the storage vector.
Every access is bounds-checked. A matrix whose row or column count reaches
zero is normalised to the empty 0x0 matrix, so is_empty() holds exactly
when rows == cols == 0.

The matrix mode is mirrored onto its storage vector; kernels running on
the storage therefore see the same flag as the matrix.
"""

from __future__ import annotations

from typing import Any
import numbers
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pylinalg.core.exceptions import dimension_mismatch, invalid_argument
from pylinalg.core.modes import MODE_OFFLOADED, MODE_SEQUENTIAL, flipped
from pylinalg.core.tolerances import DEFAULT_COMPARISON_TOL
from pylinalg.core.validation import (
    check_index,
    check_insert_position,
    check_mode,
)
from pylinalg.vector.operations import vcomp
from pylinalg.vector.vector import Vector


class Matrix:
    """
    Dense matrix of float32 or float64 elements plus an execution mode.

    Args:
        data: Row-major elements (Vector or array-like), or None for empty.
            len(data) == rows * cols is the caller's contract; it is
            checked by every dimension-bearing operation, not here.
        rows: Number of rows
        cols: Number of columns
        mode: 'sequential' (default) or 'offloaded'
        dtype: float32 or float64, or None to follow data

    Example:
        >>> a = Matrix([1, 1, 2, 3, 4, 0], 2, 3)
        >>> a.shape
        (2, 3)
    """

    def __init__(
        self,
        data: ArrayLike | Vector | None = None,
        rows: int = 0,
        cols: int = 0,
        mode: str = MODE_SEQUENTIAL,
        dtype: Any = None,
    ):
        check_mode(mode, 'mode')
        if rows < 0 or cols < 0:
            raise invalid_argument(
                f"Matrix: negative dimensions {rows}x{cols}",
                operation='Matrix',
                actual=(rows, cols),
            )
        if data is None:
            self._storage = Vector(mode=mode, dtype=dtype)
        else:
            if dtype is None and isinstance(data, Vector):
                dtype = data.dtype
            self._storage = Vector(data, mode=mode, dtype=dtype)
        self._rows = int(rows)
        self._cols = int(cols)
        self._mode = mode
        self._normalise()

    @classmethod
    def full(
        cls,
        value: float,
        rows: int,
        cols: int,
        mode: str = MODE_SEQUENTIAL,
        dtype: Any = np.float64,
    ) -> Matrix:
        """rows x cols matrix with every element set to `value`."""
        return cls(np.full(rows * cols, value), rows, cols, mode=mode, dtype=dtype)

    @classmethod
    def from_array(
        cls,
        array: ArrayLike,
        mode: str = MODE_SEQUENTIAL,
        dtype: Any = None,
    ) -> Matrix:
        """
        Build a matrix from a 2-D array.

        Raises:
            LinalgError(INVALID_ARGUMENT): If the input is not 2-D
        """
        arr = np.asarray(array)
        if arr.ndim != 2:
            raise invalid_argument(
                f"Matrix.from_array: expected a 2-D array, got {arr.ndim}-D",
                operation='Matrix.from_array',
                expected=2,
                actual=arr.ndim,
            )
        return cls(arr.reshape(-1), arr.shape[0], arr.shape[1], mode=mode, dtype=dtype)

    @classmethod
    def _wrap(cls, data: NDArray[np.floating[Any]], rows: int, cols: int, mode: str) -> Matrix:
        # Adopt a kernel result buffer without copying it again
        matrix = cls.__new__(cls)
        matrix._storage = Vector._wrap(data, mode)
        matrix._rows = rows
        matrix._cols = cols
        matrix._mode = mode
        matrix._normalise()
        return matrix

    def _normalise(self) -> None:
        if self._rows == 0 or self._cols == 0:
            self._rows = 0
            self._cols = 0
            self._storage.clear()

    def _check_storage(self, operation: str) -> None:
        expected = self._rows * self._cols
        if len(self._storage) != expected:
            raise dimension_mismatch(
                f"{operation}: storage holds {len(self._storage)} elements, "
                f"a {self._rows}x{self._cols} matrix needs {expected}",
                operation=operation,
                expected=expected,
                actual=len(self._storage),
            )

    def _grid(self, operation: str) -> NDArray[np.floating[Any]]:
        self._check_storage(operation)
        return self._storage.data.reshape(self._rows, self._cols)

    # --- Properties -------------------------------------------------------

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def shape(self) -> tuple[int, int]:
        return (self._rows, self._cols)

    @property
    def dtype(self) -> np.dtype:
        return self._storage.dtype

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def is_offloaded(self) -> bool:
        return self._mode == MODE_OFFLOADED

    @property
    def storage(self) -> Vector:
        """The row-major backing vector (not a copy)."""
        return self._storage

    def is_empty(self) -> bool:
        return self._rows == 0 and self._cols == 0

    def clear(self) -> None:
        self._rows = 0
        self._cols = 0
        self._storage.clear()

    def copy(self) -> Matrix:
        return Matrix._wrap(self._storage.data.copy(), self._rows, self._cols, self._mode)

    def to_array(self) -> NDArray[np.floating[Any]]:
        """rows x cols numpy copy."""
        return self._grid('to_array').copy()

    def __array__(self, dtype: Any = None, copy: bool | None = None) -> NDArray[Any]:
        return np.array(self._grid('__array__'), dtype=dtype, copy=True)

    # --- Element access ---------------------------------------------------

    def getrow(self, row: int) -> Vector:
        i = check_index(row, self._rows, 'row', 'getrow')
        self._check_storage('getrow')
        start = i * self._cols
        return Vector(self._storage.data[start:start + self._cols], mode=self._mode)

    def getcol(self, col: int) -> Vector:
        j = check_index(col, self._cols, 'col', 'getcol')
        self._check_storage('getcol')
        return Vector(self._storage.data[j::self._cols], mode=self._mode)

    def getelem(self, row: int, col: int) -> float:
        i = check_index(row, self._rows, 'row', 'getelem')
        j = check_index(col, self._cols, 'col', 'getelem')
        return self._storage[j + i * self._cols]

    at = getelem

    def setelem(self, value: float, row: int, col: int) -> None:
        i = check_index(row, self._rows, 'row', 'setelem')
        j = check_index(col, self._cols, 'col', 'setelem')
        self._storage[j + i * self._cols] = value

    def __getitem__(self, key: tuple[int, int]) -> float:
        row, col = self._split_key(key)
        return self.getelem(row, col)

    def __setitem__(self, key: tuple[int, int], value: float) -> None:
        row, col = self._split_key(key)
        self.setelem(value, row, col)

    @staticmethod
    def _split_key(key: Any) -> tuple[int, int]:
        if not isinstance(key, tuple) or len(key) != 2:
            raise TypeError(f"Matrix indices must be (row, col) pairs, got {key!r}")
        return key

    # --- Structural mutation ----------------------------------------------

    def _as_line(self, values: ArrayLike | Vector) -> NDArray[np.floating[Any]]:
        line = values if isinstance(values, Vector) else Vector(values)
        return line.data.astype(self.dtype, copy=True)

    def insertrow(self, row: ArrayLike | Vector, at: int) -> None:
        """
        Insert `row` so that it becomes row number `at`.

        On an empty matrix the row defines the column count.

        Raises:
            LinalgError(DIMENSION_MISMATCH): If len(row) != cols, or at is
                outside [0, rows]
        """
        values = self._as_line(row)
        if self.is_empty():
            check_insert_position(at, 0, 'row', 'insertrow')
            if len(values) == 0:
                raise dimension_mismatch(
                    "insertrow: cannot insert an empty row",
                    operation='insertrow',
                    actual=0,
                )
            self._storage._assign(values)
            self._rows, self._cols = 1, len(values)
            return

        if len(values) != self._cols:
            raise dimension_mismatch(
                f"insertrow: row of length {len(values)} into a matrix with {self._cols} columns",
                operation='insertrow',
                expected=self._cols,
                actual=len(values),
            )
        pos = check_insert_position(at, self._rows, 'row', 'insertrow')
        grid = np.insert(self._grid('insertrow'), pos, values, axis=0)
        self._storage._assign(grid.reshape(-1))
        self._rows += 1

    def insertcol(self, col: ArrayLike | Vector, at: int) -> None:
        """
        Insert `col` so that it becomes column number `at`.

        On an empty matrix the column defines the row count.

        Raises:
            LinalgError(DIMENSION_MISMATCH): If len(col) != rows, or at is
                outside [0, cols]
        """
        values = self._as_line(col)
        if self.is_empty():
            check_insert_position(at, 0, 'col', 'insertcol')
            if len(values) == 0:
                raise dimension_mismatch(
                    "insertcol: cannot insert an empty column",
                    operation='insertcol',
                    actual=0,
                )
            self._storage._assign(values)
            self._rows, self._cols = len(values), 1
            return

        if len(values) != self._rows:
            raise dimension_mismatch(
                f"insertcol: column of length {len(values)} into a matrix with {self._rows} rows",
                operation='insertcol',
                expected=self._rows,
                actual=len(values),
            )
        pos = check_insert_position(at, self._cols, 'col', 'insertcol')
        grid = np.insert(self._grid('insertcol'), pos, values, axis=1)
        self._storage._assign(grid.reshape(-1))
        self._cols += 1

    def appendrow(self, row: ArrayLike | Vector) -> None:
        self.insertrow(row, self._rows)

    def appendcol(self, col: ArrayLike | Vector) -> None:
        self.insertcol(col, self._cols)

    def droprow(self, row: int) -> None:
        i = check_index(row, self._rows, 'row', 'droprow')
        self._check_storage('droprow')
        self._storage.erase(i * self._cols, (i + 1) * self._cols)
        self._rows -= 1
        self._normalise()

    def dropcol(self, col: int) -> None:
        j = check_index(col, self._cols, 'col', 'dropcol')
        self._check_storage('dropcol')
        # One erase per row, last row first so earlier offsets stay valid
        for i in reversed(range(self._rows)):
            self._storage.erase(j + i * self._cols)
        self._cols -= 1
        self._normalise()

    def t(self) -> Matrix:
        """Transpose: out[j, i] = self[i, j]."""
        data = np.ascontiguousarray(self._grid('t').T).reshape(-1)
        return Matrix._wrap(data, self._cols, self._rows, self._mode)

    # --- Mode -------------------------------------------------------------

    def _set_mode(self, mode: str) -> None:
        self._mode = mode
        if mode == MODE_OFFLOADED:
            self._storage.to_offloaded()
        else:
            self._storage.to_sequential()

    def to_offloaded(self) -> None:
        self._set_mode(MODE_OFFLOADED)

    def to_sequential(self) -> None:
        self._set_mode(MODE_SEQUENTIAL)

    def flip_mode(self) -> None:
        self._set_mode(flipped(self._mode))

    def with_mode(self, mode: str) -> Matrix:
        """Copy of this matrix flagged with `mode`."""
        return Matrix._wrap(self._storage.data.copy(), self._rows, self._cols, check_mode(mode, 'mode'))

    def offloaded(self) -> Matrix:
        return self.with_mode(MODE_OFFLOADED)

    def sequential(self) -> Matrix:
        return self.with_mode(MODE_SEQUENTIAL)

    # --- Comparison -------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return (
            self.shape == other.shape
            and np.array_equal(self._storage.data, other._storage.data)
        )

    __hash__ = None  # type: ignore[assignment]

    def allclose(self, other: Matrix, tol: float = DEFAULT_COMPARISON_TOL) -> bool:
        """Same shape and every element within `tol`."""
        return self.shape == other.shape and vcomp(self._storage, other._storage, tol)

    # --- Arithmetic -------------------------------------------------------

    def __add__(self, other: Matrix) -> Matrix:
        if not isinstance(other, Matrix):
            return NotImplemented
        from pylinalg.matrix.operations import add
        return add(self, other)

    def __sub__(self, other: Matrix) -> Matrix:
        if not isinstance(other, Matrix):
            return NotImplemented
        from pylinalg.matrix.operations import subtract
        return subtract(self, other)

    def __mul__(self, other: Any) -> Matrix:
        if not isinstance(other, numbers.Real):
            return NotImplemented
        from pylinalg.matrix.operations import scale
        return scale(self, other)

    __rmul__ = __mul__

    def __mod__(self, other: Matrix) -> Matrix:
        if not isinstance(other, Matrix):
            return NotImplemented
        from pylinalg.matrix.operations import matmul
        return matmul(self, other)

    __matmul__ = __mod__

    def __neg__(self) -> Matrix:
        from pylinalg.matrix.operations import scale
        return scale(self, -1.0)

    # --- Formatting -------------------------------------------------------

    def __str__(self) -> str:
        if self.is_empty():
            return '[ ]'
        lines = []
        for i in range(self._rows):
            start = i * self._cols
            row = self._storage.data[start:start + self._cols].tolist()
            lines.append('[ ' + ' '.join(str(x) for x in row) + ' ]')
        return '\n'.join(lines)

    def __repr__(self) -> str:
        return f"Matrix({self._rows}x{self._cols}, mode={self._mode!r}, dtype={self.dtype.name!r})"
