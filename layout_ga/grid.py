"""
Fixed-dimension 2-D container.

The foundation for keycode layers, effort grids and phalanx grids. The row
and column counts are fixed when the grid is built and never change.
"""

import copy
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from .errors import ColMismatchError, OutOfBoundsError, RowMismatchError


class Grid:
    """
    Rectangular row-major container holding one value per cell.

    Attributes:
        num_rows: Number of rows (R)
        num_cols: Number of columns (C)
    """

    __slots__ = ("_num_rows", "_num_cols", "_cells")

    def __init__(self, num_rows: int, num_cols: int, fill: Any = None):
        if num_rows <= 0 or num_cols <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {num_rows}x{num_cols}")
        self._num_rows = num_rows
        self._num_cols = num_cols
        self._cells = [[copy.copy(fill) for _ in range(num_cols)] for _ in range(num_rows)]

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[Sequence[Any]],
        num_rows: Optional[int] = None,
        num_cols: Optional[int] = None
    ) -> "Grid":
        """
        Build a grid from row-major input.

        Args:
            rows: Sequence of rows, each a sequence of cell values
            num_rows: Declared row count (defaults to len(rows))
            num_cols: Declared column count (defaults to len(rows[0]))

        Returns:
            New Grid holding the given values

        Raises:
            RowMismatchError: If the row count differs from num_rows
            ColMismatchError: If any row length differs from num_cols
        """
        if num_rows is None:
            num_rows = len(rows)
        if len(rows) != num_rows or num_rows == 0:
            raise RowMismatchError(num_rows, len(rows))
        if num_cols is None:
            num_cols = len(rows[0])
        for row in rows:
            if len(row) != num_cols:
                raise ColMismatchError(num_cols, len(row))

        grid = cls.__new__(cls)
        grid._num_rows = num_rows
        grid._num_cols = num_cols
        grid._cells = [list(row) for row in rows]
        return grid

    @property
    def num_rows(self) -> int:
        return self._num_rows

    @property
    def num_cols(self) -> int:
        return self._num_cols

    @property
    def shape(self) -> Tuple[int, int]:
        return (self._num_rows, self._num_cols)

    def _check(self, row: int, col: int) -> None:
        if not (0 <= row < self._num_rows and 0 <= col < self._num_cols):
            raise OutOfBoundsError(row, col)

    def get(self, row: int, col: int) -> Any:
        """Return the value stored at (row, col)."""
        self._check(row, col)
        return self._cells[row][col]

    # Values are stored by reference, so the live object is what get returns.
    get_mut = get

    def set(self, row: int, col: int, value: Any) -> None:
        """Replace the value stored at (row, col)."""
        self._check(row, col)
        self._cells[row][col] = value

    def rows(self) -> List[List[Any]]:
        """Return a shallow copy of the rows."""
        return [list(row) for row in self._cells]

    def cells(self) -> Iterator[Tuple[int, int, Any]]:
        """Iterate (row, col, value) in row-major order."""
        for r, row in enumerate(self._cells):
            for c, value in enumerate(row):
                yield r, c, value

    def copy(self) -> "Grid":
        """Deep copy; the new grid shares no cell objects with this one."""
        return Grid.from_rows(copy.deepcopy(self._cells), self._num_rows, self._num_cols)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self.shape == other.shape and self._cells == other._cells

    def __repr__(self) -> str:
        return f"Grid({self._num_rows}x{self._num_cols})"
