"""
Keyboard layers.

A layer is a grid of cells for one shift/function state of the keyboard.
Keycode layers hold KeycodeKey cells; the same class also holds per-position
effort weights (floats) and hand/finger assignments (PhalanxKey).
"""

import copy
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Sequence, Tuple

import numpy as np

from .errors import ColMismatchError, RowMismatchError, SymmetryViolationError
from .grid import Grid
from .key import CELL_WIDTH, KeycodeKey, PhalanxKey, cell_to_token, parse_effort_token
from .keycode import Keycode


@dataclass(frozen=True)
class LayoutPosition:
    """Coordinate of a cell in a multi-layer layout."""
    layer_index: int
    row_index: int
    col_index: int

    @classmethod
    def for_layer(cls, row_index: int, col_index: int, layer_index: int = 0) -> "LayoutPosition":
        return cls(layer_index=layer_index, row_index=row_index, col_index=col_index)

    @property
    def cell(self) -> Tuple[int, int]:
        return (self.row_index, self.col_index)


class Layer:
    """
    Fixed R x C grid of cells with left-right symmetry lookup.

    Attributes:
        num_rows: Row count (R)
        num_cols: Column count (C)
    """

    def __init__(self, grid: Grid):
        self._grid = grid

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Any]], num_rows: int = None, num_cols: int = None) -> "Layer":
        """Build a layer from row-major values; see Grid.from_rows."""
        return cls(Grid.from_rows(rows, num_rows, num_cols))

    @classmethod
    def filled(cls, num_rows: int, num_cols: int, value: Any) -> "Layer":
        return cls(Grid(num_rows, num_cols, value))

    @classmethod
    def init_blank(cls, num_rows: int, num_cols: int) -> "Layer":
        """Every cell holds the sentinel key, moveable and not symmetric."""
        return cls.filled(num_rows, num_cols, KeycodeKey.from_keycode(Keycode.NO))

    @classmethod
    def from_string(
        cls,
        layer_string: str,
        num_rows: int,
        num_cols: int,
        parse_cell: Callable[[str], Any] = KeycodeKey.from_token
    ) -> "Layer":
        """
        Parse a whitespace-separated token grid.

        Blank lines are ignored and each line is stripped. The default cell
        parser reads '{VALUE}_{moveable}{symmetric}' keycode tokens.

        Args:
            layer_string: Text with one grid row per line
            num_rows: Expected number of rows
            num_cols: Expected number of tokens per row
            parse_cell: Token parser for the cell type

        Returns:
            Parsed Layer

        Raises:
            RowMismatchError: If the row count is not num_rows
            ColMismatchError: If a row does not have num_cols tokens
            InvalidTokenError: If a token cannot be parsed
        """
        lines = [line.strip() for line in layer_string.split("\n")]
        lines = [line for line in lines if line]
        if len(lines) != num_rows:
            raise RowMismatchError(num_rows, len(lines))

        rows = []
        for line in lines:
            tokens = line.split()
            if len(tokens) != num_cols:
                raise ColMismatchError(num_cols, len(tokens))
            rows.append([parse_cell(token) for token in tokens])

        return cls.from_rows(rows, num_rows, num_cols)

    @classmethod
    def effort_from_string(cls, layer_string: str, num_rows: int, num_cols: int) -> "Layer":
        return cls.from_string(layer_string, num_rows, num_cols, parse_effort_token)

    @classmethod
    def phalanx_from_string(cls, layer_string: str, num_rows: int, num_cols: int) -> "Layer":
        return cls.from_string(layer_string, num_rows, num_cols, PhalanxKey.from_token)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    @property
    def num_rows(self) -> int:
        return self._grid.num_rows

    @property
    def num_cols(self) -> int:
        return self._grid.num_cols

    @property
    def shape(self) -> Tuple[int, int]:
        return self._grid.shape

    def get(self, row: int, col: int) -> Any:
        """Copy of the cell at (row, col)."""
        return copy.copy(self._grid.get(row, col))

    def get_mut(self, row: int, col: int) -> Any:
        """The live cell at (row, col); changes to it change the layer."""
        return self._grid.get_mut(row, col)

    def set(self, row: int, col: int, value: Any) -> None:
        self._grid.set(row, col, value)

    def get_from_layout_position(self, position: LayoutPosition) -> Any:
        return self.get(position.row_index, position.col_index)

    def cells(self) -> Iterator[Tuple[int, int, Any]]:
        """Iterate (row, col, live cell) in row-major order."""
        return self._grid.cells()

    def values(self) -> List[List[Any]]:
        return self._grid.rows()

    def symmetric_position(self, position: LayoutPosition) -> LayoutPosition:
        """Mirror a position left-right; layer and row are unchanged."""
        symm_col = (self.num_cols - 1) - position.col_index
        return LayoutPosition(position.layer_index, position.row_index, symm_col)

    def check_symmetry(self, row: int, col: int) -> None:
        """
        Validate the pairing of a symmetric cell.

        Raises:
            SymmetryViolationError: If (row, col) is symmetric and its mirror is not
        """
        key = self._grid.get(row, col)
        if not key.is_symmetric:
            return
        symm = self.symmetric_position(LayoutPosition.for_layer(row, col))
        if not self._grid.get(symm.row_index, symm.col_index).is_symmetric:
            raise SymmetryViolationError(row, col, symm.row_index, symm.col_index)

    def randomize(self, rng: np.random.Generator, candidate_values: Sequence[Keycode]) -> None:
        """
        Assign random keycodes to every free cell.

        Cells are visited in row-major order. Symmetric cells are validated
        against their mirror and otherwise left alone; fixed cells are
        skipped; every other cell gets a fresh key whose value is drawn
        uniformly from candidate_values.

        Args:
            rng: Random number generator
            candidate_values: Keycodes to draw from (no-op when empty)

        Raises:
            SymmetryViolationError: For the first symmetric cell whose mirror is not symmetric
        """
        for row, col, key in list(self._grid.cells()):
            if key.is_symmetric:
                self.check_symmetry(row, col)
                continue
            if not key.is_moveable:
                continue
            if len(candidate_values) > 0:
                keycode = candidate_values[int(rng.integers(len(candidate_values)))]
                self._grid.set(row, col, KeycodeKey.from_keycode(keycode))

    def copy(self) -> "Layer":
        return Layer(self._grid.copy())

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def to_string(self) -> str:
        """Token grid accepted by from_string."""
        lines = []
        for row in self._grid.rows():
            lines.append(" ".join(f"{cell_to_token(cell):<{CELL_WIDTH}}" for cell in row).rstrip())
        return "\n".join(lines) + "\n"

    def _render(self, format_cell: Callable[[Any], str], width: int) -> str:
        lines = ["  " + "".join(f"{k:>{width}} " for k in range(self.num_cols))]
        lines.append("  " + "".join(f"{'-':>{width}} " for _ in range(self.num_cols)))
        for i, row in enumerate(self._grid.rows()):
            lines.append(f"{i}|" + "".join(f"{format_cell(cell):>{width}} " for cell in row))
        return "\n".join(lines) + "\n"

    def render(self) -> str:
        """Diagnostic view: column header, then one padded row per grid row."""
        return self._render(str, CELL_WIDTH - 3)

    def render_binary(self) -> str:
        """Diagnostic view showing each key's flag bits."""
        return self._render(lambda cell: cell.to_binary(), CELL_WIDTH)

    def __str__(self) -> str:
        return self.render()

    def __eq__(self, other) -> bool:
        if not isinstance(other, Layer):
            return NotImplemented
        return self._grid == other._grid

    def __repr__(self) -> str:
        return f"Layer({self.num_rows}x{self.num_cols})"
