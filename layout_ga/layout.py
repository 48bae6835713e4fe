"""
Multi-layer keyboard layouts.

A layout is an ordered list of keycode layers sharing the same dimensions,
addressed together by LayoutPosition. Layouts are written as blocks of layer
token grids, each introduced by a '___Layer <n>___' header line.
"""

import re
from typing import Dict, Iterator, List, Sequence

import numpy as np

from .errors import ColMismatchError, LayerIndexOutOfRangeError, RowMismatchError
from .key import KeycodeKey
from .keycode import Keycode
from .layer import Layer, LayoutPosition

LAYER_HEADER = re.compile(r"^___Layer\s+(\d+)___$")


class Layout:
    """
    Ordered collection of keycode layers.

    Attributes:
        layers: Layers in index order; all share num_rows x num_cols
    """

    def __init__(self, layers: Sequence[Layer]):
        if not layers:
            raise ValueError("A layout must contain at least one layer")
        shape = layers[0].shape
        for layer in layers[1:]:
            if layer.shape[0] != shape[0]:
                raise RowMismatchError(shape[0], layer.shape[0])
            if layer.shape[1] != shape[1]:
                raise ColMismatchError(shape[1], layer.shape[1])
        self.layers: List[Layer] = list(layers)

    @classmethod
    def init_blank(cls, num_layers: int, num_rows: int, num_cols: int) -> "Layout":
        return cls([Layer.init_blank(num_rows, num_cols) for _ in range(num_layers)])

    @property
    def num_layers(self) -> int:
        return len(self.layers)

    @property
    def num_rows(self) -> int:
        return self.layers[0].num_rows

    @property
    def num_cols(self) -> int:
        return self.layers[0].num_cols

    def layer(self, layer_index: int) -> Layer:
        if not 0 <= layer_index < len(self.layers):
            raise LayerIndexOutOfRangeError(layer_index, len(self.layers))
        return self.layers[layer_index]

    def get(self, position: LayoutPosition) -> KeycodeKey:
        """Copy of the key at position."""
        return self.layer(position.layer_index).get(position.row_index, position.col_index)

    def get_mut(self, position: LayoutPosition) -> KeycodeKey:
        """Live key at position."""
        return self.layer(position.layer_index).get_mut(position.row_index, position.col_index)

    def set(self, position: LayoutPosition, key: KeycodeKey) -> None:
        self.layer(position.layer_index).set(position.row_index, position.col_index, key)

    def symmetric_position(self, position: LayoutPosition) -> LayoutPosition:
        return self.layer(position.layer_index).symmetric_position(position)

    def positions(self) -> Iterator[LayoutPosition]:
        """All positions, layer by layer in row-major order."""
        for layer_index, layer in enumerate(self.layers):
            for row, col, _ in layer.cells():
                yield LayoutPosition(layer_index, row, col)

    def keycode_index(self) -> Dict[Keycode, List[LayoutPosition]]:
        """Map each keycode present to the positions holding it."""
        index: Dict[Keycode, List[LayoutPosition]] = {}
        for layer_index, layer in enumerate(self.layers):
            for row, col, key in layer.cells():
                index.setdefault(key.value, []).append(LayoutPosition(layer_index, row, col))
        return index

    def find_keycode(self, keycode: Keycode) -> List[LayoutPosition]:
        return self.keycode_index().get(keycode, [])

    def randomize(self, rng: np.random.Generator, candidate_values: Sequence[Keycode]) -> None:
        """Randomize every layer in order; see Layer.randomize."""
        for layer in self.layers:
            layer.randomize(rng, candidate_values)

    def copy(self) -> "Layout":
        return Layout([layer.copy() for layer in self.layers])

    # ------------------------------------------------------------------
    # Text format
    # ------------------------------------------------------------------

    @classmethod
    def from_string(cls, layout_string: str, num_rows: int, num_cols: int) -> "Layout":
        """
        Parse '___Layer <n>___' delimited blocks of keycode tokens.

        Text without any header is read as a single layer. Blocks are
        ordered as they appear.

        Raises:
            RowMismatchError, ColMismatchError, InvalidTokenError: From the per-layer parser
        """
        blocks: List[List[str]] = []
        current: List[str] = []
        for line in layout_string.split("\n"):
            if LAYER_HEADER.match(line.strip()):
                if blocks or any(l.strip() for l in current):
                    blocks.append(current)
                current = []
            else:
                current.append(line)
        blocks.append(current)

        layers = [Layer.from_string("\n".join(block), num_rows, num_cols) for block in blocks]
        return cls(layers)

    def to_string(self) -> str:
        parts = []
        for i, layer in enumerate(self.layers):
            parts.append(f"___Layer {i}___\n{layer.to_string()}")
        return "".join(parts)

    def render(self) -> str:
        return "\n".join(f"___Layer {i}___\n{layer.render()}" for i, layer in enumerate(self.layers))

    def render_binary(self) -> str:
        return "\n".join(f"___Layer {i}___\n{layer.render_binary()}" for i, layer in enumerate(self.layers))

    def __str__(self) -> str:
        return self.render()

    def __eq__(self, other) -> bool:
        if not isinstance(other, Layout):
            return NotImplemented
        return self.layers == other.layers

    def __repr__(self) -> str:
        return f"Layout({self.num_layers} layers, {self.num_rows}x{self.num_cols})"
