"""
Tests for multi-layer layouts and presets.
"""

import unittest
import numpy as np

from layout_ga.errors import ColMismatchError, LayerIndexOutOfRangeError, RowMismatchError
from layout_ga.key import KeycodeKey
from layout_ga.keycode import Keycode
from layout_ga.layer import Layer, LayoutPosition
from layout_ga.layout import Layout
from layout_ga.presets import LayoutPreset, load_preset


TWO_LAYERS = """
___Layer 0___
LS1_00 A_10 B_10
SFT_11 C_10 SFT_11
___Layer 1___
__00   X_10 Y_10
__10   Z_00 __10
"""


class TestLayout(unittest.TestCase):
    """Test layout parsing and position lookup."""

    def setUp(self):
        self.layout = Layout.from_string(TWO_LAYERS, 2, 3)

    def test_dimensions(self):
        self.assertEqual(self.layout.num_layers, 2)
        self.assertEqual(self.layout.num_rows, 2)
        self.assertEqual(self.layout.num_cols, 3)

    def test_get_by_position(self):
        key = self.layout.get(LayoutPosition(1, 1, 1))
        self.assertEqual(key, KeycodeKey(Keycode.Z, False, False))
        self.assertEqual(self.layout.get(LayoutPosition(0, 0, 0)).value, Keycode.LS1)

    def test_layer_index_out_of_range(self):
        with self.assertRaises(LayerIndexOutOfRangeError) as ctx:
            self.layout.get(LayoutPosition(2, 0, 0))
        self.assertEqual(ctx.exception.layer_index, 2)
        self.assertEqual(ctx.exception.num_layers, 2)

    def test_set_and_get_mut(self):
        position = LayoutPosition(1, 0, 2)
        self.layout.set(position, KeycodeKey.from_keycode(Keycode.Q))
        self.assertEqual(self.layout.get(position).value, Keycode.Q)

        self.layout.get_mut(position).value = Keycode.W
        self.assertEqual(self.layout.get(position).value, Keycode.W)

    def test_symmetric_position(self):
        mirror = self.layout.symmetric_position(LayoutPosition(1, 1, 0))
        self.assertEqual(mirror, LayoutPosition(1, 1, 2))

    def test_keycode_index(self):
        index = self.layout.keycode_index()
        self.assertEqual(index[Keycode.SFT], [LayoutPosition(0, 1, 0), LayoutPosition(0, 1, 2)])
        self.assertEqual(self.layout.find_keycode(Keycode.X), [LayoutPosition(1, 0, 1)])
        self.assertEqual(self.layout.find_keycode(Keycode.M), [])

    def test_positions_cover_every_cell(self):
        positions = list(self.layout.positions())
        self.assertEqual(len(positions), 12)
        self.assertEqual(positions[0], LayoutPosition(0, 0, 0))
        self.assertEqual(positions[-1], LayoutPosition(1, 1, 2))

    def test_string_round_trip(self):
        self.assertEqual(Layout.from_string(self.layout.to_string(), 2, 3), self.layout)

    def test_single_block_without_header(self):
        layout = Layout.from_string("A_10 B_10\nC_10 D_10\n", 2, 2)
        self.assertEqual(layout.num_layers, 1)
        self.assertEqual(layout.get(LayoutPosition(0, 1, 1)).value, Keycode.D)

    def test_block_shape_error(self):
        text = "___Layer 0___\nA_10 B_10\nC_10 D_10\n___Layer 1___\nA_10 B_10\n"
        with self.assertRaises(RowMismatchError):
            Layout.from_string(text, 2, 2)

    def test_layers_must_share_shape(self):
        with self.assertRaises(RowMismatchError):
            Layout([Layer.init_blank(2, 2), Layer.init_blank(3, 2)])
        with self.assertRaises(ColMismatchError) as ctx:
            Layout([Layer.init_blank(2, 2), Layer.init_blank(2, 3)])
        self.assertEqual((ctx.exception.expected, ctx.exception.actual), (2, 3))

    def test_copy_is_independent(self):
        clone = self.layout.copy()
        clone.get_mut(LayoutPosition(0, 0, 1)).value = Keycode.Q
        self.assertEqual(self.layout.get(LayoutPosition(0, 0, 1)).value, Keycode.A)
        self.assertNotEqual(clone, self.layout)

    def test_randomize_all_layers(self):
        layout = Layout.init_blank(2, 2, 2)
        layout.randomize(np.random.default_rng(5), [Keycode.A])
        for position in layout.positions():
            self.assertEqual(layout.get(position).value, Keycode.A)

    def test_render_has_layer_headers(self):
        rendered = self.layout.render()
        self.assertIn("___Layer 0___", rendered)
        self.assertIn("___Layer 1___", rendered)


class TestPresets(unittest.TestCase):
    """Test the built-in keyboard geometries."""

    def test_presets_parse(self):
        for preset in LayoutPreset:
            with self.subTest(preset=preset):
                layout, effort, phalanx = load_preset(preset)
                self.assertEqual(effort.shape, (layout.num_rows, layout.num_cols))
                self.assertEqual(phalanx.shape, effort.shape)

    def test_ferris_sweep(self):
        layout, effort, _ = load_preset(LayoutPreset.FERRIS_SWEEP)
        self.assertEqual((layout.num_layers, layout.num_rows, layout.num_cols), (4, 4, 10))
        self.assertEqual(layout.get(LayoutPosition(0, 3, 4)), KeycodeKey(Keycode.SPC, False, False))
        self.assertTrue(layout.get(LayoutPosition(0, 2, 0)).is_symmetric)
        self.assertTrue(layout.get(LayoutPosition(0, 2, 9)).is_symmetric)
        self.assertEqual(effort.get(1, 1), 1.0)


if __name__ == '__main__':
    unittest.main()
