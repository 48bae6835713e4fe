"""
Tests for swap and replace mutation.
"""

import unittest
from collections import Counter

import numpy as np

from layout_ga.errors import SymmetryViolationError
from layout_ga.keycode import Keycode
from layout_ga.layer import LayoutPosition
from layout_ga.layout import Layout
from layout_ga.mutation import (
    check_layout_symmetry,
    moveable_positions,
    mutate,
    mutation_statistics,
    randomize_layout,
    replace_mutation,
    swap_mutation,
)


def keycode_counts(layout):
    return Counter(layout.get(p).value for p in layout.positions())


def fixed_keys(layout):
    return {p: layout.get(p) for p in layout.positions() if not layout.get(p).is_moveable}


class TestSwapMutation(unittest.TestCase):
    """Test key exchange."""

    def setUp(self):
        self.layout = Layout.from_string("""
            SFT_11 A_10 B_10 SFT_11
            SPC_00 C_10 D_10 E_10
            """, 2, 4)

    def test_swap_returns_copy(self):
        original = self.layout.copy()
        mutated, op_log = swap_mutation(self.layout, np.random.default_rng(0))
        self.assertEqual(self.layout, original)
        self.assertIsNot(mutated, self.layout)
        self.assertTrue(op_log[0].startswith("swap"))

    def test_swap_preserves_keys_and_symmetry(self):
        rng = np.random.default_rng(123)
        layout = self.layout
        for _ in range(200):
            layout, _ = swap_mutation(layout, rng)
            check_layout_symmetry(layout)
            self.assertEqual(keycode_counts(layout), keycode_counts(self.layout))
            self.assertEqual(fixed_keys(layout), fixed_keys(self.layout))

    def test_symmetric_swap_moves_mirror_pair(self):
        rng = np.random.default_rng(7)
        layout = self.layout
        moved_pair = False
        for _ in range(200):
            layout, op_log = swap_mutation(layout, rng)
            if any(op.startswith("swap (mirror)") for op in op_log):
                moved_pair = True
            symmetric = [p for p in layout.positions() if layout.get(p).is_symmetric]
            self.assertEqual(len(symmetric), 2)
            self.assertEqual(layout.symmetric_position(symmetric[0]), symmetric[1])
        self.assertTrue(moved_pair)

    def test_swap_without_partner(self):
        layout = Layout.from_string("A_10 B_00", 1, 2)
        mutated, op_log = swap_mutation(layout, np.random.default_rng(0))
        self.assertEqual(mutated, layout)
        self.assertIn("only 1", op_log[0])

    def test_swap_detects_broken_symmetry(self):
        layout = Layout.from_string("A_11 B_10\nC_10 D_10", 2, 2)
        raised = 0
        for seed in range(50):
            try:
                mutated, _ = swap_mutation(layout, np.random.default_rng(seed))
            except SymmetryViolationError as e:
                self.assertEqual(e.positions, (0, 0, 0, 1))
                raised += 1
            else:
                self.assertEqual(mutated.get(LayoutPosition(0, 0, 0)).value, Keycode.A)
        self.assertGreater(raised, 0)


class TestReplaceMutation(unittest.TestCase):
    """Test keycode replacement."""

    def test_replace_skips_fixed_keys(self):
        layout = Layout.from_string("A_00 B_10", 1, 2)
        mutated, op_log = replace_mutation(layout, np.random.default_rng(0), [Keycode.Z])
        self.assertEqual(mutated.get(LayoutPosition(0, 0, 0)).value, Keycode.A)
        self.assertEqual(mutated.get(LayoutPosition(0, 0, 1)).value, Keycode.Z)
        self.assertEqual(len(op_log), 1)

    def test_replace_symmetric_pair(self):
        layout = Layout.from_string("A_11 B_10 A_11", 1, 3)
        for seed in range(20):
            mutated, _ = replace_mutation(layout, np.random.default_rng(seed), [Keycode.Z])
            left = mutated.get(LayoutPosition(0, 0, 0))
            right = mutated.get(LayoutPosition(0, 0, 2))
            self.assertEqual(left.value, right.value)
            self.assertTrue(left.is_symmetric and right.is_symmetric)
            self.assertTrue(left.is_moveable and right.is_moveable)

    def test_replace_with_no_keycodes(self):
        layout = Layout.from_string("A_10 B_10", 1, 2)
        mutated, op_log = replace_mutation(layout, np.random.default_rng(0), [])
        self.assertEqual(mutated, layout)


class TestMutate(unittest.TestCase):
    """Test weighted operator choice."""

    def setUp(self):
        self.layout = Layout.from_string("A_10 B_10 C_10 D_10", 1, 4)

    def test_swap_only(self):
        rng = np.random.default_rng(0)
        for _ in range(20):
            _, op_log = mutate(self.layout, rng, [Keycode.Z], swap_weight=1.0, replace_weight=0.0)
            self.assertTrue(op_log[0].startswith("swap"))

    def test_replace_only(self):
        rng = np.random.default_rng(0)
        for _ in range(20):
            _, op_log = mutate(self.layout, rng, [Keycode.Z], swap_weight=0.0, replace_weight=1.0)
            self.assertTrue(op_log[0].startswith("replace"))

    def test_mutation_statistics(self):
        mutated, _ = mutate(self.layout, np.random.default_rng(1), [Keycode.Z], 1.0, 0.0)
        stats = mutation_statistics(self.layout, mutated)
        self.assertEqual(stats['total_keys'], 4)
        self.assertEqual(stats['keys_changed'], 2)


class TestRandomizeLayout(unittest.TestCase):

    def test_randomize_copy(self):
        base = Layout.from_string("__10 __10\nSPC_00 __10", 2, 2)
        randomized = randomize_layout(base, np.random.default_rng(3), [Keycode.A, Keycode.B])
        self.assertEqual(base.get(LayoutPosition(0, 0, 0)).value, Keycode.NO)
        self.assertEqual(randomized.get(LayoutPosition(0, 1, 0)).value, Keycode.SPC)
        self.assertEqual(len(moveable_positions(randomized)), 3)
        for position in moveable_positions(randomized):
            self.assertIn(randomized.get(position).value, (Keycode.A, Keycode.B))

    def test_check_layout_symmetry(self):
        with self.assertRaises(SymmetryViolationError):
            check_layout_symmetry(Layout.from_string("A_01 B_10", 1, 2))
        check_layout_symmetry(Layout.from_string("A_01 B_01", 1, 2))


if __name__ == '__main__':
    unittest.main()
