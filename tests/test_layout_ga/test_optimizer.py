"""
Tests for the genetic optimizer.
"""

import unittest

import numpy as np

from layout_ga.config_loader import GeneticOptions
from layout_ga.errors import SymmetryViolationError
from layout_ga.keycode import Keycode
from layout_ga.layer import Layer, LayoutPosition
from layout_ga.layout import Layout
from layout_ga.optimizer import GeneticOptimizer, survivor_count
from layout_ga.score import ScoreEngine


BASE_LAYOUT = """
__10 __10 __10 __10 __10 __10
__10 __10 SPC_00 __10 __10 __10
"""
EFFORTS = """
3 1 1 1 1 3
4 2 1 1 2 4
"""
PHALANX = """
L:R L:M L:I R:I R:M R:R
L:R L:M L:T R:T R:M R:R
"""
KEYCODES = [Keycode.A, Keycode.E, Keycode.H, Keycode.N, Keycode.O, Keycode.S, Keycode.T]
TABLE = {
    "e": 0.2, "t": 0.15, "a": 0.12, "o": 0.1, "n": 0.08, "s": 0.07, "h": 0.06,
    "th": 0.08, "he": 0.07, "an": 0.05, "the": 0.05, " ": 0.1, "a t": 0.02,
}


class TestGeneticOptimizer(unittest.TestCase):
    """Test the evolve loop on a small board."""

    def setUp(self):
        self.base = Layout.from_string(BASE_LAYOUT, 2, 6)
        self.engine = ScoreEngine(
            Layer.effort_from_string(EFFORTS, 2, 6),
            Layer.phalanx_from_string(PHALANX, 2, 6),
        )

    def make_optimizer(self, **overrides):
        settings = dict(population_size=12, generation_count=8, fitness_cutoff=0.25, random_seed=11)
        settings.update(overrides)
        return GeneticOptimizer(self.base, self.engine, TABLE, KEYCODES, GeneticOptions(**settings))

    def test_survivor_count(self):
        self.assertEqual(survivor_count(5, 0.1), 1)
        self.assertEqual(survivor_count(10, 0.3), 3)
        self.assertEqual(survivor_count(3, 0.01), 1)
        self.assertEqual(survivor_count(5, 0.5), 3)
        self.assertEqual(survivor_count(3, 0.5), 2)

    def test_initialize_population(self):
        optimizer = self.make_optimizer()
        population = optimizer.initialize_population()
        self.assertEqual(len(population), 12)
        for candidate in population:
            self.assertIsNone(candidate.score)
            self.assertEqual(candidate.layout.get(LayoutPosition(0, 1, 2)).value, Keycode.SPC)

    def test_best_ever_is_non_increasing(self):
        result = self.make_optimizer().run()
        best_ever = [stats.best_ever for stats in result.history]
        self.assertEqual(len(best_ever), 8)
        for previous, current in zip(best_ever, best_ever[1:]):
            self.assertLessEqual(current, previous)
        self.assertEqual(result.best_score, best_ever[-1])

    def test_history_statistics_are_ordered(self):
        result = self.make_optimizer().run()
        for stats in result.history:
            self.assertLessEqual(stats.best, stats.mean + 1e-12)
            self.assertLessEqual(stats.mean, stats.worst + 1e-12)
            self.assertLessEqual(stats.best_ever, stats.best)

    def test_best_layout_matches_best_score(self):
        result = self.make_optimizer().run()
        self.assertAlmostEqual(self.engine(result.best_layout, TABLE), result.best_score)

    def test_seed_reproduces_run(self):
        first = self.make_optimizer(random_seed=99).run()
        second = self.make_optimizer(random_seed=99).run()
        self.assertEqual(first.best_layout, second.best_layout)
        self.assertEqual(first.best_score, second.best_score)
        self.assertEqual(first.seed, 99)

    def test_threaded_evaluation_matches_sequential(self):
        sequential = self.make_optimizer(max_workers=1).run()
        threaded = self.make_optimizer(max_workers=4).run()
        self.assertEqual(sequential.best_layout, threaded.best_layout)
        self.assertEqual([s.best for s in sequential.history], [s.best for s in threaded.history])

    def test_fixed_keys_never_change(self):
        result = self.make_optimizer().run()
        for candidate in result.final_population:
            self.assertEqual(candidate.layout.get(LayoutPosition(0, 1, 2)).value, Keycode.SPC)
            self.assertFalse(candidate.layout.get(LayoutPosition(0, 1, 2)).is_moveable)

    def test_step_keeps_population_size(self):
        optimizer = self.make_optimizer()
        stats = optimizer.step()
        self.assertEqual(stats.generation, 0)
        self.assertEqual(optimizer.generation, 1)
        self.assertEqual(len(optimizer.population), 12)

        # Survivors keep their scores, children wait for evaluation
        survivors = survivor_count(12, 0.25)
        self.assertTrue(all(c.score is not None for c in optimizer.population[:survivors]))
        self.assertTrue(all(c.score is None for c in optimizer.population[survivors:]))
        self.assertTrue(all(c.parent_id is not None for c in optimizer.population[survivors:]))

    def test_select_is_sorted(self):
        optimizer = self.make_optimizer()
        optimizer.initialize_population()
        optimizer.evaluate()
        survivors = optimizer.select()
        self.assertEqual(len(survivors), 3)
        scores = sorted(c.score for c in optimizer.population)
        self.assertEqual([c.score for c in survivors], scores[:3])

    def test_request_stop(self):
        optimizer = self.make_optimizer()
        seen = []

        def on_generation(stats):
            seen.append(stats.generation)
            optimizer.request_stop()

        result = optimizer.run(progress_callback=on_generation)
        self.assertEqual(seen, [0])
        self.assertEqual(result.generations_run, 1)
        self.assertEqual(len(result.history), 1)

    def test_zero_generations_rejected(self):
        optimizer = self.make_optimizer(generation_count=0)
        with self.assertRaises(ValueError):
            optimizer.run()

    def test_symmetry_violation_aborts(self):
        base = Layout.from_string("A_11 __10 __10 __10 __10 __10\n" + "__10 " * 6, 2, 6)
        optimizer = GeneticOptimizer(base, self.engine, TABLE, KEYCODES,
                                     GeneticOptions(population_size=4, generation_count=2, random_seed=1))
        with self.assertRaises(SymmetryViolationError):
            optimizer.run()

    def test_injected_rng(self):
        optimizer = GeneticOptimizer(self.base, self.engine, TABLE, KEYCODES,
                                     GeneticOptions(population_size=4, generation_count=2),
                                     rng=np.random.default_rng(0))
        result = optimizer.run()
        self.assertIsNone(result.seed)
        self.assertEqual(result.generations_run, 2)


if __name__ == '__main__':
    unittest.main()
