"""
Tests for configuration loading and result I/O.
"""

import csv
import shutil
import tempfile
import unittest
from pathlib import Path

import yaml

from layout_ga.config_loader import (
    ConfigurationError,
    LayoutInfo,
    OptimizerConfig,
    build_layouts,
    config_from_dict,
    default_config,
    dump_config,
    load_config,
    resolve_random_seed,
    resolve_valid_keycodes,
    validate_config,
    write_config,
)
from layout_ga.io_utils import (
    export_result,
    load_frequency_table,
    load_history_csv,
    load_layout,
    save_frequency_table,
    save_history_csv,
    save_layout,
)
from layout_ga.keycode import Keycode
from layout_ga.layout import Layout
from layout_ga.optimizer import GenerationStats, OptimizationResult


class TestConfigLoader(unittest.TestCase):
    """Test YAML configuration handling."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_defaults(self):
        config = OptimizerConfig()
        genetic = config.layout_optimizer_config.genetic_options
        self.assertEqual(genetic.population_size, 5)
        self.assertEqual(genetic.generation_count, 1)
        self.assertEqual(genetic.fitness_cutoff, 0.1)
        self.assertEqual((genetic.swap_weight, genetic.replace_weight), (4.0, 1.0))

        dataset = config.layout_optimizer_config.dataset_options
        self.assertEqual((dataset.max_ngram_size, dataset.top_n_ngrams_to_take), (4, 100))

        score = config.layout_optimizer_config.score_options
        self.assertEqual(score.hand_alternation_weight, 3.0)
        self.assertEqual(score.finger_roll_weight, 2.0)
        self.assertEqual(score.same_finger_penalty_factor, 5.0)
        self.assertEqual(score.extra_length_penalty, 1.1)

    def test_default_config_is_valid(self):
        self.assertEqual(validate_config(default_config()), [])

    def test_write_and_load_round_trip(self):
        path = self.temp_dir / "config.yaml"
        config = default_config()
        config.layout_optimizer_config.genetic_options.random_seed = 42
        write_config(config, path)
        self.assertEqual(load_config(path), config)

    def test_dump_includes_option_help(self):
        text = dump_config(default_config())
        self.assertIn("# [genetic_options]", text)
        self.assertIn("# swap_weight:", text)
        self.assertIn("___Layer 0___", text)

    def test_write_refuses_overwrite(self):
        path = self.temp_dir / "config.yaml"
        write_config(default_config(), path)
        with self.assertRaises(FileExistsError):
            write_config(default_config(), path)
        write_config(default_config(), path, overwrite=True)

    def test_missing_sections_use_defaults(self):
        config = config_from_dict({"layout_optimizer_config": {"genetic_options": {"population_size": 50}}})
        self.assertEqual(config.layout_optimizer_config.genetic_options.population_size, 50)
        self.assertEqual(config.layout_optimizer_config.genetic_options.generation_count, 1)
        self.assertEqual(config.layout_info.name, "ferris_sweep")

    def test_unknown_keys_rejected(self):
        with self.assertRaises(ConfigurationError):
            config_from_dict({"genetic": {}})
        with self.assertRaises(ConfigurationError):
            config_from_dict({"layout_optimizer_config": {"genetic_options": {"mutation_rate": 0.1}}})

    def test_load_errors(self):
        with self.assertRaises(ConfigurationError):
            load_config(self.temp_dir / "missing.yaml")

        bad = self.temp_dir / "bad.yaml"
        bad.write_text("layout_info: [unclosed\n")
        with self.assertRaises(ConfigurationError):
            load_config(bad)

    def test_validation_messages(self):
        config = OptimizerConfig()
        optimizer = config.layout_optimizer_config
        optimizer.genetic_options.population_size = 0
        optimizer.genetic_options.fitness_cutoff = 1.5
        optimizer.genetic_options.swap_weight = -1.0
        optimizer.dataset_options.dataset_weights = [1.0, 2.0]
        optimizer.score_options.same_finger_penalty_factor = -2.0

        issues = validate_config(config)
        self.assertTrue(any("population_size" in issue for issue in issues))
        self.assertTrue(any("fitness_cutoff" in issue for issue in issues))
        self.assertTrue(any("swap_weight" in issue for issue in issues))
        self.assertTrue(any("dataset_weights" in issue for issue in issues))
        self.assertTrue(any("same_finger_penalty_factor" in issue for issue in issues))

    def test_build_layouts_from_explicit_strings(self):
        info = LayoutInfo(
            name=None, num_rows=1, num_cols=2,
            layout="A_10 B_10", effort_layer="1 2", phalanx_layer="L:I R:I",
        )
        layout, effort, phalanx = build_layouts(info)
        self.assertEqual(layout.num_cols, 2)
        self.assertEqual(effort.get(0, 1), 2.0)

    def test_build_layouts_errors(self):
        with self.assertRaises(ConfigurationError):
            build_layouts(LayoutInfo(name="qwerty"))
        with self.assertRaises(ConfigurationError):
            build_layouts(LayoutInfo(name=None, num_rows=1, num_cols=2, layout="A_10", effort_layer="1 1",
                                     phalanx_layer="L:I R:I"))
        with self.assertRaises(ConfigurationError):
            build_layouts(LayoutInfo(name=None, num_rows=1, num_cols=2))

    def test_valid_keycodes(self):
        config = OptimizerConfig().layout_optimizer_config
        keycodes = resolve_valid_keycodes(config)
        self.assertEqual(len(keycodes), 35)
        self.assertEqual(keycodes[0], Keycode.A)

        config.valid_keycodes = ["E", "T", "SPC"]
        self.assertEqual(resolve_valid_keycodes(config), [Keycode.E, Keycode.T, Keycode.SPC])

        config.valid_keycodes = ["NOPE"]
        with self.assertRaises(ConfigurationError):
            resolve_valid_keycodes(config)

    def test_random_seed(self):
        self.assertEqual(resolve_random_seed(7), 7)
        self.assertEqual(resolve_random_seed("12"), 12)
        self.assertIsInstance(resolve_random_seed("random"), int)
        self.assertIsInstance(resolve_random_seed(None), int)
        with self.assertRaises(ConfigurationError):
            resolve_random_seed("abc")


class TestIOUtils(unittest.TestCase):
    """Test layout, frequency table and result files."""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.layout = Layout.from_string("___Layer 0___\nA_10 B_01\n___Layer 1___\n__00 C_10\n", 1, 2)

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_save_and_load_layout(self):
        path = save_layout(self.layout, self.temp_dir / "layout.txt")
        self.assertEqual(load_layout(path, 1, 2), self.layout)

        with self.assertRaises(FileExistsError):
            save_layout(self.layout, path)
        with self.assertRaises(FileNotFoundError):
            load_layout(self.temp_dir / "missing.txt", 1, 2)

    def test_frequency_table_csv(self):
        table = {"e": 0.5, "th": 0.25, "a,b": 0.125, " ": 0.125}
        path = save_frequency_table(table, self.temp_dir / "freq.csv")

        with open(path, newline='') as f:
            rows = list(csv.reader(f))
        self.assertEqual(rows[0], ['ngram', 'frequency'])
        self.assertEqual(rows[1][0], 'e')

        self.assertEqual(load_frequency_table(path), table)

    def test_frequency_table_bad_header(self):
        path = self.temp_dir / "bad.csv"
        path.write_text("text,count\na,1\n")
        with self.assertRaises(ValueError):
            load_frequency_table(path)

    def test_history_csv(self):
        history = [GenerationStats(0, 3.0, 4.0, 5.0, 3.0), GenerationStats(1, 2.5, 3.5, 6.0, 2.5)]
        path = save_history_csv(history, self.temp_dir / "history.csv")
        self.assertEqual(load_history_csv(path), history)

    def test_export_result(self):
        result = OptimizationResult(
            best_layout=self.layout,
            best_score=1.5,
            history=[GenerationStats(0, 1.5, 2.0, 3.0, 1.5)],
            seed=3,
            generations_run=1,
        )
        paths = export_result(result, self.temp_dir / "run")
        for path in paths.values():
            self.assertTrue(path.exists())

        with open(paths['summary']) as f:
            summary = yaml.safe_load(f)
        self.assertEqual(summary['best_score'], 1.5)
        self.assertEqual(summary['seed'], 3)
        self.assertEqual(summary['num_layers'], 2)
        self.assertEqual(load_layout(paths['layout'], 1, 2), self.layout)


if __name__ == '__main__':
    unittest.main()
