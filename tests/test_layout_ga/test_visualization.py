"""
Tests for plots and logging setup.
"""

import logging
import shutil
import tempfile
import unittest
from pathlib import Path

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from layout_ga.layer import Layer
from layout_ga.layout import Layout
from layout_ga.logging_config import parse_level, setup_logging
from layout_ga.optimizer import GenerationStats, OptimizationResult
from layout_ga.visualization import LayoutVisualizer, history_arrays, plot_result, plot_score_history


class TestVisualization(unittest.TestCase):

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.effort = Layer.effort_from_string("1 2\n3 4", 2, 2)
        self.phalanx = Layer.phalanx_from_string("L:I R:I\nL:T R:T", 2, 2)
        self.layout = Layout.from_string("A_10 B_00\nSFT_11 SFT_11", 2, 2)
        self.history = [GenerationStats(0, 3.0, 4.0, 5.0, 3.0), GenerationStats(1, 3.5, 3.8, 4.5, 3.0)]

    def tearDown(self):
        plt.close('all')
        shutil.rmtree(self.temp_dir)

    def test_history_arrays(self):
        generations, best, mean, worst, best_ever = history_arrays(self.history)
        self.assertEqual(list(generations), [0.0, 1.0])
        self.assertEqual(list(best_ever), [3.0, 3.0])

    def test_plot_score_history(self):
        save_path = self.temp_dir / "history.png"
        ax = plot_score_history(self.history, save_path=str(save_path))
        self.assertEqual(ax.get_xlabel(), "Generation")
        self.assertTrue(save_path.exists())

    def test_plot_layer_and_fingers(self):
        visualizer = LayoutVisualizer(self.effort, self.phalanx)
        ax = visualizer.plot_layer(self.layout, 0)
        self.assertEqual(ax.get_title(), "Layer 0")
        ax = visualizer.plot_fingers()
        self.assertEqual(ax.get_title(), "Finger assignment")

    def test_plot_result(self):
        result = OptimizationResult(self.layout, 3.0, self.history, seed=1, generations_run=2)
        paths = plot_result(result, self.effort, self.phalanx, output_dir=str(self.temp_dir))
        self.assertEqual(len(paths), 2)
        for path in paths:
            self.assertTrue(Path(path).exists())


class TestLoggingConfig(unittest.TestCase):

    def tearDown(self):
        logger = logging.getLogger("layout_ga")
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    def test_parse_level(self):
        self.assertEqual(parse_level("debug"), logging.DEBUG)
        self.assertEqual(parse_level(logging.WARNING), logging.WARNING)
        with self.assertRaises(ValueError):
            parse_level("loud")

    def test_setup_logging_replaces_handlers(self):
        setup_logging("INFO")
        logger = setup_logging("WARNING")
        self.assertEqual(logger.name, "layout_ga")
        self.assertEqual(logger.level, logging.WARNING)
        self.assertEqual(len(logger.handlers), 1)

    def test_log_file(self):
        temp_dir = Path(tempfile.mkdtemp())
        try:
            log_path = temp_dir / "run.log"
            setup_logging(logging.INFO, str(log_path))
            logging.getLogger("layout_ga.optimizer").info("generation done")
            for handler in logging.getLogger("layout_ga").handlers:
                handler.flush()
            self.assertIn("generation done", log_path.read_text())
        finally:
            self.tearDown()
            shutil.rmtree(temp_dir)


if __name__ == '__main__':
    unittest.main()
