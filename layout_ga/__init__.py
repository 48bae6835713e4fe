"""
Keyboard Layout Genetic Optimizer

Searches for keyboard layouts that minimize a modeled typing effort computed
from n-gram statistics of real text.

Modules:
- errors: Exception hierarchy for grid, layer and layout problems
- grid, layer, layout: Constrained key grid model with symmetry and moveability flags
- keycode, key: Keycodes, key cells, finger assignments
- presets: Built-in keyboard geometries
- ngrams: Dataset ingestion into weighted frequency tables
- score: Typing-effort model
- mutation: Symmetry-respecting swap and replace operators
- optimizer: Genetic search loop
- config_loader: YAML configuration
- io_utils: Layout, frequency table and result files
- visualization: matplotlib plots
- logging_config: Logger setup
"""

__version__ = "0.1.0"

from .errors import (
    KeyboardError,
    ShapeMismatchError,
    RowMismatchError,
    ColMismatchError,
    OutOfBoundsError,
    SymmetryViolationError,
    InvalidTokenError,
    LayerIndexOutOfRangeError,
)
from .keycode import Keycode, KeycodeOptions
from .key import KeycodeKey, PhalanxKey, Hand, Finger
from .layer import Layer, LayoutPosition
from .layout import Layout
from .score import ScoreEngine, LayoutScore
from .optimizer import GeneticOptimizer, OptimizationResult, GenerationStats
from .config_loader import ConfigurationError, OptimizerConfig, load_config

__all__ = [
    'KeyboardError',
    'ShapeMismatchError',
    'RowMismatchError',
    'ColMismatchError',
    'OutOfBoundsError',
    'SymmetryViolationError',
    'InvalidTokenError',
    'LayerIndexOutOfRangeError',
    'Keycode',
    'KeycodeOptions',
    'KeycodeKey',
    'PhalanxKey',
    'Hand',
    'Finger',
    'Layer',
    'LayoutPosition',
    'Layout',
    'ScoreEngine',
    'LayoutScore',
    'GeneticOptimizer',
    'OptimizationResult',
    'GenerationStats',
    'ConfigurationError',
    'OptimizerConfig',
    'load_config',
]
