"""
Configuration Loading System

Loads YAML optimizer configuration files into typed option objects, writes
commented default configurations, and validates option ranges.
"""

import dataclasses
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from .errors import KeyboardError
from .keycode import Keycode, KeycodeOptions, generate_default_keycode_set
from .layer import Layer
from .layout import Layout
from .presets import LayoutPreset, get_preset_strings


class ConfigurationError(Exception):
    """Raised when configuration is invalid"""
    pass


@dataclass
class GeneticOptions:
    population_size: int = 5
    generation_count: int = 1
    fitness_cutoff: float = 0.1  # keep the top fraction for the next generation
    swap_weight: float = 4.0
    replace_weight: float = 1.0
    random_seed: Optional[int] = None
    max_workers: int = 1


@dataclass
class DatasetOptions:
    dataset_paths: List[str] = field(default_factory=lambda: ["./data/"])
    dataset_weights: List[float] = field(default_factory=lambda: [1.0])
    max_ngram_size: int = 4
    top_n_ngrams_to_take: int = 100


@dataclass
class ScoreOptions:
    hand_alternation_weight: float = 3.0
    hand_alternation_reduction_factor: float = 0.9
    finger_roll_weight: float = 2.0
    finger_roll_reduction_factor: float = 0.9
    finger_roll_same_row_reduction_factor: float = 0.9
    same_finger_penalty_factor: float = 5.0
    extra_length_penalty: float = 1.1
    unresolved_ngram_penalty: float = 10.0


@dataclass
class LayoutOptimizerConfig:
    genetic_options: GeneticOptions = field(default_factory=GeneticOptions)
    keycode_options: KeycodeOptions = field(default_factory=KeycodeOptions)
    valid_keycodes: List[str] = field(default_factory=list)
    dataset_options: DatasetOptions = field(default_factory=DatasetOptions)
    score_options: ScoreOptions = field(default_factory=ScoreOptions)


@dataclass
class LayoutInfo:
    """Keyboard geometry: either a preset name or explicit layer strings."""
    name: Optional[str] = LayoutPreset.FERRIS_SWEEP.value
    num_rows: Optional[int] = None
    num_cols: Optional[int] = None
    layout: Optional[str] = None
    effort_layer: Optional[str] = None
    phalanx_layer: Optional[str] = None


@dataclass
class OptimizerConfig:
    layout_info: LayoutInfo = field(default_factory=LayoutInfo)
    layout_optimizer_config: LayoutOptimizerConfig = field(default_factory=LayoutOptimizerConfig)


def _build(cls, data: Optional[Dict[str, Any]], section: str):
    """Instantiate an options dataclass from a mapping, rejecting unknown keys."""
    if data is None:
        return cls()
    if not isinstance(data, dict):
        raise ConfigurationError(f"Section '{section}' must be a mapping")
    known = {f.name for f in dataclasses.fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"Unknown option(s) in '{section}': {', '.join(unknown)}")
    return cls(**data)


def config_from_dict(data: Optional[Dict[str, Any]]) -> OptimizerConfig:
    """
    Convert a raw YAML mapping into an OptimizerConfig.

    Missing sections and options fall back to their defaults.

    Raises:
        ConfigurationError: On unknown sections/options or wrong section types
    """
    data = data or {}
    unknown = sorted(set(data) - {"layout_info", "layout_optimizer_config"})
    if unknown:
        raise ConfigurationError(f"Unknown section(s): {', '.join(unknown)}")

    optimizer_data = data.get("layout_optimizer_config") or {}
    if not isinstance(optimizer_data, dict):
        raise ConfigurationError("Section 'layout_optimizer_config' must be a mapping")
    unknown = sorted(set(optimizer_data) - {f.name for f in dataclasses.fields(LayoutOptimizerConfig)})
    if unknown:
        raise ConfigurationError(f"Unknown option(s) in 'layout_optimizer_config': {', '.join(unknown)}")

    optimizer_config = LayoutOptimizerConfig(
        genetic_options=_build(GeneticOptions, optimizer_data.get("genetic_options"), "genetic_options"),
        keycode_options=_build(KeycodeOptions, optimizer_data.get("keycode_options"), "keycode_options"),
        valid_keycodes=list(optimizer_data.get("valid_keycodes") or []),
        dataset_options=_build(DatasetOptions, optimizer_data.get("dataset_options"), "dataset_options"),
        score_options=_build(ScoreOptions, optimizer_data.get("score_options"), "score_options"),
    )

    return OptimizerConfig(
        layout_info=_build(LayoutInfo, data.get("layout_info"), "layout_info"),
        layout_optimizer_config=optimizer_config,
    )


def config_to_dict(config: OptimizerConfig) -> Dict[str, Any]:
    return dataclasses.asdict(config)


def load_config(config_path: Union[str, Path] = "config.yaml") -> OptimizerConfig:
    """Load configuration from YAML file"""
    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Configuration file not found: {config_path}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    return config_from_dict(data)


class _ConfigDumper(yaml.SafeDumper):
    """Writes multi-line strings (layer grids) as literal blocks."""
    pass


def _str_representer(dumper, data):
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_ConfigDumper.add_representer(str, _str_representer)


def option_descriptions() -> Dict[str, str]:
    """Human-readable description of every option."""
    return {
        "name": f"Name of a preset. If left out, num_rows/num_cols and the layer strings are used instead. "
                f"Available options: {', '.join(p.value for p in LayoutPreset)}.",
        "num_rows": "If no preset is used, the number of rows in the layout.",
        "num_cols": "If no preset is used, the number of columns in the layout.",
        "layout": "Collection of layers, each introduced by '___Layer n___'. Each key is written "
                  "{keycode}_{moveable flag}{symmetric flag}. Moveable 1 lets the optimizer change the key; "
                  "symmetric 1 locks the key to its mirror position so both move together. '__' is an empty key.",
        "effort_layer": "Relative effort to reach each key position. Smaller is easier. Making the most "
                        "accessible keys 1 and scaling the rest accordingly works well.",
        "phalanx_layer": "Hand and finger for each key as {hand}:{finger}, hand (L)eft/(R)ight and finger "
                         "(T)humb, (I)ndex, (M)iddle, (R)ing, (P)inkie or (J)oint (where the pinkie meets the palm).",
        "population_size": "Number of layouts per generation.",
        "generation_count": "Number of generations.",
        "fitness_cutoff": "Keep this proportion of best layouts per generation.",
        "swap_weight": "swap_weight:replace_weight is the ratio of swap mutations (exchanging two keys) to "
                       "replace mutations (replacing one key with another). 2:1 means 2/3 of mutations are swaps.",
        "replace_weight": "See swap_weight.",
        "random_seed": "Seed for the random number generator. Leave empty (or 'random') for a new seed each run.",
        "max_workers": "Number of threads used to score a generation. 1 scores sequentially.",
        "include_alphas": "Whether to include alphabet keycodes. Should generally be true.",
        "include_numbers": "Whether to include number keycodes. Optimized layouts cannot keep numbers in order, "
                           "so placing them manually is recommended.",
        "include_number_symbols": "Whether to include shifted numbers (!@#$ etc.).",
        "include_brackets": "Whether to include ()[]{}<>. Optimized layouts cannot keep matching brackets "
                            "together, so placing them manually is recommended.",
        "include_misc_symbols": "Whether to include -=\\;'`,./ which are generally needed for typing.",
        "include_misc_symbols_shifted": "Whether to include _+|:\"~? as dedicated keys rather than through shift.",
        "explicit_inclusions": "Keycode names to include in addition to the families above.",
        "valid_keycodes": "Explicit keycode names. When non-empty this overrides the keycode options.",
        "dataset_paths": "Directories of text files. Only the immediate directory is read, not subdirectories.",
        "dataset_weights": "Relative importance of each dataset, e.g. 2:1 makes the first dataset 2/3 of the score.",
        "max_ngram_size": "Maximum length of n-grams extracted from text.",
        "top_n_ngrams_to_take": "Number of most frequent n-grams kept for each n-gram length.",
        "hand_alternation_weight": "hand_alternation_weight:finger_roll_weight is the importance of hand "
                                   "alternation versus finger rolls.",
        "hand_alternation_reduction_factor": "When at least 3 keys alternate hands, multiply the effort of that "
                                             "sequence by this factor.",
        "finger_roll_weight": "See hand_alternation_weight.",
        "finger_roll_reduction_factor": "When at least 3 keys form a roll, multiply the effort of that sequence by "
                                        "this factor. Steps crossing two or more rows do not count as rolls.",
        "finger_roll_same_row_reduction_factor": "Extra factor for rolls whose keys all sit in the same row.",
        "same_finger_penalty_factor": "If the same finger on the same hand is used twice in a row, multiply the "
                                      "effort of both keys by this factor.",
        "extra_length_penalty": "If typing an n-gram needs more keys than characters (shift, layer switches), "
                                "apply this penalty for each additional key, exponentially.",
        "unresolved_ngram_penalty": "N-grams that cannot be typed on a layout cost this many times the largest "
                                    "effort value per character.",
    }


def dump_config(config: OptimizerConfig) -> str:
    """
    Serialize a configuration to YAML followed by commented option help.

    Returns:
        YAML text that load_config reads back into an equal configuration
    """
    body = yaml.dump(config_to_dict(config), Dumper=_ConfigDumper, sort_keys=False, default_flow_style=False)

    descriptions = option_descriptions()
    comments = ["# Option info"]
    for section in ("layout_info", "genetic_options", "keycode_options", "dataset_options", "score_options"):
        comments.append(f"#")
        comments.append(f"# [{section}]")
        if section == "layout_info":
            names = [f.name for f in dataclasses.fields(LayoutInfo)]
        else:
            options_cls = {
                "genetic_options": GeneticOptions,
                "keycode_options": KeycodeOptions,
                "dataset_options": DatasetOptions,
                "score_options": ScoreOptions,
            }[section]
            names = [f.name for f in dataclasses.fields(options_cls)]
        for name in names:
            comments.append(f"# {name}: {descriptions.get(name, '')}")
    comments.append("#")
    comments.append(f"# valid_keycodes: {descriptions['valid_keycodes']}")

    return body + "\n" + "\n".join(comments) + "\n"


def write_config(config: OptimizerConfig, output_path: Union[str, Path], overwrite: bool = False) -> Path:
    """
    Write a configuration file.

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = Path(output_path)
    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Output file already exists: {output_path}")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(dump_config(config))
    return output_path


def default_config() -> OptimizerConfig:
    """Default configuration with the preset's layer strings filled in."""
    config = OptimizerConfig()
    strings = get_preset_strings(LayoutPreset(config.layout_info.name))
    config.layout_info.num_rows = strings.num_rows
    config.layout_info.num_cols = strings.num_cols
    config.layout_info.layout = strings.layout.strip() + "\n"
    config.layout_info.effort_layer = strings.effort_layer.strip() + "\n"
    config.layout_info.phalanx_layer = strings.phalanx_layer.strip() + "\n"
    return config


def build_layouts(layout_info: LayoutInfo) -> Tuple[Layout, Layer, Layer]:
    """
    Build (base layout, effort layer, phalanx layer) from layout info.

    A preset supplies dimensions and any layer string left empty; explicit
    strings override the preset's.

    Raises:
        ConfigurationError: On unknown presets, missing pieces, or unparsable layers
    """
    num_rows, num_cols = layout_info.num_rows, layout_info.num_cols
    strings = {
        "layout": layout_info.layout,
        "effort_layer": layout_info.effort_layer,
        "phalanx_layer": layout_info.phalanx_layer,
    }

    if layout_info.name:
        try:
            preset = get_preset_strings(LayoutPreset(layout_info.name))
        except ValueError:
            raise ConfigurationError(f"Unknown layout preset: {layout_info.name}")
        num_rows, num_cols = preset.num_rows, preset.num_cols
        for key in strings:
            if not strings[key]:
                strings[key] = getattr(preset, key)

    if not num_rows or not num_cols:
        raise ConfigurationError("layout_info needs a preset name or num_rows and num_cols")
    missing = [key for key, value in strings.items() if not value]
    if missing:
        raise ConfigurationError(f"layout_info is missing: {', '.join(missing)}")

    parsers = {
        "layout": Layout.from_string,
        "effort_layer": Layer.effort_from_string,
        "phalanx_layer": Layer.phalanx_from_string,
    }
    built = {}
    for key, parse in parsers.items():
        try:
            built[key] = parse(strings[key], num_rows, num_cols)
        except KeyboardError as e:
            raise ConfigurationError(f"Could not parse layout_info.{key}: {e}")

    return built["layout"], built["effort_layer"], built["phalanx_layer"]


def resolve_valid_keycodes(config: LayoutOptimizerConfig) -> List[Keycode]:
    """
    Keycodes the optimizer may place.

    Raises:
        ConfigurationError: If a keycode name is unknown
    """
    try:
        if config.valid_keycodes:
            return [Keycode.from_name(str(name)) for name in config.valid_keycodes]
        return generate_default_keycode_set(config.keycode_options)
    except ValueError as e:
        raise ConfigurationError(str(e))


def resolve_random_seed(seed: Union[int, str, None]) -> int:
    """Turn a configured seed into an integer; None or 'random' picks a new one."""
    if seed is None or seed == "random":
        return int(time.time() * 1000000) % 2147483647
    if isinstance(seed, str):
        if not seed.isdigit():
            raise ConfigurationError(f"Invalid random_seed: {seed}")
        return int(seed)
    return int(seed)


def validate_config(config: OptimizerConfig) -> List[str]:
    """
    Validate option ranges and return list of issues

    Returns:
        List of validation error messages (empty if valid)
    """
    issues = []
    optimizer = config.layout_optimizer_config
    genetic = optimizer.genetic_options
    dataset = optimizer.dataset_options
    score = optimizer.score_options

    if not isinstance(genetic.population_size, int) or genetic.population_size <= 0:
        issues.append("population_size must be a positive integer")
    if not isinstance(genetic.generation_count, int) or genetic.generation_count <= 0:
        issues.append("generation_count must be a positive integer")
    if not 0 < genetic.fitness_cutoff <= 1:
        issues.append("fitness_cutoff must be in (0, 1]")
    if genetic.swap_weight < 0 or genetic.replace_weight < 0:
        issues.append("swap_weight and replace_weight must be non-negative")
    elif genetic.swap_weight + genetic.replace_weight <= 0:
        issues.append("swap_weight and replace_weight cannot both be zero")
    if not isinstance(genetic.max_workers, int) or genetic.max_workers <= 0:
        issues.append("max_workers must be a positive integer")

    if not dataset.dataset_paths:
        issues.append("At least one dataset path is required")
    if len(dataset.dataset_paths) != len(dataset.dataset_weights):
        issues.append(
            f"dataset_paths ({len(dataset.dataset_paths)}) and dataset_weights "
            f"({len(dataset.dataset_weights)}) must have the same length"
        )
    if any(w < 0 for w in dataset.dataset_weights):
        issues.append("dataset_weights must be non-negative")
    if dataset.max_ngram_size <= 0:
        issues.append("max_ngram_size must be positive")
    if dataset.top_n_ngrams_to_take <= 0:
        issues.append("top_n_ngrams_to_take must be positive")

    for name, value in dataclasses.asdict(score).items():
        if value < 0:
            issues.append(f"{name} must be non-negative")

    try:
        keycodes = resolve_valid_keycodes(optimizer)
        if not keycodes:
            issues.append("The valid keycode set is empty")
    except ConfigurationError as e:
        issues.append(str(e))

    try:
        build_layouts(config.layout_info)
    except ConfigurationError as e:
        issues.append(str(e))

    return issues


def print_config_summary(config: OptimizerConfig):
    """Print a summary of the configuration"""
    optimizer = config.layout_optimizer_config
    genetic = optimizer.genetic_options
    dataset = optimizer.dataset_options

    print("=" * 50)
    print("CONFIGURATION SUMMARY")
    print("=" * 50)

    layout_info = config.layout_info
    if layout_info.name:
        print(f"Layout preset: {layout_info.name}")
    else:
        print(f"Layout size: {layout_info.num_rows} x {layout_info.num_cols}")

    print(f"Population: {genetic.population_size}, generations: {genetic.generation_count}")
    print(f"Fitness cutoff: {genetic.fitness_cutoff}")
    print(f"Swap:replace = {genetic.swap_weight}:{genetic.replace_weight}")

    print(f"\nDatasets ({len(dataset.dataset_paths)}):")
    for path, weight in zip(dataset.dataset_paths, dataset.dataset_weights):
        print(f"  {path} (weight {weight})")
    print(f"Max n-gram size: {dataset.max_ngram_size}, top {dataset.top_n_ngrams_to_take} per size")

    issues = validate_config(config)
    if issues:
        print(f"\nValidation Issues ({len(issues)}):")
        for issue in issues:
            print(f"  - {issue}")
    else:
        print("\nConfiguration is valid ✓")

    print("=" * 50)
