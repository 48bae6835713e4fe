#!/usr/bin/env python3
"""
Configuration Validation Tool

Validates YAML configuration files for the keyboard layout optimizer
and provides detailed feedback about parameter values and potential issues.
"""

import sys
import argparse
from pathlib import Path
from typing import Dict, Any

from layout_ga.config_loader import (
    ConfigurationError,
    OptimizerConfig,
    build_layouts,
    load_config,
    resolve_valid_keycodes,
    validate_config,
)
from layout_ga.errors import SymmetryViolationError
from layout_ga.keycode import ALPHA_KEYCODES
from layout_ga.mutation import check_layout_symmetry, moveable_positions
from layout_ga.optimizer import survivor_count


class ConfigValidator:
    """Advanced configuration validator with detailed feedback"""

    def __init__(self):
        self.warnings = []
        self.errors = []
        self.recommendations = []

    def validate_comprehensive(self, config_path: str) -> Dict[str, Any]:
        """Load a configuration file and validate it"""
        try:
            config = load_config(config_path)
        except ConfigurationError as e:
            return {
                'valid': False,
                'errors': [f"Failed to load configuration: {e}"],
                'warnings': [],
                'recommendations': [],
                'summary': {}
            }
        return self.validate(config)

    def validate(self, config: OptimizerConfig) -> Dict[str, Any]:
        """Perform comprehensive validation with detailed feedback"""
        self.warnings = []
        self.errors = []
        self.recommendations = []

        # Basic validation
        self.errors.extend(validate_config(config))

        # Advanced validation
        self._validate_genetic(config)
        self._validate_layout(config)
        self._validate_datasets(config)
        self._validate_score(config)

        summary = self._generate_summary(config)

        return {
            'valid': len(self.errors) == 0,
            'errors': self.errors,
            'warnings': self.warnings,
            'recommendations': self.recommendations,
            'summary': summary
        }

    def _validate_genetic(self, config: OptimizerConfig):
        """Validate genetic options"""
        genetic = config.layout_optimizer_config.genetic_options
        if not isinstance(genetic.population_size, int) or genetic.population_size <= 0:
            return

        survivors = survivor_count(genetic.population_size, genetic.fitness_cutoff)
        if survivors >= genetic.population_size:
            self.warnings.append(
                f"fitness_cutoff {genetic.fitness_cutoff} keeps the whole population; no children will be bred"
            )
        if genetic.population_size < 10:
            self.recommendations.append(
                f"Small population ({genetic.population_size}) explores few layouts; 100 or more works better"
            )
        if isinstance(genetic.generation_count, int) and genetic.generation_count == 1:
            self.recommendations.append("generation_count is 1: only random layouts will be evaluated")
        if genetic.swap_weight == 0 and genetic.replace_weight > 0:
            self.warnings.append("swap_weight is 0: keys are never rearranged, only replaced")
        if genetic.random_seed is None or genetic.random_seed == "random":
            self.recommendations.append("Set random_seed to make runs reproducible")

        evaluations = genetic.population_size * max(genetic.generation_count, 0)
        if evaluations > 1000000:
            self.warnings.append(f"{evaluations} layout evaluations may take a long time")

    def _validate_layout(self, config: OptimizerConfig):
        """Validate the base layout against the valid keycode set"""
        try:
            layout, effort_layer, _ = build_layouts(config.layout_info)
            keycodes = resolve_valid_keycodes(config.layout_optimizer_config)
        except ConfigurationError:
            return  # reported by basic validation

        try:
            check_layout_symmetry(layout)
        except SymmetryViolationError as e:
            self.errors.append(f"Base layout: {e}")
            return

        moveable = moveable_positions(layout)
        if not moveable:
            self.errors.append("Base layout has no moveable keys")
            return

        base_moveable = [p for p in moveable if p.layer_index == 0]
        if len(base_moveable) < len(keycodes):
            self.warnings.append(
                f"Layer 0 has {len(base_moveable)} moveable keys for {len(keycodes)} valid keycodes; "
                f"some keycodes can only land on higher layers"
            )

        missing_alphas = [k.value for k in ALPHA_KEYCODES if k not in keycodes]
        if missing_alphas and len(missing_alphas) < len(ALPHA_KEYCODES):
            self.warnings.append(f"Valid keycodes leave out letters: {' '.join(missing_alphas)}")

        efforts = [v for row in effort_layer.values() for v in row]
        if min(efforts) == max(efforts):
            self.warnings.append("Effort layer is uniform; only hand and finger patterns will matter")

    def _validate_datasets(self, config: OptimizerConfig):
        """Check dataset paths exist"""
        dataset = config.layout_optimizer_config.dataset_options
        for path in dataset.dataset_paths:
            if not Path(path).exists():
                self.warnings.append(f"Dataset path not found: {path} (use --frequency-table to skip datasets)")
        if dataset.max_ngram_size > 6:
            self.recommendations.append(
                f"max_ngram_size {dataset.max_ngram_size} counts many rare n-grams; 3 or 4 is usually enough"
            )

    def _validate_score(self, config: OptimizerConfig):
        """Validate score factors"""
        score = config.layout_optimizer_config.score_options
        for name in ('hand_alternation_reduction_factor', 'finger_roll_reduction_factor',
                     'finger_roll_same_row_reduction_factor'):
            value = getattr(score, name)
            if value > 1:
                self.warnings.append(f"{name} ({value}) > 1 penalizes instead of rewarding")
        if 0 <= score.same_finger_penalty_factor < 1:
            self.warnings.append(
                f"same_finger_penalty_factor ({score.same_finger_penalty_factor}) < 1 rewards same-finger repeats"
            )
        if 0 <= score.extra_length_penalty < 1:
            self.warnings.append(
                f"extra_length_penalty ({score.extra_length_penalty}) < 1 rewards shift and layer presses"
            )

    def _generate_summary(self, config: OptimizerConfig) -> Dict[str, Any]:
        """Generate configuration summary"""
        summary = {}
        optimizer = config.layout_optimizer_config
        genetic = optimizer.genetic_options

        try:
            layout, _, _ = build_layouts(config.layout_info)
            summary['layout'] = {
                'preset': config.layout_info.name or 'custom',
                'size': f"{layout.num_rows}x{layout.num_cols}",
                'layers': layout.num_layers,
                'moveable_keys': len(moveable_positions(layout)),
            }
        except ConfigurationError:
            pass

        try:
            summary['keycodes'] = {'valid_count': len(resolve_valid_keycodes(optimizer))}
        except ConfigurationError:
            pass

        summary['optimization'] = {
            'population_size': genetic.population_size,
            'generation_count': genetic.generation_count,
            'random_seed': genetic.random_seed if genetic.random_seed is not None else 'random',
            'reproducible': genetic.random_seed is not None and genetic.random_seed != "random"
        }

        return summary


def main():
    """Main validation function"""
    parser = argparse.ArgumentParser(
        description="Validate YAML configuration files for the keyboard layout optimizer",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        'config_file',
        nargs='?',
        default='config.yaml',
        help='Configuration file to validate (default: config.yaml)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Show detailed validation information'
    )

    parser.add_argument(
        '--warnings-only', '-w',
        action='store_true',
        help='Show only warnings and errors (no recommendations)'
    )

    args = parser.parse_args()

    validator = ConfigValidator()
    result = validator.validate_comprehensive(args.config_file)

    print("=" * 60)
    print("CONFIGURATION VALIDATION REPORT")
    print("=" * 60)
    print(f"File: {args.config_file}")
    print(f"Status: {'✓ VALID' if result['valid'] else '✗ INVALID'}")
    print()

    if result['errors']:
        print("ERRORS:")
        for error in result['errors']:
            print(f"  • {error}")
        print()

    if result['warnings']:
        print("WARNINGS:")
        for warning in result['warnings']:
            print(f"  • {warning}")
        print()

    if result['recommendations'] and not args.warnings_only:
        print("RECOMMENDATIONS:")
        for rec in result['recommendations']:
            print(f"  • {rec}")
        print()

    if result['summary'] and args.verbose:
        print("SUMMARY:")
        for section, data in result['summary'].items():
            print(f"  {section.title()}:")
            for key, value in data.items():
                print(f"    {key}: {value}")
        print()

    if not args.verbose:
        layout_info = result['summary'].get('layout')
        if layout_info:
            print(f"Layout: {layout_info['size']} x {layout_info['layers']} layers, "
                  f"moveable keys: {layout_info['moveable_keys']}")

    print("=" * 60)

    sys.exit(0 if result['valid'] else 1)


if __name__ == "__main__":
    main()
