#!/usr/bin/env python3
"""
Keyboard Layout Genetic Optimizer

Main entry point for the layout optimizer.
Loads a configuration, builds the n-gram frequency table, evolves layouts
and exports the best one found.
"""

import sys
import argparse
import dataclasses
import time
from pathlib import Path

from layout_ga.config_loader import (
    ConfigurationError,
    OptimizerConfig,
    build_layouts,
    default_config,
    load_config,
    print_config_summary,
    resolve_random_seed,
    resolve_valid_keycodes,
    validate_config,
    write_config,
)
from layout_ga.io_utils import export_result, load_frequency_table, save_frequency_table
from layout_ga.logging_config import setup_logging
from layout_ga.ngrams import build_frequency_table
from layout_ga.optimizer import GeneticOptimizer
from layout_ga.score import ScoreEngine


def load_run_config(config_path=None, seed=None, generations=None, population=None) -> OptimizerConfig:
    """Load a config file (or the defaults) and apply command-line overrides"""
    config = load_config(config_path) if config_path else default_config()
    genetic = config.layout_optimizer_config.genetic_options
    if seed is not None:
        genetic.random_seed = seed
    if generations is not None:
        genetic.generation_count = generations
    if population is not None:
        genetic.population_size = population
    return config


def run_optimization(config: OptimizerConfig, frequency_table_path=None, output_dir="output",
                     save_plots=False, show_summary=True, export=True):
    """Run one optimization and report the best layout"""
    if show_summary:
        print("=" * 60)
        print("KEYBOARD LAYOUT OPTIMIZER")
        print("=" * 60)
        print_config_summary(config)

    issues = validate_config(config)
    if issues:
        raise ConfigurationError("Invalid configuration:\n  - " + "\n  - ".join(issues))

    optimizer_config = config.layout_optimizer_config
    base_layout, effort_layer, phalanx_layer = build_layouts(config.layout_info)
    valid_keycodes = resolve_valid_keycodes(optimizer_config)

    if frequency_table_path:
        print(f"\nLoading frequency table from: {frequency_table_path}")
        frequency_table = load_frequency_table(frequency_table_path)
    else:
        print("\nBuilding frequency table from datasets...")
        frequency_table = build_frequency_table(optimizer_config.dataset_options)
    print(f"  {len(frequency_table)} n-grams")

    engine = ScoreEngine(effort_layer, phalanx_layer, optimizer_config.score_options)

    # Resolve the seed once so the report shows the seed actually used
    genetic = dataclasses.replace(
        optimizer_config.genetic_options,
        random_seed=resolve_random_seed(optimizer_config.genetic_options.random_seed)
    )
    print(f"Random seed: {genetic.random_seed}")

    optimizer = GeneticOptimizer(base_layout, engine, frequency_table, valid_keycodes, genetic)

    def report_progress(stats):
        print(f"  Generation {stats.generation + 1}/{genetic.generation_count}: "
              f"best {stats.best:.6f}, mean {stats.mean:.6f}, best ever {stats.best_ever:.6f}")

    print("\nRunning genetic optimization...")
    start_time = time.time()
    result = optimizer.run(progress_callback=report_progress)
    elapsed_time = time.time() - start_time
    print(f"Optimization completed in {elapsed_time:.3f} seconds")

    print(f"\nResults Summary:")
    print(f"  Generations run: {result.generations_run}")
    print(f"  Best score: {result.best_score:.6f}")
    score = engine.score_layout(result.best_layout, frequency_table)
    print(f"  Unresolved n-grams: {len(score.unresolved)}")
    print("\nBest layout:")
    print(result.best_layout.render())

    if export:
        print(f"\nExporting results to '{output_dir}'...")
        paths = export_result(result, output_dir, overwrite=True)
        paths['frequency_table'] = save_frequency_table(
            frequency_table, Path(output_dir) / 'frequency_table.csv', overwrite=True
        )
        for kind, path in paths.items():
            print(f"  ✓ {kind}: {path}")

    if save_plots:
        print(f"\nGenerating plots...")
        try:
            # Non-interactive backend avoids display issues
            import matplotlib
            matplotlib.use('Agg')
            from layout_ga.visualization import plot_result

            Path(output_dir).mkdir(parents=True, exist_ok=True)
            for path in plot_result(result, effort_layer, phalanx_layer, output_dir=str(output_dir)):
                print(f"  ✓ Plot: {path}")
        except (OSError, ValueError, RuntimeError) as e:
            print(f"  ✗ Plot: Failed - {e}")

    return result


def run_multiple_trials(config: OptimizerConfig, num_trials=5, frequency_table_path=None, output_dir="output"):
    """Run several optimizations with different seeds and compare them"""
    print("=" * 60)
    print(f"RUNNING {num_trials} RANDOM TRIALS")
    print("=" * 60)

    results = []
    for trial in range(num_trials):
        print(f"\n--- Trial {trial + 1}/{num_trials} ---")
        trial_config = dataclasses.replace(config)
        trial_config.layout_optimizer_config = dataclasses.replace(
            config.layout_optimizer_config,
            genetic_options=dataclasses.replace(
                config.layout_optimizer_config.genetic_options,
                random_seed=resolve_random_seed(None) + trial
            )
        )
        result = run_optimization(
            trial_config,
            frequency_table_path=frequency_table_path,
            output_dir=Path(output_dir) / f"trial_{trial + 1}",
            show_summary=False,
        )
        results.append({'trial': trial + 1, 'seed': result.seed, 'score': result.best_score})

    print("\n" + "=" * 60)
    print("TRIAL SUMMARY")
    print("=" * 60)
    print("Trial | Seed       | Best score")
    print("------|------------|-----------")
    for r in results:
        print(f"{r['trial']:5} | {r['seed']:10} | {r['score']:.6f}")

    if results:
        scores = [r['score'] for r in results]
        avg_score = sum(scores) / len(scores)
        print(f"\nScore Statistics:")
        print(f"  Average: {avg_score:.6f}")
        print(f"  Range: {min(scores):.6f} - {max(scores):.6f}")

    return results


def main():
    """Main entry point with command-line argument parsing"""
    parser = argparse.ArgumentParser(
        description="Keyboard Layout Genetic Optimizer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 main.py --write-default-config config.yaml   # Write a commented default config
  python3 main.py --config config.yaml                 # Optimize with a config file
  python3 main.py -c config.yaml --seed 42 --plot      # Reproducible run with plots
  python3 main.py -c config.yaml -g 50 -p 200          # Override generations and population
  python3 main.py -c config.yaml -f freqs.csv          # Use a saved frequency table
  python3 main.py -c config.yaml --trials 5            # Compare several random seeds
        """
    )

    parser.add_argument(
        '--config', '-c',
        metavar='PATH',
        help='Configuration file path (default: built-in ferris_sweep defaults)'
    )

    parser.add_argument(
        '--write-default-config',
        metavar='PATH',
        help='Write the default configuration with option help to PATH and exit'
    )

    parser.add_argument(
        '--frequency-table', '-f',
        metavar='CSV',
        help='Load n-gram frequencies from CSV (ngram,frequency) instead of the datasets'
    )

    parser.add_argument('--seed', '-s', type=int, help='Random seed')
    parser.add_argument('--generations', '-g', type=int, metavar='N', help='Number of generations')
    parser.add_argument('--population', '-p', type=int, metavar='N', help='Population size')

    parser.add_argument(
        '--output-dir', '-o',
        default='output',
        help='Directory for exported results (default: output)'
    )

    parser.add_argument('--plot', action='store_true', help='Save layout and score history plots')

    parser.add_argument(
        '--trials', '-t',
        type=int,
        metavar='N',
        help='Run N trials with different random seeds for comparison'
    )

    parser.add_argument(
        '--log-level',
        default='WARNING',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: WARNING)'
    )
    parser.add_argument('--log-file', metavar='PATH', help='Also write logs to PATH')

    args = parser.parse_args()
    setup_logging(args.log_level, args.log_file)

    try:
        if args.write_default_config:
            path = write_config(default_config(), args.write_default_config)
            print(f"Default configuration written to: {path}")
            return

        config = load_run_config(args.config, args.seed, args.generations, args.population)

        if args.trials:
            run_multiple_trials(config, args.trials, args.frequency_table, args.output_dir)
        else:
            run_optimization(config, args.frequency_table, args.output_dir, save_plots=args.plot)

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
