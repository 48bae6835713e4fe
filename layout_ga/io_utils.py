"""
I/O utilities for layouts and optimization results.

Handles layout text files, frequency table CSVs, generation history logs
and result export.
"""

import csv
from datetime import datetime
from pathlib import Path
from typing import Dict, Sequence, Union

import yaml

from .layout import Layout
from .optimizer import GenerationStats, OptimizationResult

HISTORY_COLUMNS = ['generation', 'best', 'mean', 'worst', 'best_ever']


def _prepare_output(output_path: Union[str, Path], overwrite: bool) -> Path:
    output_path = Path(output_path)
    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Output file already exists: {output_path}")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    return output_path


def save_layout(layout: Layout, output_path: Union[str, Path], overwrite: bool = False) -> Path:
    """
    Write a layout in its '___Layer n___' text format.

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = _prepare_output(output_path, overwrite)
    output_path.write_text(layout.to_string())
    return output_path


def load_layout(layout_path: Union[str, Path], num_rows: int, num_cols: int) -> Layout:
    """
    Read a layout text file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        KeyboardError: If the content doesn't parse as a num_rows x num_cols layout
    """
    layout_path = Path(layout_path)
    if not layout_path.exists():
        raise FileNotFoundError(f"Layout file not found: {layout_path}")
    return Layout.from_string(layout_path.read_text(), num_rows, num_cols)


def save_frequency_table(
    table: Dict[str, float],
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save a frequency table to CSV, most frequent first.

    CSV format:
        ngram,frequency
        e,0.0812
        th,0.0241
        ...

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = _prepare_output(output_path, overwrite)
    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(['ngram', 'frequency'])
        for ngram, frequency in sorted(table.items(), key=lambda item: (-item[1], item[0])):
            writer.writerow([ngram, repr(float(frequency))])
    return output_path


def load_frequency_table(csv_path: Union[str, Path]) -> Dict[str, float]:
    """
    Load a frequency table CSV written by save_frequency_table.

    Raises:
        FileNotFoundError: If CSV file doesn't exist
        ValueError: If CSV format is invalid
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    table = {}
    with open(csv_path, 'r', newline='', encoding='utf-8') as f:
        reader = csv.DictReader(f)
        if not reader.fieldnames or not all(col in reader.fieldnames for col in ['ngram', 'frequency']):
            raise ValueError(f"Invalid CSV format in {csv_path}. Expected columns: ngram,frequency")
        for row in reader:
            try:
                table[row['ngram']] = float(row['frequency'])
            except ValueError:
                raise ValueError(f"Invalid frequency for n-gram {row['ngram']!r} in {csv_path}")
    return table


def save_history_csv(
    history: Sequence[GenerationStats],
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save per-generation statistics to CSV.

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = _prepare_output(output_path, overwrite)
    with open(output_path, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=HISTORY_COLUMNS)
        writer.writeheader()
        for stats in history:
            writer.writerow(stats.as_dict())
    return output_path


def load_history_csv(csv_path: Union[str, Path]) -> list:
    """Read a history CSV back into GenerationStats."""
    history = []
    with open(csv_path, 'r', newline='') as f:
        for row in csv.DictReader(f):
            history.append(GenerationStats(
                generation=int(row['generation']),
                best=float(row['best']),
                mean=float(row['mean']),
                worst=float(row['worst']),
                best_ever=float(row['best_ever']),
            ))
    return history


def export_result(
    result: OptimizationResult,
    output_dir: Union[str, Path],
    overwrite: bool = False
) -> Dict[str, Path]:
    """
    Export a run: best layout, generation history and a summary.

    Files written:
        best_layout.txt  - best layout in layout text format
        history.csv      - per-generation statistics
        summary.yaml     - seed, generation count, best score, timestamp

    Returns:
        Mapping of file kind to written path

    Raises:
        FileExistsError: If a file exists and overwrite=False
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = {
        'layout': save_layout(result.best_layout, output_dir / 'best_layout.txt', overwrite),
        'history': save_history_csv(result.history, output_dir / 'history.csv', overwrite),
    }

    summary = {
        'best_score': float(result.best_score),
        'generations_run': result.generations_run,
        'seed': result.seed,
        'num_layers': result.best_layout.num_layers,
        'num_rows': result.best_layout.num_rows,
        'num_cols': result.best_layout.num_cols,
        'exported_at': datetime.now().isoformat(),
    }
    summary_path = _prepare_output(output_dir / 'summary.yaml', overwrite)
    with open(summary_path, 'w') as f:
        yaml.safe_dump(summary, f, sort_keys=False)
    paths['summary'] = summary_path

    return paths
