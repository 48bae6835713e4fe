"""
N-gram frequency extraction.

Reads text datasets, counts n-grams of length 1..max_ngram_size, keeps the
most frequent ones per length and merges several datasets into a single
weighted frequency table.
"""

import logging
from collections import Counter
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Union

from .config_loader import ConfigurationError, DatasetOptions

logger = logging.getLogger(__name__)

FrequencyTable = Dict[str, float]


def extract_ngrams(text: str, max_ngram_size: int) -> Counter:
    """
    Count every n-gram of length 1..max_ngram_size in a text.

    Lines are counted separately, so n-grams never span a line break. Tabs
    are read as spaces and trailing whitespace is dropped.

    Args:
        text: Source text
        max_ngram_size: Longest n-gram to count

    Returns:
        Counter mapping n-gram to occurrence count
    """
    counts = Counter()
    for line in text.splitlines():
        line = line.replace("\t", " ").rstrip()
        for n in range(1, max_ngram_size + 1):
            for i in range(len(line) - n + 1):
                counts[line[i:i + n]] += 1
    return counts


def top_n_ngrams(counts: Counter, n: int) -> Counter:
    """Keep the n most frequent n-grams of every length."""
    by_length: Dict[int, Counter] = {}
    for ngram, count in counts.items():
        by_length.setdefault(len(ngram), Counter())[ngram] = count

    kept = Counter()
    for length in sorted(by_length):
        kept.update(dict(by_length[length].most_common(n)))
    return kept


def dataset_files(dataset_path: Union[str, Path]) -> List[Path]:
    """Files directly inside a dataset directory (not recursive), or the file itself."""
    dataset_path = Path(dataset_path)
    if dataset_path.is_file():
        return [dataset_path]
    if not dataset_path.is_dir():
        raise ConfigurationError(f"Dataset path not found: {dataset_path}")
    return sorted(p for p in dataset_path.iterdir() if p.is_file())


def count_dataset(dataset_path: Union[str, Path], max_ngram_size: int) -> Counter:
    """Count n-grams over every file of one dataset."""
    counts = Counter()
    files = dataset_files(dataset_path)
    for file_path in files:
        with open(file_path, 'r', encoding='utf-8', errors='ignore') as f:
            counts.update(extract_ngrams(f.read(), max_ngram_size))
    logger.info(f"Read {len(files)} files from {dataset_path}: {len(counts)} distinct n-grams")
    return counts


def normalize(counts: Counter) -> FrequencyTable:
    """Relative frequencies summing to 1 (empty counts give an empty table)."""
    total = sum(counts.values())
    if total == 0:
        return {}
    return {ngram: count / total for ngram, count in counts.items()}


def merge_frequency_tables(tables: Sequence[FrequencyTable], weights: Sequence[float]) -> FrequencyTable:
    """
    Weighted sum of normalized tables.

    Weights are normalized to sum to 1, so a 2:1 ratio makes the first table
    two thirds of the result.
    """
    if len(tables) != len(weights):
        raise ValueError(f"Got {len(tables)} tables but {len(weights)} weights")
    weight_total = float(sum(weights))
    if weight_total <= 0:
        raise ValueError("Dataset weights must sum to a positive value")

    merged: FrequencyTable = {}
    for table, weight in zip(tables, weights):
        share = weight / weight_total
        for ngram, frequency in table.items():
            merged[ngram] = merged.get(ngram, 0.0) + frequency * share
    return merged


def build_frequency_table_from_texts(
    texts: Iterable[str],
    max_ngram_size: int,
    top_n: int,
    weights: Sequence[float] = None
) -> FrequencyTable:
    """Frequency table from in-memory texts, one text per dataset."""
    tables = [normalize(top_n_ngrams(extract_ngrams(text, max_ngram_size), top_n)) for text in texts]
    if weights is None:
        weights = [1.0] * len(tables)
    return merge_frequency_tables(tables, weights)


def build_frequency_table(options: DatasetOptions) -> FrequencyTable:
    """
    Build the weighted frequency table described by dataset options.

    Raises:
        ConfigurationError: If a dataset path does not exist or paths and weights disagree
    """
    if len(options.dataset_paths) != len(options.dataset_weights):
        raise ConfigurationError("dataset_paths and dataset_weights must have the same length")

    tables = []
    for path in options.dataset_paths:
        counts = count_dataset(path, options.max_ngram_size)
        tables.append(normalize(top_n_ngrams(counts, options.top_n_ngrams_to_take)))

    table = merge_frequency_tables(tables, options.dataset_weights)
    logger.info(f"Frequency table holds {len(table)} n-grams from {len(tables)} datasets")
    return table
