"""
Genetic search over keyboard layouts.

Evolves a population of layouts toward lower typing effort:

    Initialize -> Evaluate -> Select -> Reproduce -> Evaluate ... -> Terminate

Initialization randomizes copies of the base layout, selection keeps the
best fraction of each generation, and reproduction refills the population
with mutated clones of the survivors. The best layout seen in any generation
is kept and reported.
"""

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional, Sequence

import numpy as np

from .config_loader import GeneticOptions, resolve_random_seed
from .keycode import Keycode
from .layout import Layout
from .mutation import check_layout_symmetry, mutate, randomize_layout
from .score import ScoreEngine

logger = logging.getLogger(__name__)


@dataclass
class Candidate:
    """
    One member of the population.

    Attributes:
        id: Identifier, unique within a run
        layout: The candidate layout
        score: Typing effort (None until evaluated; lower is better)
        parent_id: Survivor this candidate was cloned from
        mutation_ops: Operation log of the mutation that produced it
    """
    id: str
    layout: Layout
    score: Optional[float] = None
    parent_id: Optional[str] = None
    mutation_ops: List[str] = field(default_factory=list)


@dataclass
class GenerationStats:
    generation: int
    best: float
    mean: float
    worst: float
    best_ever: float

    def as_dict(self) -> dict:
        return {
            'generation': self.generation,
            'best': self.best,
            'mean': self.mean,
            'worst': self.worst,
            'best_ever': self.best_ever,
        }


@dataclass
class OptimizationResult:
    """
    Outcome of a run.

    Attributes:
        best_layout: Lowest-effort layout seen in any generation
        best_score: Its effort
        history: Per-generation statistics
        seed: Seed of the random number generator (None if an rng was injected)
        generations_run: Number of evaluated generations
        final_population: Population after the last evaluation, best first
    """
    best_layout: Layout
    best_score: float
    history: List[GenerationStats]
    seed: Optional[int]
    generations_run: int
    final_population: List[Candidate] = field(default_factory=list)


def survivor_count(population_size: int, fitness_cutoff: float) -> int:
    """Number of layouts kept per generation (at least one); halves round up."""
    return max(1, int(math.floor(population_size * fitness_cutoff + 0.5)))


class GeneticOptimizer:
    """
    Genetic optimizer for keyboard layouts.

    Args:
        base_layout: Template layout; its non-moveable keys are never changed
        score_engine: Effort model used as the fitness function
        frequency_table: N-gram weights to score against
        valid_keycodes: Keycodes that may be placed on moveable keys
        options: Population, generation and mutation settings
        rng: Random number generator; built from options.random_seed when omitted
    """

    def __init__(
        self,
        base_layout: Layout,
        score_engine: ScoreEngine,
        frequency_table: Mapping[str, float],
        valid_keycodes: Sequence[Keycode],
        options: Optional[GeneticOptions] = None,
        rng: Optional[np.random.Generator] = None
    ):
        self.base_layout = base_layout
        self.score_engine = score_engine
        self.frequency_table = frequency_table
        self.valid_keycodes = list(valid_keycodes)
        self.options = options or GeneticOptions()

        if rng is None:
            self.seed = resolve_random_seed(self.options.random_seed)
            rng = np.random.default_rng(self.seed)
        else:
            self.seed = None
        self.rng = rng

        self.population: List[Candidate] = []
        self.history: List[GenerationStats] = []
        self.generation = 0
        self.best_layout: Optional[Layout] = None
        self.best_score = float('inf')

        self._next_id = 0
        self._stop_event = threading.Event()

    def _new_id(self) -> str:
        candidate_id = f"cand_{self._next_id:05d}"
        self._next_id += 1
        return candidate_id

    def request_stop(self) -> None:
        """Ask the run to stop after the current generation finishes evaluating."""
        self._stop_event.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def initialize_population(self) -> List[Candidate]:
        """
        Fill the population with randomized copies of the base layout.

        Raises:
            SymmetryViolationError: If the base layout pairs a symmetric key with a non-symmetric mirror
        """
        check_layout_symmetry(self.base_layout)
        self.population = [
            Candidate(
                id=self._new_id(),
                layout=randomize_layout(self.base_layout, self.rng, self.valid_keycodes),
                mutation_ops=["randomize"],
            )
            for _ in range(self.options.population_size)
        ]
        logger.debug(f"Initialized {len(self.population)} candidates")
        return self.population

    def score(self, layout: Layout) -> float:
        return self.score_engine(layout, self.frequency_table)

    def evaluate(self) -> None:
        """Score every candidate that has no score yet."""
        pending = [c for c in self.population if c.score is None]
        if not pending:
            return

        if self.options.max_workers > 1 and len(pending) > 1:
            with ThreadPoolExecutor(max_workers=self.options.max_workers) as executor:
                scores = list(executor.map(self.score, [c.layout for c in pending]))
        else:
            scores = [self.score(c.layout) for c in pending]

        for candidate, score in zip(pending, scores):
            candidate.score = score

    def select(self) -> List[Candidate]:
        """
        Keep the best fraction of the evaluated population.

        Returns:
            Survivors, best first (ties keep population order)
        """
        ranked = sorted(self.population, key=lambda c: c.score)
        keep = survivor_count(self.options.population_size, self.options.fitness_cutoff)
        return ranked[:keep]

    def reproduce(self, survivors: Sequence[Candidate]) -> List[Candidate]:
        """
        Refill the population with mutated clones of uniformly chosen survivors.

        Survivors carry over unchanged, keeping their scores.
        """
        next_population = list(survivors)
        while len(next_population) < self.options.population_size:
            parent = survivors[int(self.rng.integers(len(survivors)))]
            child_layout, mutation_ops = mutate(
                parent.layout,
                self.rng,
                self.valid_keycodes,
                swap_weight=self.options.swap_weight,
                replace_weight=self.options.replace_weight,
            )
            next_population.append(Candidate(
                id=self._new_id(),
                layout=child_layout,
                parent_id=parent.id,
                mutation_ops=mutation_ops,
            ))
        self.population = next_population
        return self.population

    def _record_generation(self) -> GenerationStats:
        scores = np.array([c.score for c in self.population], dtype=float)
        best_index = int(np.argmin(scores))
        if scores[best_index] < self.best_score:
            self.best_score = float(scores[best_index])
            self.best_layout = self.population[best_index].layout.copy()

        stats = GenerationStats(
            generation=self.generation,
            best=float(scores[best_index]),
            mean=float(scores.mean()),
            worst=float(scores.max()),
            best_ever=self.best_score,
        )
        self.history.append(stats)
        logger.info(
            f"Gen {stats.generation}: best={stats.best:.6f} mean={stats.mean:.6f} "
            f"worst={stats.worst:.6f} best_ever={stats.best_ever:.6f}"
        )
        return stats

    def step(self, breed: bool = True) -> GenerationStats:
        """
        Run one generation: evaluate, record the best, then select and reproduce.

        Args:
            breed: Whether to build the next population after recording

        Returns:
            Statistics of the evaluated generation
        """
        if not self.population:
            self.initialize_population()

        self.evaluate()
        stats = self._record_generation()
        self.generation += 1

        if breed:
            self.reproduce(self.select())
        return stats

    def run(self, progress_callback: Optional[Callable[[GenerationStats], None]] = None) -> OptimizationResult:
        """
        Evolve for generation_count generations or until request_stop().

        Args:
            progress_callback: Called with each generation's statistics

        Returns:
            OptimizationResult holding the best-ever layout

        Raises:
            ValueError: If generation_count is less than one
            SymmetryViolationError: From initialization or mutation
        """
        total = self.options.generation_count
        if total < 1:
            raise ValueError(f"generation_count must be at least 1, got {total}")
        logger.info(
            f"Starting optimization: population={self.options.population_size}, "
            f"generations={total}, cutoff={self.options.fitness_cutoff}, "
            f"swap:replace={self.options.swap_weight}:{self.options.replace_weight}, seed={self.seed}"
        )

        if not self.population:
            self.initialize_population()

        while self.generation < total:
            more_to_come = self.generation + 1 < total
            stats = self.step(breed=False)
            if progress_callback:
                progress_callback(stats)
            if self.stop_requested:
                logger.info(f"Stop requested after generation {stats.generation}")
                break
            if more_to_come:
                self.reproduce(self.select())

        final_population = sorted(self.population, key=lambda c: c.score if c.score is not None else float('inf'))
        logger.info(f"Finished after {self.generation} generations, best score {self.best_score:.6f}")

        return OptimizationResult(
            best_layout=self.best_layout,
            best_score=self.best_score,
            history=list(self.history),
            seed=self.seed,
            generations_run=self.generation,
            final_population=final_population,
        )
