"""
Typing-effort model.

Scores how hard a layout is to type a frequency-weighted set of n-grams on.
Each n-gram is resolved into the physical keystrokes needed to type it
(including shift and layer-switch presses), then its base effort is adjusted
for hand alternation, finger rolls, same-finger repeats and extra keystrokes.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .config_loader import ScoreOptions
from .errors import ShapeMismatchError
from .key import PhalanxKey
from .keycode import LAYER_SWITCH_KEYCODES, Keycode, char_to_keycodes
from .layer import Layer, LayoutPosition
from .layout import Layout

logger = logging.getLogger(__name__)

MIN_RUN_LENGTH = 3


def find_runs(
    length: int,
    step_ok: Callable[[int], bool],
    min_length: int = MIN_RUN_LENGTH
) -> List[Tuple[int, int]]:
    """
    Find maximal runs of consecutive qualifying steps.

    Args:
        length: Number of items in the sequence
        step_ok: Predicate on index i (1 <= i < length) telling whether the
            step from item i-1 to item i continues a run
        min_length: Minimum number of items in a reported run

    Returns:
        List of (start, end) index pairs, end exclusive
    """
    runs = []
    start = 0
    for i in range(1, length + 1):
        if i < length and step_ok(i):
            continue
        if i - start >= min_length:
            runs.append((start, i))
        start = i
    return runs


def find_roll_runs(
    fingers: Sequence[PhalanxKey],
    rows: Sequence[int],
    min_length: int = MIN_RUN_LENGTH
) -> List[Tuple[int, int]]:
    """
    Find maximal finger rolls in a keystroke sequence.

    A roll stays on one hand, never crosses more than one row per step and
    uses every finger at most once, so reversals such as ring, middle, ring
    end the run at the repeated finger.

    Args:
        fingers: Hand/finger of each keystroke
        rows: Row of each keystroke
        min_length: Minimum number of keystrokes in a reported run

    Returns:
        List of (start, end) index pairs, end exclusive; runs do not overlap
    """
    runs = []
    start = 0
    used = set()
    for i in range(len(fingers) + 1):
        if 0 < i < len(fingers) and (
            fingers[i].hand == fingers[i - 1].hand
            and fingers[i].finger not in used
            and abs(rows[i] - rows[i - 1]) <= 1
        ):
            used.add(fingers[i].finger)
            continue
        if i - start >= min_length:
            runs.append((start, i))
        start = i
        used = {fingers[i].finger} if i < len(fingers) else set()
    return runs


@dataclass
class LayoutScore:
    """
    Result of scoring one layout.

    Attributes:
        total: Frequency-weighted sum of n-gram efforts (lower is better)
        ngram_count: Number of n-grams scored
        unresolved: N-grams that could not be typed on the layout
    """
    total: float
    ngram_count: int = 0
    unresolved: List[str] = field(default_factory=list)

    def summary(self) -> str:
        return (
            f"Score: {self.total:.6f} over {self.ngram_count} n-grams "
            f"({len(self.unresolved)} unresolved)"
        )


class KeystrokeResolver:
    """
    Translates characters into keystroke positions on one layout.

    For every keycode the lowest-effort position on the lowest reachable
    layer is used. Keys on layer n > 0 need the layer-0 LSn key pressed
    first; shift resolves on layer 0 only.
    """

    def __init__(self, layout: Layout, efforts: np.ndarray):
        self._efforts = efforts
        self._index = layout.keycode_index()
        self._keycode_cache: Dict[Keycode, Optional[Tuple[LayoutPosition, ...]]] = {}
        self._char_cache: Dict[str, Optional[Tuple[LayoutPosition, ...]]] = {}

    def _effort(self, position: LayoutPosition) -> float:
        return float(self._efforts[position.row_index, position.col_index])

    def _best_on_base_layer(self, keycode: Keycode) -> Optional[LayoutPosition]:
        candidates = [p for p in self._index.get(keycode, []) if p.layer_index == 0]
        if not candidates:
            return None
        return min(candidates, key=self._effort)

    def resolve_keycode(self, keycode: Keycode) -> Optional[Tuple[LayoutPosition, ...]]:
        if keycode in self._keycode_cache:
            return self._keycode_cache[keycode]

        result = None
        if keycode is Keycode.SFT:
            best = self._best_on_base_layer(keycode)
            result = (best,) if best is not None else None
        else:
            candidates = sorted(
                self._index.get(keycode, []),
                key=lambda p: (p.layer_index, self._effort(p))
            )
            for position in candidates:
                if position.layer_index == 0:
                    result = (position,)
                    break
                switch = LAYER_SWITCH_KEYCODES.get(position.layer_index)
                switch_position = self._best_on_base_layer(switch) if switch else None
                if switch_position is not None:
                    result = (switch_position, position)
                    break

        self._keycode_cache[keycode] = result
        return result

    def resolve_char(self, c: str) -> Optional[Tuple[LayoutPosition, ...]]:
        if c in self._char_cache:
            return self._char_cache[c]

        result = None
        for option in char_to_keycodes(c):
            keystrokes: List[LayoutPosition] = []
            for keycode in option:
                resolved = self.resolve_keycode(keycode)
                if resolved is None:
                    break
                keystrokes.extend(resolved)
            else:
                result = tuple(keystrokes)
                break

        self._char_cache[c] = result
        return result

    def resolve(self, ngram: str) -> Optional[List[LayoutPosition]]:
        """Keystrokes for the whole n-gram, or None if any character is untypeable."""
        keystrokes: List[LayoutPosition] = []
        for c in ngram:
            resolved = self.resolve_char(c)
            if resolved is None:
                return None
            keystrokes.extend(resolved)
        return keystrokes


class ScoreEngine:
    """
    Computes typing effort for layouts.

    Args:
        effort_layer: Per-position base effort (floats)
        phalanx_layer: Per-position hand/finger assignment (PhalanxKey)
        options: Weights and factors of the effort model
    """

    def __init__(self, effort_layer: Layer, phalanx_layer: Layer, options: Optional[ScoreOptions] = None):
        if effort_layer.shape != phalanx_layer.shape:
            raise ShapeMismatchError(effort_layer.num_rows * effort_layer.num_cols,
                                     phalanx_layer.num_rows * phalanx_layer.num_cols)
        self.effort_layer = effort_layer
        self.phalanx_layer = phalanx_layer
        self.options = options or ScoreOptions()

        self._efforts = np.array(effort_layer.values(), dtype=float)
        self._phalanx = phalanx_layer.values()
        self.max_effort = float(self._efforts.max())

        total_weight = self.options.hand_alternation_weight + self.options.finger_roll_weight
        if total_weight > 0:
            alternation_share = self.options.hand_alternation_weight / total_weight
        else:
            alternation_share = 0.5
        roll_share = 1.0 - alternation_share

        # Equal weights leave each reduction factor exactly as configured.
        self.alternation_factor = self.options.hand_alternation_reduction_factor ** (2 * alternation_share)
        self.roll_factor = self.options.finger_roll_reduction_factor ** (2 * roll_share)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.effort_layer.shape

    def resolver(self, layout: Layout) -> KeystrokeResolver:
        if (layout.num_rows, layout.num_cols) != self.shape:
            raise ShapeMismatchError(self.shape[0] * self.shape[1], layout.num_rows * layout.num_cols)
        return KeystrokeResolver(layout, self._efforts)

    def resolve_keystrokes(self, layout: Layout, ngram: str) -> Optional[List[LayoutPosition]]:
        return self.resolver(layout).resolve(ngram)

    def keystroke_effort(self, keystrokes: Sequence[LayoutPosition], ngram_length: int) -> float:
        """
        Effort of one keystroke sequence that types an n-gram.

        Args:
            keystrokes: Physical keystrokes in order (M of them)
            ngram_length: Number of characters typed (L)

        Returns:
            Non-negative effort
        """
        count = len(keystrokes)
        if count == 0:
            return 0.0

        rows = [p.row_index for p in keystrokes]
        efforts = np.array([self._efforts[p.row_index, p.col_index] for p in keystrokes])
        fingers = [self._phalanx[p.row_index][p.col_index] for p in keystrokes]
        multipliers = np.ones(count)

        def alternates(i: int) -> bool:
            return fingers[i].hand != fingers[i - 1].hand

        for start, end in find_runs(count, alternates):
            multipliers[start:end] *= self.alternation_factor ** (end - start - 2)

        for start, end in find_roll_runs(fingers, rows):
            factor = self.roll_factor ** (end - start - 2)
            if len(set(rows[start:end])) == 1:
                factor *= self.options.finger_roll_same_row_reduction_factor ** (end - start - 2)
            multipliers[start:end] *= factor

        same_finger = np.zeros(count, dtype=bool)
        for i in range(1, count):
            if fingers[i] == fingers[i - 1]:
                same_finger[i - 1] = True
                same_finger[i] = True
        multipliers[same_finger] *= self.options.same_finger_penalty_factor

        effort = float(np.dot(efforts, multipliers))
        if count > ngram_length:
            effort *= self.options.extra_length_penalty ** (count - ngram_length)
        return effort

    def unresolved_effort(self, ngram_length: int) -> float:
        return ngram_length * self.max_effort * self.options.unresolved_ngram_penalty

    def ngram_effort(self, layout: Layout, ngram: str, resolver: Optional[KeystrokeResolver] = None) -> float:
        """Effort of typing one n-gram on a layout."""
        resolver = resolver or self.resolver(layout)
        keystrokes = resolver.resolve(ngram)
        if keystrokes is None:
            return self.unresolved_effort(len(ngram))
        return self.keystroke_effort(keystrokes, len(ngram))

    def score_layout(self, layout: Layout, frequency_table: Mapping[str, float]) -> LayoutScore:
        """
        Frequency-weighted effort of a layout.

        Args:
            layout: Layout to score (not modified)
            frequency_table: Mapping of n-gram to relative weight

        Returns:
            LayoutScore with the weighted total
        """
        resolver = self.resolver(layout)
        total = 0.0
        unresolved = []
        count = 0
        for ngram, frequency in frequency_table.items():
            if not ngram:
                continue
            count += 1
            keystrokes = resolver.resolve(ngram)
            if keystrokes is None:
                unresolved.append(ngram)
                effort = self.unresolved_effort(len(ngram))
            else:
                effort = self.keystroke_effort(keystrokes, len(ngram))
            total += frequency * effort

        if unresolved:
            logger.debug(f"{len(unresolved)} of {count} n-grams cannot be typed on this layout")
        return LayoutScore(total=total, ngram_count=count, unresolved=unresolved)

    def __call__(self, layout: Layout, frequency_table: Mapping[str, float]) -> float:
        return self.score_layout(layout, frequency_table).total
