"""
Mutation operators for layouts.

Implements symmetry-respecting mutation operators: key swap and key
replace, plus the weighted operator choice used to breed children. Every
operator works on a copy and returns it with an operation log.
"""

import dataclasses
from typing import List, Sequence, Tuple

import numpy as np

from .keycode import Keycode
from .layer import LayoutPosition
from .layout import Layout


def format_position(position: LayoutPosition) -> str:
    return f"L{position.layer_index}({position.row_index},{position.col_index})"


def moveable_positions(layout: Layout) -> List[LayoutPosition]:
    """Positions the optimizer may change, in layout order."""
    return [p for p in layout.positions() if layout.get_mut(p).is_moveable]


def check_layout_symmetry(layout: Layout) -> None:
    """
    Validate every symmetric pairing in the layout.

    Raises:
        SymmetryViolationError: For the first symmetric key whose mirror is not symmetric
    """
    for layer in layout.layers:
        for row, col, _ in layer.cells():
            layer.check_symmetry(row, col)


def _check_position(layout: Layout, position: LayoutPosition) -> None:
    layout.layer(position.layer_index).check_symmetry(position.row_index, position.col_index)


def _is_center(layout: Layout, position: LayoutPosition) -> bool:
    return layout.symmetric_position(position) == position


def _pair_swappable(layout: Layout, p: LayoutPosition, q: LayoutPosition) -> bool:
    """
    Whether keys at p and q can be exchanged.

    When either key is symmetric the mirrored keys are exchanged too, so the
    mirrors must be moveable, distinct from p and q, and off the center column.
    """
    if p == q:
        return False
    if not (layout.get_mut(p).is_symmetric or layout.get_mut(q).is_symmetric):
        return True
    if _is_center(layout, p) or _is_center(layout, q):
        return False
    p_mirror = layout.symmetric_position(p)
    q_mirror = layout.symmetric_position(q)
    if q == p_mirror:
        return False
    return layout.get_mut(p_mirror).is_moveable and layout.get_mut(q_mirror).is_moveable


def _exchange(layout: Layout, p: LayoutPosition, q: LayoutPosition) -> None:
    key_p = layout.get_mut(p)
    key_q = layout.get_mut(q)
    layout.set(p, key_q)
    layout.set(q, key_p)


def randomize_layout(layout: Layout, rng: np.random.Generator, valid_keycodes: Sequence[Keycode]) -> Layout:
    """Randomized copy of a template layout; see Layer.randomize."""
    randomized = layout.copy()
    randomized.randomize(rng, valid_keycodes)
    return randomized


def swap_mutation(layout: Layout, rng: np.random.Generator) -> Tuple[Layout, List[str]]:
    """
    Exchange two moveable keys (value and flags).

    If either key is symmetric, their mirror keys are exchanged as well so
    every symmetric pair stays mirrored.

    Args:
        layout: Layout to mutate (not modified)
        rng: Random number generator

    Returns:
        Tuple of (mutated_layout, operation_log)

    Raises:
        SymmetryViolationError: If a chosen symmetric key's mirror is not symmetric
    """
    pool = moveable_positions(layout)
    if len(pool) < 2:
        return layout.copy(), [f"swap: only {len(pool)} moveable keys"]

    p = pool[int(rng.integers(len(pool)))]
    partners = [q for q in pool if _pair_swappable(layout, p, q)]
    if not partners:
        return layout.copy(), [f"swap: no valid partner for {format_position(p)}"]
    q = partners[int(rng.integers(len(partners)))]

    mutated = layout.copy()
    _exchange(mutated, p, q)
    op_log = [f"swap: {format_position(p)} <-> {format_position(q)}"]

    if layout.get_mut(p).is_symmetric or layout.get_mut(q).is_symmetric:
        p_mirror = layout.symmetric_position(p)
        q_mirror = layout.symmetric_position(q)
        for position in (p, q, p_mirror, q_mirror):
            _check_position(layout, position)
        _exchange(mutated, p_mirror, q_mirror)
        op_log.append(f"swap (mirror): {format_position(p_mirror)} <-> {format_position(q_mirror)}")

    return mutated, op_log


def replace_mutation(
    layout: Layout,
    rng: np.random.Generator,
    valid_keycodes: Sequence[Keycode]
) -> Tuple[Layout, List[str]]:
    """
    Replace the keycode of one moveable key with a random valid keycode.

    A symmetric key and its mirror both receive the new keycode and keep
    their flags.

    Args:
        layout: Layout to mutate (not modified)
        rng: Random number generator
        valid_keycodes: Keycodes to draw from

    Returns:
        Tuple of (mutated_layout, operation_log)

    Raises:
        SymmetryViolationError: If the chosen symmetric key's mirror is not symmetric
    """
    if len(valid_keycodes) == 0:
        return layout.copy(), ["replace: no valid keycodes"]

    pool = [
        p for p in moveable_positions(layout)
        if not layout.get_mut(p).is_symmetric
        or layout.get_mut(layout.symmetric_position(p)).is_moveable
    ]
    if not pool:
        return layout.copy(), ["replace: no moveable keys"]

    p = pool[int(rng.integers(len(pool)))]
    keycode = valid_keycodes[int(rng.integers(len(valid_keycodes)))]

    targets = [p]
    if layout.get_mut(p).is_symmetric:
        _check_position(layout, p)
        p_mirror = layout.symmetric_position(p)
        if p_mirror != p:
            targets.append(p_mirror)

    mutated = layout.copy()
    op_log = []
    for position in targets:
        old_key = mutated.get_mut(position)
        mutated.set(position, dataclasses.replace(old_key, value=keycode))
        op_log.append(f"replace: {format_position(position)} {old_key.value} -> {keycode}")

    return mutated, op_log


def mutate(
    layout: Layout,
    rng: np.random.Generator,
    valid_keycodes: Sequence[Keycode],
    swap_weight: float = 4.0,
    replace_weight: float = 1.0
) -> Tuple[Layout, List[str]]:
    """
    Apply one mutation chosen by weighted coin flip.

    Swap is chosen with probability swap_weight / (swap_weight + replace_weight).

    Returns:
        Tuple of (mutated_layout, operation_log)
    """
    total = swap_weight + replace_weight
    swap_probability = swap_weight / total if total > 0 else 0.5

    if rng.random() < swap_probability:
        return swap_mutation(layout, rng)
    return replace_mutation(layout, rng, valid_keycodes)


def mutation_statistics(original: Layout, mutated: Layout) -> dict:
    """
    Count how many keys differ between two layouts.

    Returns:
        Dictionary with total keys, changed keys and change rate
    """
    total = 0
    changed = 0
    for position in original.positions():
        total += 1
        if original.get_mut(position) != mutated.get_mut(position):
            changed += 1
    return {
        'total_keys': total,
        'keys_changed': changed,
        'change_rate': changed / max(total, 1),
    }
