"""
Preset keyboard geometries.

Each preset provides a base layout template, an effort layer and a phalanx
layer as layer strings.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from .layer import Layer
from .layout import Layout


class LayoutPreset(Enum):
    FERRIS_SWEEP = "ferris_sweep"
    FOUR_BY_TWELVE = "four_by_twelve"


@dataclass(frozen=True)
class PresetStrings:
    num_rows: int
    num_cols: int
    layout: str
    effort_layer: str
    phalanx_layer: str


FERRIS_SWEEP = PresetStrings(
    num_rows=4,
    num_cols=10,
    layout="""
___Layer 0___
__10   __10    __10    __10    __10    __10    __10    __10    __10    __10
__10   __10    LS3_10  __10    __10    __10    __10    __10    __10    __10
SFT_11 __10    __10    __10    __10    __10    __10    __10    __10    SFT_11
__00   __00    __00    LS1_00  SPC_00  BSPC_00 LS2_00  __00    __00    __00
___Layer 1___
__10   __10    __10    __10    __10    __10    __10    __10    __10    __10
__10   LCBR_00 LBRC_00 LPRN_00 __10    __10    RPRN_00 RBRC_00 RCBR_00 __10
__10   __10    __10    __10    __10    __10    __10    __10    __10    __10
__00   __00    __00    __10    __10    __10    __10    __00    __00    __00
___Layer 2___
1_00   2_00    3_00    4_00    5_00    __10    __10    __10    __10    __10
6_00   7_00    8_00    9_00    ZERO_00 __10    LEFT_00 DOWN_00 UP_00   RGHT_00
__10   __10    __10    __10    __10    __10    HOME_00 PGDN_00 PGUP_00 END_00
__00   __00    __00    __10    __10    __10    __10    __00    __00    __00
___Layer 3___
__10   __10    __10    __10    __10    __10    __10    __10    __10    __10
__10   __10    __10    __10    __10    __10    __10    __10    __10    __10
__10   __10    __10    __10    __10    __10    __10    __10    __10    __10
__00   __00    __00    __10    __10    __10    __10    __00    __00    __00
""",
    effort_layer="""
7  2  2  2  7  7  2  2  2  7
3  1  1  1  3  3  1  1  1  3
5  3  3  3  8  8  3  3  3  5
10 7  4  2  1  1  2  4  7  10
""",
    phalanx_layer="""
L:P L:R L:M L:I L:I R:I R:I R:M R:R R:P
L:P L:R L:M L:I L:I R:I R:I R:M R:R R:P
L:P L:R L:M L:I L:I R:I R:I R:M R:R R:P
L:P L:R L:T L:T L:T R:T R:T R:T R:R R:P
""",
)

FOUR_BY_TWELVE = PresetStrings(
    num_rows=4,
    num_cols=12,
    layout="""
___Layer 0___
__10   __10 __10 __10 __10   __10   __10    __10   __10 __10 __10 __10
__10   __10 __10 __10 __10   __10   __10    __10   __10 __10 __10 __10
SFT_11 __10 __10 __10 __10   __10   __10    __10   __10 __10 __10 SFT_11
__10   __10 __10 __10 LS1_10 SPC_00 BSPC_00 LS2_10 __10 __10 __10 __10
___Layer 1___
__10 __10 __10 __10 __10 __10 __10 __10 __10 __10 __10 __10
__10 __10 __10 __10 __10 __10 __10 __10 __10 __10 __10 __10
__10 __10 __10 __10 __10 __10 __10 __10 __10 __10 __10 __10
__10 __10 __10 __10 __10 __10 __10 __10 __10 __10 __10 __10
___Layer 2___
__10 __10 __10 __10 __10 __10 __10 __10 __10 __10 __10 __10
__10 __10 __10 __10 __10 __10 __10 __10 __10 __10 __10 __10
__10 __10 __10 __10 __10 __10 __10 __10 __10 __10 __10 __10
__10 __10 __10 __10 __10 __10 __10 __10 __10 __10 __10 __10
""",
    effort_layer="""
12 7  2 2 2 7 7 2 2 2 7  12
6  3  1 1 1 3 3 1 1 1 3  6
13 5  3 3 3 8 8 3 3 3 5  13
14 10 7 4 2 1 1 2 4 7 10 14
""",
    phalanx_layer="""
L:P L:P L:R L:M L:I L:I R:I R:I R:M R:R R:P R:P
L:P L:P L:R L:M L:I L:I R:I R:I R:M R:R R:P R:P
L:P L:P L:R L:M L:I L:I R:I R:I R:M R:R R:P R:P
L:J L:P L:R L:T L:T L:T R:T R:T R:T R:R R:P R:J
""",
)

PRESETS = {
    LayoutPreset.FERRIS_SWEEP: FERRIS_SWEEP,
    LayoutPreset.FOUR_BY_TWELVE: FOUR_BY_TWELVE,
}


def get_preset_strings(preset: LayoutPreset) -> PresetStrings:
    return PRESETS[preset]


def load_preset(preset: LayoutPreset) -> Tuple[Layout, Layer, Layer]:
    """Parse a preset into (base layout, effort layer, phalanx layer)."""
    strings = PRESETS[preset]
    rows, cols = strings.num_rows, strings.num_cols
    return (
        Layout.from_string(strings.layout, rows, cols),
        Layer.effort_from_string(strings.effort_layer, rows, cols),
        Layer.phalanx_from_string(strings.phalanx_layer, rows, cols),
    )
