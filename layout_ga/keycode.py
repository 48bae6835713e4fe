"""
Keycode tables.

Symbolic key names used in layer strings, the mapping from text characters
to the keycode sequences that type them, and the default set of keycodes the
optimizer may place.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple


class Keycode(Enum):
    """Symbolic key names. The value is the name used in layer strings."""
    NO = "NO"  # sentinel / no-op

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    F = "F"
    G = "G"
    H = "H"
    I = "I"
    J = "J"
    K = "K"
    L = "L"
    M = "M"
    N = "N"
    O = "O"
    P = "P"
    Q = "Q"
    R = "R"
    S = "S"
    T = "T"
    U = "U"
    V = "V"
    W = "W"
    X = "X"
    Y = "Y"
    Z = "Z"

    NUM_1 = "1"
    NUM_2 = "2"
    NUM_3 = "3"
    NUM_4 = "4"
    NUM_5 = "5"
    NUM_6 = "6"
    NUM_7 = "7"
    NUM_8 = "8"
    NUM_9 = "9"
    ZERO = "ZERO"

    # shifted numbers
    EXLM = "EXLM"
    AT = "AT"
    HASH = "HASH"
    DLR = "DLR"
    PERC = "PERC"
    CIRC = "CIRC"
    AMPR = "AMPR"
    ASTR = "ASTR"

    # brackets
    LPRN = "LPRN"
    RPRN = "RPRN"
    LBRC = "LBRC"
    RBRC = "RBRC"
    LCBR = "LCBR"
    RCBR = "RCBR"
    LABK = "LABK"
    RABK = "RABK"

    # misc symbols
    MINS = "MINS"
    EQL = "EQL"
    BSLS = "BSLS"
    SCLN = "SCLN"
    QUOT = "QUOT"
    GRV = "GRV"
    COMM = "COMM"
    DOT = "DOT"
    SLSH = "SLSH"

    # misc symbols, shifted
    UNDS = "UNDS"
    PLUS = "PLUS"
    PIPE = "PIPE"
    COLN = "COLN"
    DQUO = "DQUO"
    TILD = "TILD"
    QUES = "QUES"

    # whitespace and editing
    SPC = "SPC"
    BSPC = "BSPC"
    ENT = "ENT"
    TAB = "TAB"
    ESC = "ESC"
    DEL = "DEL"

    # navigation
    LEFT = "LEFT"
    DOWN = "DOWN"
    UP = "UP"
    RGHT = "RGHT"
    HOME = "HOME"
    END = "END"
    PGUP = "PGUP"
    PGDN = "PGDN"

    # modifiers and layer switches
    SFT = "SFT"
    CTL = "CTL"
    ALT = "ALT"
    GUI = "GUI"
    LS1 = "LS1"
    LS2 = "LS2"
    LS3 = "LS3"
    LS4 = "LS4"
    LS5 = "LS5"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> "Keycode":
        """
        Look up a keycode by the name used in layer strings.

        Raises:
            ValueError: If no keycode has that name
        """
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown keycode name: '{name}'")

    @property
    def is_layer_switch(self) -> bool:
        return self.value.startswith("LS")

    @property
    def layer_switch_target(self) -> Optional[int]:
        """Layer index activated by an LSn key, or None for other keys."""
        if not self.is_layer_switch:
            return None
        return int(self.value[2:])


LAYER_SWITCH_KEYCODES = {k.layer_switch_target: k for k in Keycode if k.is_layer_switch}

ALPHA_KEYCODES = [Keycode(chr(c)) for c in range(ord("A"), ord("Z") + 1)]
NUMBER_KEYCODES = [Keycode(str(d)) for d in range(1, 10)] + [Keycode.ZERO]
NUMBER_SYMBOL_KEYCODES = [
    Keycode.EXLM, Keycode.AT, Keycode.HASH, Keycode.DLR, Keycode.PERC,
    Keycode.CIRC, Keycode.AMPR, Keycode.ASTR,
]
BRACKET_KEYCODES = [
    Keycode.LPRN, Keycode.RPRN, Keycode.LBRC, Keycode.RBRC,
    Keycode.LCBR, Keycode.RCBR, Keycode.LABK, Keycode.RABK,
]
MISC_SYMBOL_KEYCODES = [
    Keycode.MINS, Keycode.EQL, Keycode.BSLS, Keycode.SCLN, Keycode.QUOT,
    Keycode.GRV, Keycode.COMM, Keycode.DOT, Keycode.SLSH,
]
MISC_SYMBOL_SHIFTED_KEYCODES = [
    Keycode.UNDS, Keycode.PLUS, Keycode.PIPE, Keycode.COLN, Keycode.DQUO,
    Keycode.TILD, Keycode.QUES,
]

# Characters typed by a dedicated keycode, plus the unshifted keycode that
# types them with shift held, when one exists.
_SYMBOL_CHARS: Dict[str, Tuple[Keycode, Optional[Keycode]]] = {
    "!": (Keycode.EXLM, Keycode.NUM_1),
    "@": (Keycode.AT, Keycode.NUM_2),
    "#": (Keycode.HASH, Keycode.NUM_3),
    "$": (Keycode.DLR, Keycode.NUM_4),
    "%": (Keycode.PERC, Keycode.NUM_5),
    "^": (Keycode.CIRC, Keycode.NUM_6),
    "&": (Keycode.AMPR, Keycode.NUM_7),
    "*": (Keycode.ASTR, Keycode.NUM_8),
    "(": (Keycode.LPRN, Keycode.NUM_9),
    ")": (Keycode.RPRN, Keycode.ZERO),
    "[": (Keycode.LBRC, None),
    "]": (Keycode.RBRC, None),
    "{": (Keycode.LCBR, Keycode.LBRC),
    "}": (Keycode.RCBR, Keycode.RBRC),
    "<": (Keycode.LABK, Keycode.COMM),
    ">": (Keycode.RABK, Keycode.DOT),
    "-": (Keycode.MINS, None),
    "=": (Keycode.EQL, None),
    "\\": (Keycode.BSLS, None),
    ";": (Keycode.SCLN, None),
    "'": (Keycode.QUOT, None),
    "`": (Keycode.GRV, None),
    ",": (Keycode.COMM, None),
    ".": (Keycode.DOT, None),
    "/": (Keycode.SLSH, None),
    "_": (Keycode.UNDS, Keycode.MINS),
    "+": (Keycode.PLUS, Keycode.EQL),
    "|": (Keycode.PIPE, Keycode.BSLS),
    ":": (Keycode.COLN, Keycode.SCLN),
    '"': (Keycode.DQUO, Keycode.QUOT),
    "~": (Keycode.TILD, Keycode.GRV),
    "?": (Keycode.QUES, Keycode.SLSH),
    " ": (Keycode.SPC, None),
    "\n": (Keycode.ENT, None),
    "\t": (Keycode.TAB, None),
}


def char_to_keycodes(c: str) -> List[Tuple[Keycode, ...]]:
    """
    Alternative keycode sequences that type a single character.

    Uppercase letters are shift + letter. Symbols try their dedicated keycode
    first and shift + base key second. Characters with no keycode give an
    empty list.

    Examples:
        'a' -> [(A,)]
        'E' -> [(SFT, E)]
        '!' -> [(EXLM,), (SFT, 1)]
    """
    if len(c) != 1:
        raise ValueError(f"Expected a single character, got {c!r}")

    if c.isascii() and c.isalpha():
        letter = Keycode(c.upper())
        if c.isupper():
            return [(Keycode.SFT, letter)]
        return [(letter,)]

    if c.isdigit() and c.isascii():
        return [(Keycode.ZERO if c == "0" else Keycode(c),)]

    if c in _SYMBOL_CHARS:
        direct, shifted_base = _SYMBOL_CHARS[c]
        options = [(direct,)]
        if shifted_base is not None:
            options.append((Keycode.SFT, shifted_base))
        return options

    return []


def string_to_keycodes(s: str) -> List[Keycode]:
    """Flatten a string into keycodes using each character's first alternative."""
    keycodes = []
    for c in s:
        options = char_to_keycodes(c)
        if options:
            keycodes.extend(options[0])
    return keycodes


@dataclass
class KeycodeOptions:
    """Which families of keycodes the optimizer is allowed to place."""
    include_alphas: bool = True
    include_numbers: bool = False
    include_number_symbols: bool = False
    include_brackets: bool = False
    include_misc_symbols: bool = True
    include_misc_symbols_shifted: bool = False
    explicit_inclusions: List[str] = field(default_factory=list)


def generate_default_keycode_set(options: KeycodeOptions) -> List[Keycode]:
    """
    Build the sorted valid-keycode set from keycode options.

    Args:
        options: Keycode family switches plus explicit inclusions (by name)

    Returns:
        List of unique keycodes in declaration order

    Raises:
        ValueError: If an explicit inclusion is not a known keycode name
    """
    families: List[Iterable[Keycode]] = []
    if options.include_alphas:
        families.append(ALPHA_KEYCODES)
    if options.include_numbers:
        families.append(NUMBER_KEYCODES)
    if options.include_number_symbols:
        families.append(NUMBER_SYMBOL_KEYCODES)
    if options.include_brackets:
        families.append(BRACKET_KEYCODES)
    if options.include_misc_symbols:
        families.append(MISC_SYMBOL_KEYCODES)
    if options.include_misc_symbols_shifted:
        families.append(MISC_SYMBOL_SHIFTED_KEYCODES)
    families.append(Keycode.from_name(name) for name in options.explicit_inclusions)

    selected = set()
    for family in families:
        selected.update(family)

    order = {k: i for i, k in enumerate(Keycode)}
    return sorted(selected, key=order.__getitem__)
