"""
Cell types stored in layers.

KeycodeKey is a key position holding a keycode plus its moveable/symmetric
flags. PhalanxKey labels a physical position with the hand and finger that
press it. Effort layers store plain floats.
"""

import math
from dataclasses import dataclass
from enum import Enum

from .errors import InvalidTokenError
from .keycode import Keycode

CELL_WIDTH = 7


@dataclass
class KeycodeKey:
    """
    A key position in a keycode layer.

    Attributes:
        value: Keycode assigned to this position
        is_moveable: Whether the optimizer may change this key
        is_symmetric: Whether this key is locked to its mirror-column partner
    """
    value: Keycode = Keycode.NO
    is_moveable: bool = True
    is_symmetric: bool = False

    @classmethod
    def from_keycode(cls, keycode: Keycode) -> "KeycodeKey":
        """Fresh key: moveable, not symmetric."""
        return cls(value=keycode)

    @classmethod
    def from_token(cls, token: str) -> "KeycodeKey":
        """
        Parse a '{VALUE}_{moveable}{symmetric}' token.

        A leading underscore ('__10') marks the sentinel key and skips value
        parsing. Flags are single '0'/'1' digits.

        Raises:
            InvalidTokenError: If the token is malformed
        """
        if "_" not in token:
            raise InvalidTokenError(token, "Missing '_' separator.")

        if token.startswith("_"):
            if not token.startswith("__"):
                raise InvalidTokenError(token, "Sentinel keys are written as '__{flags}'.")
            value = Keycode.NO
            flags = token[2:]
        else:
            value_string, flags = token.split("_", 1)
            try:
                value = Keycode.from_name(value_string)
            except ValueError:
                raise InvalidTokenError(token, f"Unknown keycode '{value_string}'.")

        if len(flags) != 2:
            raise InvalidTokenError(token, "Expected exactly two flag digits.")
        if any(f not in "01" for f in flags):
            raise InvalidTokenError(token, "Flags must be '0' or '1'.")

        return cls(value=value, is_moveable=flags[0] == "1", is_symmetric=flags[1] == "1")

    @property
    def flag_bits(self) -> str:
        return f"{int(self.is_moveable)}{int(self.is_symmetric)}"

    def to_token(self) -> str:
        value = "_" if self.value is Keycode.NO else self.value.value
        return f"{value}_{self.flag_bits}"

    def to_binary(self) -> str:
        """Value followed by its moveable and symmetric bits."""
        return f"{str(self.value):>{CELL_WIDTH - 3}}:{self.flag_bits}"

    def __str__(self) -> str:
        return str(self.value)


class Hand(Enum):
    LEFT = "L"
    RIGHT = "R"


class Finger(Enum):
    THUMB = "T"
    INDEX = "I"
    MIDDLE = "M"
    RING = "R"
    PINKIE = "P"
    JOINT = "J"  # where the pinkie meets the palm


@dataclass(frozen=True)
class PhalanxKey:
    """Hand and finger assigned to a physical key position."""
    hand: Hand
    finger: Finger

    @classmethod
    def from_token(cls, token: str) -> "PhalanxKey":
        """
        Parse a '{hand}:{finger}' token such as 'L:P' or 'R:I'.

        Raises:
            InvalidTokenError: If the token is malformed
        """
        parts = token.split(":")
        if len(parts) != 2:
            raise InvalidTokenError(token, "Expected '{hand}:{finger}'.")
        try:
            return cls(hand=Hand(parts[0].upper()), finger=Finger(parts[1].upper()))
        except ValueError:
            raise InvalidTokenError(token, "Hand must be L/R and finger one of T, I, M, R, P, J.")

    def to_token(self) -> str:
        return f"{self.hand.value}:{self.finger.value}"

    def __str__(self) -> str:
        return self.to_token()


def parse_effort_token(token: str) -> float:
    """
    Parse a non-negative effort value.

    Raises:
        InvalidTokenError: If the token is not a number or is negative
    """
    try:
        value = float(token)
    except ValueError:
        raise InvalidTokenError(token, "Effort values must be numbers.")
    if not math.isfinite(value) or value < 0:
        raise InvalidTokenError(token, "Effort values must be finite and non-negative.")
    return value


def cell_to_token(value) -> str:
    """Token form of any layer cell, the inverse of its parser."""
    if hasattr(value, "to_token"):
        return value.to_token()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
