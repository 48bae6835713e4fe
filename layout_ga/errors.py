"""
Error types for the keyboard grid model.

Every error carries the coordinates or token text that caused it so that
callers can act on the failure without parsing messages.
"""


class KeyboardError(Exception):
    """Base class for all layout/layer errors."""
    pass


class ShapeMismatchError(KeyboardError):
    """Raised when row or column counts do not match the declared shape."""

    axis = "rows or columns"

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected {expected} {self.axis} but found {actual} {self.axis}.")


class RowMismatchError(ShapeMismatchError):
    """Raised when the number of rows differs from the declared row count."""

    axis = "rows"


class ColMismatchError(ShapeMismatchError):
    """Raised when a row has a different number of columns than declared."""

    axis = "columns"


class OutOfBoundsError(KeyboardError, IndexError):
    """Raised when (row, col) is outside the grid dimensions."""

    def __init__(self, row: int, col: int):
        self.row = row
        self.col = col
        super().__init__(f"Indices ({row}, {col}) are out of bounds.")


class SymmetryViolationError(KeyboardError):
    """Raised when a symmetric cell's mirror is not also symmetric."""

    def __init__(self, row: int, col: int, symm_row: int, symm_col: int):
        self.row = row
        self.col = col
        self.symm_row = symm_row
        self.symm_col = symm_col
        super().__init__(
            f"Position ({row}, {col}) is marked as symmetric but its corresponding "
            f"symmetric position ({symm_row}, {symm_col}) is not."
        )

    @property
    def positions(self):
        return (self.row, self.col, self.symm_row, self.symm_col)

    def __eq__(self, other):
        if not isinstance(other, SymmetryViolationError):
            return NotImplemented
        return self.positions == other.positions

    def __hash__(self):
        return hash(self.positions)


class InvalidTokenError(KeyboardError, ValueError):
    """Raised when a textual cell token cannot be parsed."""

    def __init__(self, token: str, reason: str = ""):
        self.token = token
        self.reason = reason
        message = f"'{token}' cannot be parsed into a key."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)


class LayerIndexOutOfRangeError(KeyboardError, IndexError):
    """Raised when a layout position addresses a layer that does not exist."""

    def __init__(self, layer_index: int, num_layers: int):
        self.layer_index = layer_index
        self.num_layers = num_layers
        super().__init__(
            f"Layer index {layer_index} is out of range for a layout with {num_layers} layers."
        )
