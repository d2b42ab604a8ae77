"""Exception types raised by keysig."""


class KeysigError(Exception):
    """Base class for all keysig errors."""


class UnknownLayoutError(KeysigError, KeyError):
    """Raised when a layout id is not in the layout table."""

    def __init__(self, layout_id: str):
        super().__init__(layout_id)
        self.layout_id = layout_id

    def __str__(self) -> str:
        return f"unknown keyboard layout: {self.layout_id!r}"


class InvalidModeError(KeysigError, ValueError):
    """Raised when a curve or dash mode string is not recognised."""


class CodecError(KeysigError, ValueError):
    """Raised when a serialized codec record cannot be parsed."""
