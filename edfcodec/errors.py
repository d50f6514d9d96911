"""
Codec failures.

All of them abort the current read or write pass: a single offset error
corrupts every fixed-width field that follows it.
"""

from typing import Optional


class EdfError(ValueError):
    """Base class for EDF encoding/decoding failures."""


class FormatViolation(EdfError):
    """A value does not fit its fixed-width field, or a field does not parse."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class LayoutOverflow(EdfError):
    """An annotation block's content exceeds its fixed byte budget."""

    def __init__(self, message: str, record_index: int, size: int, budget: int):
        super().__init__(message)
        self.record_index = record_index
        self.size = size
        self.budget = budget


class StructuralMismatch(EdfError):
    """Declared header counts disagree with the available data."""

    def __init__(self, message: str, signal: Optional[str] = None):
        super().__init__(message)
        self.signal = signal
