"""
Error taxonomy for gsdcraft.

Load-time problems raise ``SchemaError``. Codec, transcoder and safety
operations return a :class:`gsdcraft.result.Result` carrying one of the
``TranscodeError`` subclasses (or ``UnsupportedParameterError``) instead of
raising; ``Result.unwrap()`` re-raises the carried error.
"""

from pathlib import Path
from typing import Optional, Union


class GsdCraftError(Exception):
    """Base class for every gsdcraft error."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        self.message = message
        super().__init__(message)


class SchemaError(GsdCraftError):
    """Malformed GSDML document or missing mandatory schema attribute."""

    def __init__(
        self,
        message: str,
        file_path: Optional[Union[str, Path]] = None,
        line: Optional[int] = None,
    ):
        self.file_path = file_path
        self.line = line
        super().__init__(self._format_message(message))

    def _format_message(self, message: str) -> str:
        """Format error message with file and line information."""
        parts = []
        if self.file_path:
            parts.append(f"File: {self.file_path}")
        if self.line is not None:
            parts.append(f"Line: {self.line}")
        parts.append(message)
        return " | ".join(parts)


class TranscodeError(GsdCraftError):
    """Base class for decode/encode failures."""


class InsufficientDataError(TranscodeError):
    """Buffer is shorter than the declared record length."""


class FieldNotFoundError(TranscodeError):
    """Parameter name is not present in the parameter record."""


class InvalidSymbolError(TranscodeError):
    """Display text is not part of the field's value assignments."""


class RangeViolationError(TranscodeError):
    """Numeric value lies outside the field's allowed values."""


class EncodeError(TranscodeError):
    """Value could not be written into the record for the named field."""


class BoundsError(TranscodeError):
    """Byte or bit access outside the buffer or field shape."""


class EmptyInputError(TranscodeError):
    """No values were given to encode."""


class UnsupportedParameterError(GsdCraftError):
    """Safety parameter name is unknown or not writable."""


class RecordIOError(GsdCraftError, IOError):
    """Raised when reading or writing a parameter record fails.

    Record interface implementations should raise this when the device
    communication layer cannot complete a transfer (timeout, rejected write).
    """
