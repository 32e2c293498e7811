"""Result type shared by the codec, transcoder and adapters."""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from gsdcraft.errors import GsdCraftError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of an operation: either a value or a typed error.

    Example:
        >>> res = Result.success(7)
        >>> res.ok, res.value
        (True, 7)
    """

    value: Optional[T] = None
    error: Optional[GsdCraftError] = None

    @classmethod
    def success(cls, value: T = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: GsdCraftError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value

    def __bool__(self) -> bool:
        return self.ok
