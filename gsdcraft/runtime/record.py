"""
Parameter record access over a device communication interface.

``ParameterRecord`` binds a ParameterBlock to an
``AbstractRecordInterface`` and performs read-modify-write cycles:
read the current record, encode the new values against it, write the
result back. The interface itself (PLC, DCP tool, simulator) lives
outside this package.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Mapping, Optional

from gsdcraft.errors import RecordIOError
from gsdcraft.model.parameter_record import ParameterBlock
from gsdcraft.result import Result

from . import transcoder

logger = logging.getLogger(__name__)


class AbstractRecordInterface(ABC):
    """
    Abstract base class for parameter record transfers.
    """

    @abstractmethod
    def read_raw(self, record_index: int, byte_offset: int, length: int) -> bytes:
        """Read ``length`` bytes of a record starting at ``byte_offset``.

        Raises:
            RecordIOError: If the transfer fails.
        """
        pass

    @abstractmethod
    def write_raw(self, record_index: int, byte_offset: int, data: bytes) -> None:
        """Write ``data`` into a record starting at ``byte_offset``.

        Raises:
            RecordIOError: If the transfer fails.
        """
        pass


class ParameterRecord:
    """
    One parameter record of one device instance.
    """

    def __init__(self, block: ParameterBlock, interface: AbstractRecordInterface):
        self.block = block
        self._interface = interface

    @property
    def record_index(self) -> int:
        return self.block.record_index

    def read(self) -> Result[bytes]:
        """Read the whole record."""
        try:
            data = self._interface.read_raw(self.block.record_index, 0, self.block.length)
        except RecordIOError as exc:
            logger.warning("Failed to read record %s: %s", self.block.record_index, exc)
            return Result.failure(exc)
        return Result.success(bytes(data))

    def write(self, data: bytes) -> Result[None]:
        """Write the whole record."""
        try:
            self._interface.write_raw(self.block.record_index, 0, bytes(data))
        except RecordIOError as exc:
            logger.warning("Failed to write record %s: %s", self.block.record_index, exc)
            return Result.failure(exc)
        return Result.success()

    def read_fields(self, requested: Optional[Iterable[str]] = None) -> Result[Dict[str, Any]]:
        """Read the record and decode the requested fields (all when None)."""
        raw = self.read()
        if not raw.ok:
            return Result.failure(raw.error)
        return transcoder.decode(self.block, raw.value, requested)

    def read_field(self, name: str) -> Result[Any]:
        """Read a single field."""
        decoded = self.read_fields([name])
        if not decoded.ok:
            return Result.failure(decoded.error)
        return Result.success(decoded.value[name])

    def write_fields(self, values: Mapping[str, Any]) -> Result[bytes]:
        """Read-modify-write: encode ``values`` against the current record.

        Nothing is written when reading or encoding fails.
        """
        raw = self.read()
        if not raw.ok:
            return Result.failure(raw.error)
        encoded = transcoder.encode(self.block, raw.value, values)
        if not encoded.ok:
            return encoded
        written = self.write(encoded.value)
        if not written.ok:
            return Result.failure(written.error)
        return encoded

    def write_field(self, name: str, value: Any) -> Result[bytes]:
        """Write a single field (read-modify-write)."""
        return self.write_fields({name: value})

    def write_defaults(self) -> Result[bytes]:
        """Write the record built from every field's default value."""
        defaults = transcoder.default_record(self.block)
        if not defaults.ok:
            return defaults
        written = self.write(defaults.value)
        if not written.ok:
            return Result.failure(written.error)
        return defaults

    def __repr__(self) -> str:
        return f"ParameterRecord(index={self.block.record_index}, length={self.block.length})"
