"""
Safety (F-) parameter adapter.

F-parameters are not exchanged as record bytes. The engineering system
exposes them as named attributes of the device item, so this adapter maps
the well-known external names (``F_Source_Add``, ``F_WD_Time``, ...) to the
store's attribute names, validates values and forwards them to an
``AbstractSafetyAttributeStore``.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional

from gsdcraft.config import SafetySettings, get_settings
from gsdcraft.errors import (
    EmptyInputError,
    EncodeError,
    RangeViolationError,
    RecordIOError,
    UnsupportedParameterError,
)
from gsdcraft.model.device import ModuleDef
from gsdcraft.result import Result

logger = logging.getLogger(__name__)

# External name -> store attribute name
SAFETY_ATTRIBUTES: Dict[str, str] = {
    "F_SIL": "Failsafe_FSIL",
    "F_Block_ID": "Failsafe_FBlockID",
    "F_Par_Version": "Failsafe_FParVersion",
    "F_Source_Add": "Failsafe_FSourceAddress",
    "F_Dest_Add": "Failsafe_FDestinationAddress",
    "F_Par_CRC_WithoutAddresses": "Failsafe_FParameterSignatureWithoutAddresses",
    "F_Par_CRC": "Failsafe_FParameterSignatureWithAddresses",
    "F_iPar_CRC": "Failsafe_FParameterSignatureIndividualParameters",
    "F_CRC_Length": "Failsafe_F_CRC_Length",
    "F_WD_Time": "Failsafe_FMonitoringtime",
    "F_IO_DB_number": "Failsafe_FIODBNumber",
    "F_IO_DB_name": "Failsafe_FIODBName",
    "F_Passivation": "Failsafe_FPassivation",
    "Manual_assignment_of_f-monitoring_time": "Failsafe_ManualAssignmentFMonitoringtime",
    "F_IO_DB_manual_number_assignment": "Failsafe_ManualAssignmentFIODBNumber",
}

ADDRESS_PARAMETERS = ("F_Source_Add", "F_Dest_Add")
ADDRESS_MIN = 1
ADDRESS_MAX = 65534

WATCHDOG_PARAMETER = "F_WD_Time"

# Writable parameters exchanged as unsigned numbers
NUMERIC_WRITABLE = (
    "F_Source_Add",
    "F_Dest_Add",
    "F_WD_Time",
    "F_IO_DB_number",
    "F_Par_CRC",
    "F_Par_CRC_WithoutAddresses",
    "F_iPar_CRC",
    "Manual_assignment_of_f-monitoring_time",
    "F_IO_DB_manual_number_assignment",
)
TEXT_WRITABLE = ("F_IO_DB_name",)


class AbstractSafetyAttributeStore(ABC):
    """
    Abstract base class for the attribute surface of a failsafe device item.
    """

    @abstractmethod
    def get_attributes(self, names: List[str]) -> List[Any]:
        """Return the values of ``names`` in order (None for absent attributes).

        Raises:
            RecordIOError: If the attributes cannot be read.
        """
        pass

    @abstractmethod
    def set_attribute(self, name: str, value: Any) -> None:
        """Set one attribute.

        Raises:
            RecordIOError: If the attribute cannot be written.
        """
        pass


def to_unsigned(value: Any) -> int:
    """Convert user input to an unsigned integer.

    Accepts None (0), bools, ``"check"``/``"uncheck"``, numeric strings and
    integers.

    Raises:
        ValueError: If the value cannot be converted or is negative.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, str):
        text = value.strip()
        if text.lower() == "check":
            return 1
        if text.lower() == "uncheck":
            return 0
        number = int(text, 0) if text.lower().startswith("0x") else int(text)
    elif isinstance(value, int):
        number = value
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    else:
        raise ValueError(f"Cannot convert {value!r} to an unsigned integer")
    if number < 0:
        raise ValueError(f"Value {number} must not be negative")
    return number


class SafetyParameterAdapter:
    """
    Reads and writes F-parameters of failsafe modules through a store.

    Example:
        >>> adapter = SafetyParameterAdapter(store)
        >>> adapter.set_safety(module, {"F_Dest_Add": 120, "F_WD_Time": 150})
    """

    def __init__(
        self,
        store: AbstractSafetyAttributeStore,
        settings: Optional[SafetySettings] = None,
    ):
        self._store = store
        self.settings = settings if settings is not None else get_settings().safety

    @staticmethod
    def parameter_names() -> List[str]:
        """All external F-parameter names, in store order."""
        return list(SAFETY_ATTRIBUTES)

    @staticmethod
    def writable_names() -> List[str]:
        return list(NUMERIC_WRITABLE) + list(TEXT_WRITABLE)

    def _check_module(self, module: ModuleDef) -> Optional[UnsupportedParameterError]:
        if module is None or module.safety_block is None:
            name = module.id if module is not None else None
            return UnsupportedParameterError(
                f"Module '{name}' has no F_ParameterRecordDataItem", field=name
            )
        return None

    def get_safety(
        self, module: ModuleDef, requested: Optional[Iterable[str]] = None
    ) -> Result[Dict[str, Any]]:
        """
        Read F-parameters of a failsafe module.

        Args:
            module: Module descriptor carrying a safety block
            requested: External names to read (all known names when None)

        Returns:
            Result with ``{external name: value}``; attributes the store does
            not report are left out
        """
        error = self._check_module(module)
        if error:
            return Result.failure(error)

        names = list(SAFETY_ATTRIBUTES) if requested is None else list(requested)
        for name in names:
            if name not in SAFETY_ATTRIBUTES:
                return Result.failure(
                    UnsupportedParameterError(f"Unknown safety parameter '{name}'", field=name)
                )

        store_names = [SAFETY_ATTRIBUTES[name] for name in names]
        try:
            values = list(self._store.get_attributes(store_names))
        except RecordIOError as exc:
            logger.error("Error retrieving safety attributes: %s", exc)
            return Result.failure(exc)

        result = {}
        for name, value in zip(names, values):
            if value is not None:
                result[name] = value
                logger.debug("Safety parameter %s = %s", name, value)
        return Result.success(result)

    def _validate(self, name: str, value: Any) -> Result[Any]:
        if name not in SAFETY_ATTRIBUTES:
            return Result.failure(
                UnsupportedParameterError(f"Unknown safety parameter '{name}'", field=name)
            )
        if name in TEXT_WRITABLE:
            if value is None:
                return Result.failure(EncodeError(f"{name} needs a value", field=name))
            return Result.success(str(value))
        if name not in NUMERIC_WRITABLE:
            return Result.failure(
                UnsupportedParameterError(f"Safety parameter '{name}' is not writable", field=name)
            )

        try:
            number = to_unsigned(value)
        except ValueError as e:
            return Result.failure(EncodeError(f"Invalid value for {name}: {e}", field=name))

        if name in ADDRESS_PARAMETERS:
            low, high = ADDRESS_MIN, ADDRESS_MAX
        elif name == WATCHDOG_PARAMETER:
            low, high = self.settings.watchdog_min, self.settings.watchdog_max
        else:
            return Result.success(number)

        if not low <= number <= high:
            return Result.failure(
                RangeViolationError(
                    f"Invalid value {number} for {name}. Allowed range: {low}-{high}", field=name
                )
            )
        return Result.success(number)

    def set_safety(self, module: ModuleDef, values: Mapping[str, Any]) -> Result[None]:
        """
        Validate and forward F-parameter writes.

        Every value is validated before the first write reaches the store.

        Args:
            module: Module descriptor carrying a safety block
            values: ``{external name: value}``

        Returns:
            Result carrying UnsupportedParameterError, RangeViolationError,
            EncodeError or RecordIOError on failure
        """
        error = self._check_module(module)
        if error:
            return Result.failure(error)
        if not values:
            return Result.failure(EmptyInputError("No safety parameter values given"))

        validated: Dict[str, Any] = {}
        for name, value in values.items():
            checked = self._validate(name, value)
            if not checked.ok:
                logger.error("Safety parameter rejected: %s", checked.error)
                return Result.failure(checked.error)
            validated[name] = checked.value

        for name, value in validated.items():
            store_name = SAFETY_ATTRIBUTES[name]
            try:
                self._store.set_attribute(store_name, value)
            except RecordIOError as exc:
                logger.error("Error setting %s: %s", name, exc)
                return Result.failure(exc)
            logger.debug("Set %s (%s) = %s", name, store_name, value)
        return Result.success()
