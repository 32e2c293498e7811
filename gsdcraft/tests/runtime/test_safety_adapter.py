"""
Tests for the F-parameter adapter.
"""

import logging

import pytest

from gsdcraft.config import SafetySettings
from gsdcraft.errors import (
    EmptyInputError,
    EncodeError,
    RangeViolationError,
    RecordIOError,
    UnsupportedParameterError,
)
from gsdcraft.runtime import AbstractSafetyAttributeStore, SafetyParameterAdapter
from gsdcraft.runtime.safety import SAFETY_ATTRIBUTES, to_unsigned


class DictAttributeStore(AbstractSafetyAttributeStore):
    def __init__(self, attributes=None, fail_on=None):
        self.attributes = dict(attributes or {})
        self.fail_on = fail_on
        self.set_calls = []

    def get_attributes(self, names):
        if self.fail_on == "get":
            raise RecordIOError("device item not reachable")
        return [self.attributes.get(name) for name in names]

    def set_attribute(self, name, value):
        if self.fail_on == name:
            raise RecordIOError(f"{name} is read-only")
        self.set_calls.append((name, value))
        self.attributes[name] = value


@pytest.fixture
def failsafe_module(description):
    return description.get_module("MOD_FDI")


@pytest.fixture
def store():
    return DictAttributeStore(
        {
            "Failsafe_FSourceAddress": 1,
            "Failsafe_FDestinationAddress": 100,
            "Failsafe_FMonitoringtime": 150,
            "Failsafe_FSIL": "SIL3",
        }
    )


@pytest.fixture
def adapter(store):
    return SafetyParameterAdapter(store)


class TestToUnsigned:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, 0),
            (True, 1),
            (False, 0),
            ("check", 1),
            ("Uncheck", 0),
            ("42", 42),
            (" 0x10 ", 16),
            (7, 7),
            (3.0, 3),
        ],
    )
    def test_conversion(self, value, expected):
        assert to_unsigned(value) == expected

    @pytest.mark.parametrize("value", ["-1", -1, "abc", 1.5, [1]])
    def test_rejected(self, value):
        with pytest.raises(ValueError):
            to_unsigned(value)


class TestGetSafety:
    def test_reads_reported_attributes(self, adapter, failsafe_module):
        result = adapter.get_safety(failsafe_module)
        assert result.ok
        assert result.value == {
            "F_SIL": "SIL3",
            "F_Source_Add": 1,
            "F_Dest_Add": 100,
            "F_WD_Time": 150,
        }

    def test_requested_names(self, adapter, failsafe_module):
        assert adapter.get_safety(failsafe_module, ["F_WD_Time"]).value == {"F_WD_Time": 150}

    def test_unknown_name(self, adapter, failsafe_module):
        result = adapter.get_safety(failsafe_module, ["F_Speed"])
        assert isinstance(result.error, UnsupportedParameterError)
        assert result.error.field == "F_Speed"

    def test_module_without_safety_block(self, adapter, description):
        result = adapter.get_safety(description.get_module("MOD_AI"))
        assert isinstance(result.error, UnsupportedParameterError)

    def test_store_failure(self, failsafe_module, caplog):
        adapter = SafetyParameterAdapter(DictAttributeStore(fail_on="get"))
        with caplog.at_level(logging.ERROR):
            result = adapter.get_safety(failsafe_module)
        assert isinstance(result.error, RecordIOError)
        assert "device item not reachable" in caplog.text


class TestSetSafety:
    def test_forwards_store_names(self, adapter, store, failsafe_module):
        result = adapter.set_safety(
            failsafe_module, {"F_Dest_Add": "120", "F_WD_Time": 200, "F_IO_DB_name": "FDI_DB"}
        )
        assert result.ok
        assert store.set_calls == [
            ("Failsafe_FDestinationAddress", 120),
            ("Failsafe_FMonitoringtime", 200),
            ("Failsafe_FIODBName", "FDI_DB"),
        ]

    def test_manual_flags_accept_check_words(self, adapter, store, failsafe_module):
        assert adapter.set_safety(failsafe_module, {"Manual_assignment_of_f-monitoring_time": "check"}).ok
        assert store.set_calls == [("Failsafe_ManualAssignmentFMonitoringtime", 1)]

    @pytest.mark.parametrize("value", [0, 65535])
    def test_address_out_of_range(self, adapter, store, failsafe_module, value):
        result = adapter.set_safety(failsafe_module, {"F_Source_Add": value})
        assert isinstance(result.error, RangeViolationError)
        assert f"Invalid value {value} for F_Source_Add. Allowed range: 1-65534" in str(result.error)
        assert store.set_calls == []

    def test_watchdog_range_from_settings(self, store, failsafe_module):
        adapter = SafetyParameterAdapter(store, SafetySettings(watchdog_min=10, watchdog_max=500))
        assert isinstance(adapter.set_safety(failsafe_module, {"F_WD_Time": 501}).error, RangeViolationError)
        assert isinstance(adapter.set_safety(failsafe_module, {"F_WD_Time": 9}).error, RangeViolationError)
        assert adapter.set_safety(failsafe_module, {"F_WD_Time": 500}).ok

    def test_default_watchdog_range(self, adapter, failsafe_module):
        assert adapter.settings.watchdog_max == 10000
        assert isinstance(adapter.set_safety(failsafe_module, {"F_WD_Time": 10001}).error, RangeViolationError)

    def test_read_only_parameter(self, adapter, failsafe_module):
        result = adapter.set_safety(failsafe_module, {"F_SIL": "SIL2"})
        assert isinstance(result.error, UnsupportedParameterError)
        assert result.error.field == "F_SIL"

    def test_unknown_parameter(self, adapter, failsafe_module):
        assert isinstance(adapter.set_safety(failsafe_module, {"F_Speed": 1}).error, UnsupportedParameterError)

    def test_invalid_number(self, adapter, failsafe_module):
        result = adapter.set_safety(failsafe_module, {"F_IO_DB_number": "many"})
        assert isinstance(result.error, EncodeError)
        assert result.error.field == "F_IO_DB_number"

    def test_empty_values(self, adapter, failsafe_module):
        assert isinstance(adapter.set_safety(failsafe_module, {}).error, EmptyInputError)

    def test_validation_precedes_writes(self, adapter, store, failsafe_module):
        result = adapter.set_safety(failsafe_module, {"F_Dest_Add": 5, "F_Source_Add": 0})
        assert not result.ok
        assert store.set_calls == []

    def test_store_failure_stops_writes(self, failsafe_module):
        store = DictAttributeStore(fail_on="Failsafe_FMonitoringtime")
        adapter = SafetyParameterAdapter(store)
        result = adapter.set_safety(failsafe_module, {"F_Dest_Add": 5, "F_WD_Time": 100, "F_Source_Add": 7})
        assert isinstance(result.error, RecordIOError)
        assert store.set_calls == [("Failsafe_FDestinationAddress", 5)]

    def test_module_without_safety_block(self, adapter, description):
        result = adapter.set_safety(description.device_access_point, {"F_Dest_Add": 5})
        assert isinstance(result.error, UnsupportedParameterError)


def test_name_tables():
    assert SafetyParameterAdapter.parameter_names() == list(SAFETY_ATTRIBUTES)
    assert "F_IO_DB_name" in SafetyParameterAdapter.writable_names()
    assert "F_SIL" not in SafetyParameterAdapter.writable_names()
