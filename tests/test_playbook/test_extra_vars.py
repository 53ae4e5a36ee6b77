"""
Tests for extra variable normalization

Tests scalar and record entries, secrecy flags and malformed input.
"""

import pytest

from ansible_step.playbook.exceptions import MalformedVariableError
from ansible_step.playbook.extra_vars import normalize_extra_var, normalize_extra_vars, stringify
from ansible_step.playbook.models import ExtraVariable


class TestNormalizeScalars:
    """Test plain scalar entries"""

    def test_none_mapping_returns_none(self):
        """Test that an absent mapping stays absent, not an empty list"""
        assert normalize_extra_vars(None) is None

    def test_empty_mapping_returns_empty_list(self):
        """Test that an explicitly empty mapping yields an empty list"""
        assert normalize_extra_vars({}) == []

    def test_integer_scalar(self):
        """Test that an integer is stringified and not hidden"""
        result = normalize_extra_vars({"count": 5})

        assert result == [ExtraVariable(key="count", value="5", hidden=False)]

    def test_string_scalar(self):
        """Test that a string is kept as-is"""
        result = normalize_extra_vars({"release": "1.4.2"})

        assert result == [ExtraVariable(key="release", value="1.4.2", hidden=False)]

    def test_boolean_and_float_scalars(self):
        """Test boolean and float stringification"""
        result = normalize_extra_vars({"enabled": True, "disabled": False, "ratio": 0.5})

        values = {var.key: var.value for var in result}
        assert values == {"enabled": "true", "disabled": "false", "ratio": "0.5"}

    def test_keys_and_length_match_mapping(self):
        """Test that every key appears exactly once"""
        raw = {"a": 1, "b": "two", "c": {"value": 3, "hidden": True}, "d": False}

        result = normalize_extra_vars(raw)

        assert len(result) == len(raw)
        assert {var.key for var in result} == set(raw)

    def test_order_follows_mapping(self):
        """Test that output order follows mapping iteration order"""
        result = normalize_extra_vars({"z": 1, "a": 2, "m": 3})

        assert [var.key for var in result] == ["z", "a", "m"]


class TestNormalizeRecords:
    """Test {value, hidden} record entries"""

    def test_hidden_record(self):
        """Test a record marked hidden"""
        result = normalize_extra_vars({"secret": {"value": "x", "hidden": True}})

        assert result == [ExtraVariable(key="secret", value="x", hidden=True)]

    def test_visible_record(self):
        """Test a record explicitly not hidden"""
        result = normalize_extra_vars({"port": {"value": 8080, "hidden": False}})

        assert result == [ExtraVariable(key="port", value="8080", hidden=False)]

    def test_record_boolean_value(self):
        """Test that boolean record values use the same rendering as scalars"""
        var = normalize_extra_var("flag", {"value": True, "hidden": False})

        assert var.value == "true"

    def test_missing_value_fails(self):
        """Test that a record without value names the key"""
        with pytest.raises(MalformedVariableError) as exc_info:
            normalize_extra_vars({"ok": 1, "broken": {"hidden": True}})

        assert exc_info.value.key == "broken"
        assert "value" in str(exc_info.value)

    def test_missing_hidden_fails(self):
        """Test that secrecy is never defaulted"""
        with pytest.raises(MalformedVariableError) as exc_info:
            normalize_extra_vars({"token": {"value": "abc"}})

        assert exc_info.value.key == "token"
        assert "hidden" in str(exc_info.value)

    def test_unknown_record_field_fails(self):
        """Test that a third record shape is rejected"""
        with pytest.raises(MalformedVariableError):
            normalize_extra_vars({"token": {"value": "abc", "hidden": True, "secret": True}})

    def test_non_boolean_hidden_fails(self):
        """Test that hidden must be a real boolean"""
        with pytest.raises(MalformedVariableError):
            normalize_extra_vars({"token": {"value": "abc", "hidden": "yes"}})

    def test_nested_value_fails(self):
        """Test that a record value must be a scalar"""
        with pytest.raises(MalformedVariableError):
            normalize_extra_vars({"token": {"value": {"nested": 1}, "hidden": False}})


class TestNormalizeRejects:
    """Test unsupported shapes"""

    @pytest.mark.parametrize("value", [None, [1, 2], object()])
    def test_unsupported_value(self, value):
        """Test that non-scalar, non-record values are rejected"""
        with pytest.raises(MalformedVariableError) as exc_info:
            normalize_extra_vars({"bad": value})

        assert exc_info.value.key == "bad"

    def test_empty_key(self):
        """Test that an empty key is rejected"""
        with pytest.raises(MalformedVariableError):
            normalize_extra_vars({"": "value"})

    def test_non_string_key(self):
        """Test that a non-string key is rejected"""
        with pytest.raises(MalformedVariableError):
            normalize_extra_vars({1: "value"})


class TestStringify:
    """Test scalar rendering"""

    def test_bool_before_int(self):
        """Test that booleans are not rendered as integers"""
        assert stringify(True) == "true"
        assert stringify(1) == "1"

    def test_hidden_value_not_in_repr(self):
        """Test that repr of a hidden variable masks the value"""
        var = ExtraVariable(key="token", value="s3cr3t", hidden=True)

        assert "s3cr3t" not in repr(var)
