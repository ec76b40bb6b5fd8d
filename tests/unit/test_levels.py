"""Unit tests for severity levels."""

import pytest

from fieldlog import Level, InvalidLevel, level_name, parse_level


@pytest.mark.parametrize("level", list(Level))
def test_parse_round_trips_string_form(level):
    """Every level parses back from its string form."""
    assert parse_level(str(level)) == level


def test_string_form_is_lowercase_name():
    assert str(Level.DEBUG) == "debug"
    assert str(Level.INFO) == "info"
    assert str(Level.ERROR) == "error"


def test_levels_are_ordered_by_severity():
    assert Level.DEBUG < Level.INFO < Level.ERROR


def test_parse_ignores_case():
    assert parse_level("ERROR") == Level.ERROR
    assert Level.parse("Info") == Level.INFO


@pytest.mark.parametrize("value", ["warning", "", "infos", None, 1])
def test_parse_rejects_unknown_names(value):
    with pytest.raises(InvalidLevel) as exc_info:
        parse_level(value)

    assert exc_info.value.value == value
    assert isinstance(exc_info.value, ValueError)


def test_level_name_for_unknown_value():
    """Values outside the enum display as unknown."""
    assert level_name(Level.INFO) == "info"
    assert level_name(2) == "error"
    assert level_name(7) == "unknown"
    assert level_name("bogus") == "unknown"
