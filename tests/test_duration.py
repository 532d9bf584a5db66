import pytest
from youtrack_client.utils.duration import (
    DurationParseError,
    format_minutes,
    parse_duration_minutes,
)


def test_parse_duration_basic_cases():
    assert parse_duration_minutes("2h") == 120
    assert parse_duration_minutes("30m") == 30
    assert parse_duration_minutes("2h 30m") == 150
    assert parse_duration_minutes("2h30m") == 150
    assert parse_duration_minutes("1.5h") == 90
    assert parse_duration_minutes("1d") == 480
    assert parse_duration_minutes("1d 2h") == 600


def test_parse_duration_bare_numbers_are_minutes():
    assert parse_duration_minutes("45") == 45
    assert parse_duration_minutes(45) == 45


def test_parse_duration_rounding():
    assert parse_duration_minutes("1.25h") == 75
    assert parse_duration_minutes("0.5m") == 1


@pytest.mark.parametrize("raw", ["invalid", "", "   ", "-1h", "0h", 0, -5, True])
def test_parse_duration_rejects_bad_input(raw):
    with pytest.raises(DurationParseError):
        parse_duration_minutes(raw)


@pytest.mark.parametrize("raw", ["1h30", "1 month", "2x 3h", "3h banana", "h2", "1hd"])
def test_parse_duration_rejects_trailing_or_unknown_text(raw):
    with pytest.raises(DurationParseError):
        parse_duration_minutes(raw)


def test_parse_duration_accepts_spaced_units():
    assert parse_duration_minutes("1 h 30 m") == 90
    assert parse_duration_minutes("1D 2H") == 600


def test_parse_error_is_value_error():
    with pytest.raises(ValueError):
        parse_duration_minutes("soon")


def test_format_minutes():
    assert format_minutes(630) == "1d 2h 30m"
    assert format_minutes(60) == "1h"
    assert format_minutes(5) == "5m"
    assert format_minutes(0) == "0m"
