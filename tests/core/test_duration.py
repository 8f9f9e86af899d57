"""
Unit tests for duration token parsing.
"""

from datetime import timedelta

import pytest

from app.core.duration import duration_in_minutes, parse_duration
from app.core.errors import InvalidDurationError


def test_empty_token_is_zero():
    assert parse_duration("") == timedelta(0)


@pytest.mark.parametrize("count", [0, 1, 2, 7, 30])
def test_days(count):
    assert parse_duration(f"{count}d") == timedelta(hours=24 * count)


@pytest.mark.parametrize("count", [0, 1, 2, 52])
def test_weeks(count):
    assert parse_duration(f"{count}w") == timedelta(hours=168 * count)


@pytest.mark.parametrize(
    "token, expected",
    [
        ("15m", timedelta(minutes=15)),
        ("1h", timedelta(hours=1)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("1.5h", timedelta(minutes=90)),
        ("90s", timedelta(seconds=90)),
        ("300ms", timedelta(milliseconds=300)),
        ("2h45m30s", timedelta(hours=2, minutes=45, seconds=30)),
        ("-1h", timedelta(hours=-1)),
        ("+10m", timedelta(minutes=10)),
        ("0", timedelta(0)),
    ],
)
def test_general_grammar(token, expected):
    assert parse_duration(token) == expected


@pytest.mark.parametrize("token", ["abc", "1x", "d", "1", "1 h", "1d2h", "w1", "h", "1.d"])
def test_invalid_tokens(token):
    with pytest.raises(InvalidDurationError) as exc_info:
        parse_duration(token)
    assert exc_info.value.token == token


def test_duration_in_minutes():
    assert duration_in_minutes("") == 0
    assert duration_in_minutes("1h") == 60
    assert duration_in_minutes("1w") == 7 * 24 * 60
    # Truncated to whole minutes
    assert duration_in_minutes("90s") == 1


@pytest.mark.parametrize("token", ["9999999999w", "99999999999999d", "99999999999999h", "9" * 400 + "m"])
def test_too_large_is_invalid(token):
    with pytest.raises(InvalidDurationError) as exc_info:
        parse_duration(token)
    assert exc_info.value.token == token
