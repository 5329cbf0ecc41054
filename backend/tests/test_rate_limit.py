"""Tests for rate limit string parsing."""

from __future__ import annotations

import pytest

from taskmanager.api.rate_limit import parse_rate


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("10/minute", (10, 60)),
        ("5 / second", (5, 1)),
        ("1000/Hour", (1000, 3600)),
        ("3/day", (3, 86400)),
    ],
)
def test_parse_rate(value: str, expected: tuple[int, int]) -> None:
    assert parse_rate(value, fallback=(1, 1)) == expected


def test_parse_rate_falls_back_on_garbage() -> None:
    assert parse_rate("lots", fallback=(7, 30)) == (7, 30)
    assert parse_rate("x/minute", fallback=(7, 30)) == (7, 30)
    assert parse_rate("4/fortnight", fallback=(7, 30)) == (4, 30)
