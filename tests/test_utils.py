from __future__ import annotations

import json
from datetime import datetime, timedelta

import pytest

from belfast.utils import (
    RateLimiter,
    format_length,
    humanize_timedelta,
    is_intentional_command,
    or_default,
    parse_relative_time,
    shorten_text,
    write_json_atomic,
)

NOW = datetime(2024, 5, 1, 12, 0, 0)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1 minute", NOW + timedelta(minutes=1)),
        ("30 minutes", NOW + timedelta(minutes=30)),
        ("2 hours", NOW + timedelta(hours=2)),
        ("1 Day", NOW + timedelta(days=1)),
        ("  3 days ", NOW + timedelta(days=3)),
    ],
)
def test_parse_relative_time(text, expected) -> None:
    assert parse_relative_time(text, now=NOW) == expected


@pytest.mark.parametrize("text", ["two days", "2 weeks", "2", "", "2 days later"])
def test_parse_relative_time_rejects_bad_input(text) -> None:
    assert parse_relative_time(text, now=NOW) is None


def test_shorten_text() -> None:
    assert shorten_text("short", 10) == "short"
    assert shorten_text("a" * 20, 10) == "aaaaaaa..."
    assert len(shorten_text("a" * 20, 10)) == 10
    assert shorten_text(None) == ""


def test_or_default() -> None:
    assert or_default(None, "Unknown") == "Unknown"
    assert or_default("", "Unknown") == "Unknown"
    assert or_default(12, "Unknown") == "12"
    assert or_default(0, "Unknown") == "0"


def test_format_length() -> None:
    assert format_length(65) == "1:05"
    assert format_length(3725) == "1:02:05"
    assert format_length(-4) == "0:00"


def test_humanize_timedelta() -> None:
    assert humanize_timedelta(timedelta(days=1, hours=3, minutes=20)) == "1d 3h 20m"
    assert humanize_timedelta(timedelta(0)) == "0s"


def test_is_intentional_command() -> None:
    assert is_intentional_command("b!help", "b!")
    assert is_intentional_command("B!osu cookiezi", "b!")
    assert not is_intentional_command("b!!!", "b!")
    assert not is_intentional_command("b!1", "b!")
    assert not is_intentional_command("hello", "b!")


def test_write_json_atomic_creates_parent_dirs(tmp_path) -> None:
    target = tmp_path / "nested" / "data.json"
    write_json_atomic(target, {"name": "ベルファスト"})

    assert json.loads(target.read_text(encoding="utf-8")) == {"name": "ベルファスト"}
    assert [p.name for p in target.parent.iterdir()] == ["data.json"]


def test_rate_limiter_sliding_window() -> None:
    now = [0.0]
    limiter = RateLimiter(2, window=60, clock=lambda: now[0])

    assert limiter.hit("osu")
    assert limiter.hit("osu")
    assert not limiter.hit("osu")
    assert limiter.hit("quaver")

    now[0] = 59.9
    assert not limiter.hit("osu")
    now[0] = 60.0
    assert limiter.hit("osu")
