from datetime import datetime, timezone

import pytest

from mqctl.errors import CommandError
from mqctl.subscription import (
    CHOICES,
    CHOICE_DURATION,
    CHOICE_FIRST,
    CHOICE_LAST,
    CHOICE_NEW,
    CHOICE_SEQUENCE,
    CHOICE_TIME,
    StartKind,
    SubscriptionOption,
    format_duration,
    parse_duration,
    parse_start_time,
    subscription_from_choice,
    subscription_from_flags,
)


def test_parse_duration_unit_relations():
    assert parse_duration("1h") == 60 * parse_duration("1m")
    assert parse_duration("1m") == 60 * parse_duration("1s")
    assert parse_duration("24h") == 24 * parse_duration("1h")


def test_parse_duration_combined_and_fractional():
    assert parse_duration("1h30m") == parse_duration("1h") + parse_duration("30m")
    assert parse_duration("1.5s") == parse_duration("1s") + parse_duration("500ms")
    assert parse_duration("-2h") == -parse_duration("2h")
    assert parse_duration("+2h") == parse_duration("2h")


def test_parse_duration_zero():
    assert parse_duration("0") == 0
    assert parse_duration("-0") == 0


@pytest.mark.parametrize("text", ["", "1", "1x", "abc", ".s", "-", "1h-2m"])
def test_parse_duration_rejects(text):
    with pytest.raises(ValueError):
        parse_duration(text)


def test_format_duration_fixed_values():
    assert format_duration(parse_duration("1h")) == "1h0m0s"
    assert format_duration(0) == "0s"


@pytest.mark.parametrize(
    "text", ["1h", "1s", "24h", "1h30m", "1.5s", "300ms", "2m3.25s", "750us", "42ns"]
)
def test_duration_round_trip(text):
    seconds = parse_duration(text)
    assert parse_duration(format_duration(seconds)) == pytest.approx(seconds)


def test_format_duration_negative():
    seconds = parse_duration("90m")
    assert format_duration(-seconds) == "-" + format_duration(seconds)


def test_parse_start_time_is_utc():
    moment = parse_start_time("2020-01-02 03:04:05")
    assert moment == datetime(2020, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def test_parse_start_time_with_fraction():
    moment = parse_start_time("2020-01-02 03:04:05.5")
    assert moment.microsecond == 500000


@pytest.mark.parametrize(
    "text", ["2020-1-02 03:04:05", "2020-13-02 03:04:05", "yesterday", "2020-01-02"]
)
def test_parse_start_time_rejects(text):
    with pytest.raises(ValueError):
        parse_start_time(text)


def test_flags_priority_order():
    option = subscription_from_flags(True, True, True, 5, "", "")
    assert option == SubscriptionOption(StartKind.NEW)
    assert subscription_from_flags(False, True, True, 5).kind is StartKind.FIRST
    assert subscription_from_flags(False, False, True, 5).kind is StartKind.LAST


def test_flags_sequence():
    assert subscription_from_flags(start_sequence=7) == SubscriptionOption(
        StartKind.SEQUENCE, 7
    )


def test_flags_zero_sequence_and_nothing_set():
    assert subscription_from_flags(start_sequence=0) is None
    assert subscription_from_flags() is None


def test_flags_time_and_duration():
    option = subscription_from_flags(start_time="2021-05-06 07:08:09")
    assert option.kind is StartKind.TIME
    assert option.value == parse_start_time("2021-05-06 07:08:09")
    option = subscription_from_flags(start_duration="1h")
    assert option == SubscriptionOption(StartKind.TIME_DELTA, parse_duration("1h"))


def test_flags_bad_time():
    with pytest.raises(CommandError, match="^start time format error"):
        subscription_from_flags(start_time="not a time")


def test_flags_bad_duration():
    with pytest.raises(CommandError, match="^start duration format error"):
        subscription_from_flags(start_duration="soon")


def test_choices_simple():
    assert subscription_from_choice(CHOICE_NEW).kind is StartKind.NEW
    assert subscription_from_choice(CHOICE_FIRST).kind is StartKind.FIRST
    assert subscription_from_choice(CHOICE_LAST).kind is StartKind.LAST
    assert len(CHOICES) == len(StartKind)


def test_choice_sequence():
    assert subscription_from_choice(CHOICE_SEQUENCE, "12") == SubscriptionOption(
        StartKind.SEQUENCE, 12
    )
    assert subscription_from_choice(CHOICE_SEQUENCE).value == 1
    with pytest.raises(ValueError):
        subscription_from_choice(CHOICE_SEQUENCE, "abc")


def test_choice_time_and_duration():
    option = subscription_from_choice(CHOICE_TIME, "2022-02-03 04:05:06")
    assert option.value == parse_start_time("2022-02-03 04:05:06")
    default = subscription_from_choice(CHOICE_TIME)
    assert default.value <= datetime.now(timezone.utc)
    option = subscription_from_choice(CHOICE_DURATION, "24h")
    assert option.value == parse_duration("24h")
    assert subscription_from_choice(CHOICE_DURATION).value == parse_duration("1h")


def test_choice_invalid():
    with pytest.raises(CommandError, match="invalid input"):
        subscription_from_choice("start from nowhere")