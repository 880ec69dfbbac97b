from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from duecal.core.models import (
    LAST_DAY_OF_MONTH,
    AutopaySettings,
    EveryNMonths,
    Monthly,
    ObligationInvalid,
    Quarterly,
    ValidationErrorCode,
    Weekly,
)
from duecal.core.schedule.validation import ensure_valid, validate
from factories import make_obligation


def codes(obligation) -> set[ValidationErrorCode]:
    return {e.code for e in validate(obligation)}


def test_valid_obligation():
    assert validate(make_obligation()) == []
    assert validate(make_obligation(frequency=Monthly(LAST_DAY_OF_MONTH))) == []


@pytest.mark.parametrize(
    ("overrides", "code", "field"),
    [
        ({"name": "  "}, ValidationErrorCode.MISSING_NAME, "name"),
        ({"amount": None}, ValidationErrorCode.INVALID_AMOUNT, "amount"),
        ({"amount": Decimal("0")}, ValidationErrorCode.INVALID_AMOUNT, "amount"),
        ({"amount": Decimal("-5")}, ValidationErrorCode.INVALID_AMOUNT, "amount"),
        ({"category": None}, ValidationErrorCode.MISSING_CATEGORY, "category"),
        ({"starts_on": None}, ValidationErrorCode.MISSING_START_DATE, "starts_on"),
        ({"frequency": EveryNMonths(0, 1)}, ValidationErrorCode.INVALID_INTERVAL, "frequency.n"),
        ({"frequency": EveryNMonths(13, 1)}, ValidationErrorCode.INVALID_INTERVAL, "frequency.n"),
        ({"frequency": Monthly(0)}, ValidationErrorCode.INVALID_DAY_OF_MONTH, "frequency.day_of_month"),
        ({"frequency": Monthly(32)}, ValidationErrorCode.INVALID_DAY_OF_MONTH, "frequency.day_of_month"),
        ({"frequency": Monthly(-2)}, ValidationErrorCode.INVALID_DAY_OF_MONTH, "frequency.day_of_month"),
        ({"frequency": Quarterly(40)}, ValidationErrorCode.INVALID_DAY_OF_MONTH, "frequency.day_of_month"),
        ({"frequency": Weekly(7)}, ValidationErrorCode.INVALID_WEEKDAY, "frequency.weekday"),
        ({"frequency": Weekly(-1)}, ValidationErrorCode.INVALID_WEEKDAY, "frequency.weekday"),
        ({"ends_on": date(2024, 1, 1)}, ValidationErrorCode.INVALID_END_DATE, "ends_on"),
        ({"ends_on": date(2023, 12, 1)}, ValidationErrorCode.INVALID_END_DATE, "ends_on"),
        ({"anchor_date": date(2023, 12, 31)}, ValidationErrorCode.INVALID_ANCHOR_DATE, "anchor_date"),
        (
            {"autopay": AutopaySettings(enabled=True, grace_days=8)},
            ValidationErrorCode.INVALID_GRACE_DAYS,
            "autopay.grace_days",
        ),
        ({"timezone": "Mars/Base"}, ValidationErrorCode.UNKNOWN_TIMEZONE, "timezone"),
    ],
)
def test_single_field_errors(overrides, code, field):
    errors = validate(make_obligation(**overrides))
    assert [(e.code, e.field) for e in errors] == [(code, field)]
    assert errors[0].message


def test_boundaries_accepted():
    assert validate(make_obligation(frequency=EveryNMonths(12, 31))) == []
    assert validate(make_obligation(frequency=Weekly(0))) == []
    assert validate(make_obligation(autopay=AutopaySettings(enabled=True, grace_days=7))) == []
    assert validate(make_obligation(ends_on=date(2024, 1, 2))) == []


def test_collects_all_problems():
    obligation = make_obligation(name="", amount=None, category="", frequency=Weekly(9))
    assert codes(obligation) == {
        ValidationErrorCode.MISSING_NAME,
        ValidationErrorCode.INVALID_AMOUNT,
        ValidationErrorCode.MISSING_CATEGORY,
        ValidationErrorCode.INVALID_WEEKDAY,
    }


def test_ensure_valid():
    obligation = make_obligation()
    assert ensure_valid(obligation) is obligation
    with pytest.raises(ObligationInvalid) as exc_info:
        ensure_valid(make_obligation(id="bad", amount=None))
    assert exc_info.value.obligation_id == "bad"
    assert exc_info.value.errors[0].code is ValidationErrorCode.INVALID_AMOUNT
    assert isinstance(exc_info.value, ValueError)
