from __future__ import annotations

import json
from datetime import date, time
from decimal import Decimal

import pytest
from pydantic import ValidationError as RecordSchemaError

from duecal.core.models import (
    LAST_DAY_OF_MONTH,
    AutopaySettings,
    Biweekly,
    BusinessDayRule,
    EveryNMonths,
    Monthly,
    ValidationErrorCode,
    Weekly,
)
from duecal.core.schedule.display import describe_frequency
from duecal.core.schedule.validation import validate
from duecal.schemas.records import build_frequency, load_records, parse_records


def test_bill_record():
    [ob] = parse_records(
        [
            {
                "kind": "bill",
                "id": "b1",
                "name": "房租",
                "amount": "1500",
                "category_id": "housing",
                "frequency": "monthly",
                "day_of_month": 31,
                "starts_on": "2024-01-31",
                "due_time": "09:00",
                "timezone": "UTC",
                "business_day_rule": "next_business_day",
                "autopay_enabled": True,
                "autopay_grace_days": 2,
            }
        ]
    )
    assert ob.kind == "bill"
    assert ob.frequency == Monthly(31)
    assert ob.amount == Decimal("1500")
    assert ob.category == "housing"
    assert ob.starts_on == date(2024, 1, 31)
    assert ob.due_time == time(9, 0)
    assert ob.business_day_rule is BusinessDayRule.NEXT_BUSINESS_DAY
    assert ob.autopay == AutopaySettings(enabled=True, grace_days=2)
    assert validate(ob) == []


def test_debt_record():
    [ob] = parse_records(
        [
            {
                "kind": "debt",
                "id": "d1",
                "name": "信用卡",
                "min_payment": "300.50",
                "due_day": LAST_DAY_OF_MONTH,
                "starts_on": "2024-01-01",
            }
        ]
    )
    assert ob.kind == "debt"
    assert ob.frequency == Monthly(LAST_DAY_OF_MONTH)
    assert ob.amount == Decimal("300.50")
    assert ob.category == "debt_payment"
    assert validate(ob) == []


def test_investment_record():
    [ob] = parse_records(
        [
            {
                "kind": "investment",
                "id": "i1",
                "name": "指数定投",
                "amount": "1000",
                "frequency": "biweekly",
                "starts_on": "2024-01-05",
                "anchor_date": "2024-01-05",
            }
        ]
    )
    assert ob.kind == "investment"
    assert ob.frequency == Biweekly()
    assert ob.category == "investment"
    assert ob.anchor == date(2024, 1, 5)


def test_defaults_from_env(monkeypatch):
    monkeypatch.setenv("DEFAULT_TIMEZONE", "Europe/London")
    monkeypatch.setenv("DEFAULT_CURRENCY", "GBP")
    [ob] = parse_records([{"kind": "bill", "id": "b1", "starts_on": "2024-01-01"}])
    assert ob.timezone == "Europe/London"
    assert ob.currency == "GBP"


def test_missing_day_falls_back_to_start_day():
    [ob] = parse_records(
        [{"kind": "bill", "id": "b1", "frequency": "quarterly", "starts_on": "2024-02-14"}]
    )
    assert ob.frequency.day_of_month == 14


def test_missing_weekday_reported_by_validate():
    [ob] = parse_records([{"kind": "bill", "id": "b1", "frequency": "weekly", "starts_on": "2024-01-01"}])
    assert ob.frequency == Weekly(-1)
    assert ValidationErrorCode.INVALID_WEEKDAY in {e.code for e in validate(ob)}


def test_missing_interval_reported_by_validate():
    spec = build_frequency("every_n_months", day_of_month=None, weekday=None, every_n=None, fallback_day=3)
    assert spec == EveryNMonths(0, 3)


@pytest.mark.parametrize(
    "raw",
    [
        [{"kind": "loan", "id": "x"}],
        [{"kind": "bill", "id": ""}],
        [{"kind": "bill", "id": "b1", "frequency": "daily"}],
        [{"kind": "bill", "id": "b1", "starts_on": "not-a-date"}],
    ],
)
def test_schema_errors(raw):
    with pytest.raises(RecordSchemaError):
        parse_records(raw)


def test_load_records(tmp_path):
    path = tmp_path / "obligations.json"
    path.write_text(
        json.dumps(
            [
                {"kind": "bill", "id": "b1", "name": "水费", "amount": "80", "starts_on": "2024-01-01"},
                {"kind": "debt", "id": "d1", "min_payment": "300", "due_day": 5, "starts_on": "2024-01-01"},
            ],
            ensure_ascii=False,
        ),
        encoding="utf-8",
    )
    obligations = load_records(path)
    assert [ob.id for ob in obligations] == ["b1", "d1"]
    assert obligations[0].frequency == Monthly(1)


def test_load_records_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_records(tmp_path / "missing.json")


@pytest.mark.parametrize(
    ("spec", "label"),
    [
        (Monthly(31), "每月 31 日"),
        (Monthly(LAST_DAY_OF_MONTH), "每月最后一天"),
        (Weekly(5), "每周五"),
        (Weekly(0), "每周日"),
        (Biweekly(), "每两周"),
        (EveryNMonths(4, 15), "每 4 个月 15 日"),
    ],
)
def test_describe_frequency(spec, label):
    assert describe_frequency(spec) == label
