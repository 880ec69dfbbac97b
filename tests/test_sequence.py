from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone

import pytest

from duecal.core.models import Biweekly, BusinessDayRule, Monthly, Weekly
from duecal.core.schedule import sequence
from duecal.core.schedule.sequence import (
    generate_occurrences,
    next_due,
    next_occurrences,
    occurrences_between,
)
from factories import make_obligation, utc


def test_month_end_series_from_february():
    obligation = make_obligation(
        frequency=Monthly(31), starts_on=date(2024, 1, 31), due_time=time(0, 0)
    )
    dues = next_occurrences(obligation, utc(2024, 2, 1), 3)
    assert dues == [utc(2024, 2, 29), utc(2024, 3, 31), utc(2024, 4, 30)]


def test_weekly_friday():
    obligation = make_obligation(frequency=Weekly(5), starts_on=date(2024, 6, 1))
    dues = next_occurrences(obligation, utc(2024, 6, 10, 12, 0), 2)
    assert [d.date() for d in dues] == [date(2024, 6, 14), date(2024, 6, 21)]


def test_default_limit_is_three():
    assert len(next_occurrences(make_obligation(), utc(2024, 6, 1))) == 3


def test_results_ascending_and_after_from():
    obligation = make_obligation(frequency=Weekly(2))
    from_instant = utc(2024, 6, 12, 10, 0)
    dues = next_occurrences(obligation, from_instant, 20)
    assert len(dues) == 20
    assert all(d > from_instant for d in dues)
    assert dues == sorted(dues)


def test_later_today_included():
    obligation = make_obligation(frequency=Monthly(10), due_time=time(17, 0))
    assert next_occurrences(obligation, utc(2024, 6, 10, 9, 0), 1) == [utc(2024, 6, 10, 17, 0)]
    assert next_occurrences(obligation, utc(2024, 6, 10, 18, 0), 1) == [utc(2024, 7, 10, 17, 0)]


def test_exact_due_instant_excluded_unless_inclusive():
    obligation = make_obligation()
    due = utc(2024, 6, 20, 9, 0)
    assert next_occurrences(obligation, due, 1) == [utc(2024, 7, 20, 9, 0)]
    batch = generate_occurrences(obligation, due, 1, inclusive=True)
    assert batch.occurrences == [due]


def test_occurrences_strictly_after_starts_on():
    # 2024-01-01 为周一，开始日当天不算第一期
    obligation = make_obligation(frequency=Weekly(1), starts_on=date(2024, 1, 1))
    dues = next_occurrences(obligation, utc(2023, 12, 1), 2)
    assert [d.date() for d in dues] == [date(2024, 1, 8), date(2024, 1, 15)]


def test_not_started_yet():
    obligation = make_obligation(frequency=Monthly(10), starts_on=date(2025, 1, 1))
    assert next_occurrences(obligation, utc(2024, 6, 1), 1)[0].date() == date(2025, 1, 10)


def test_ends_on_truncates():
    obligation = make_obligation(
        frequency=Weekly(1), starts_on=date(2024, 1, 1), ends_on=date(2024, 1, 20)
    )
    dues = next_occurrences(obligation, utc(2024, 1, 1), 5)
    assert [d.date() for d in dues] == [date(2024, 1, 8), date(2024, 1, 15)]


def test_ended_series_is_empty():
    obligation = make_obligation(
        frequency=Weekly(1), starts_on=date(2024, 1, 1), ends_on=date(2024, 1, 20)
    )
    assert next_occurrences(obligation, utc(2024, 2, 1), 3) == []
    assert next_due(obligation, utc(2024, 2, 1)) is None


def test_biweekly_anchor_is_first_occurrence():
    obligation = make_obligation(
        frequency=Biweekly(), starts_on=date(2024, 1, 1), anchor_date=date(2024, 1, 5)
    )
    dues = next_occurrences(obligation, utc(2024, 1, 1), 10)
    assert dues[0].date() == date(2024, 1, 5)
    assert all((d.date() - date(2024, 1, 5)).days % 14 == 0 for d in dues)


def test_limit_zero_and_negative():
    obligation = make_obligation()
    assert next_occurrences(obligation, utc(2024, 6, 1), 0) == []
    with pytest.raises(ValueError):
        next_occurrences(obligation, utc(2024, 6, 1), -1)


def test_naive_from_rejected():
    with pytest.raises(ValueError):
        next_occurrences(make_obligation(), datetime(2024, 6, 1), 3)


def test_safety_valve_returns_partial(monkeypatch, caplog):
    # 合成结果全部落在 from 之前，迫使过滤掉每一个候选
    past = utc(2000, 1, 1)
    monkeypatch.setattr(sequence, "compose_instant", lambda day, due_time, tz: past)
    obligation = make_obligation()

    batch = generate_occurrences(obligation, utc(2024, 6, 1), 2)
    assert batch.exhausted
    assert batch.occurrences == []

    with caplog.at_level(logging.WARNING, logger="duecal.core.schedule.sequence"):
        assert next_occurrences(obligation, utc(2024, 6, 1), 2) == []
    assert "安全阀" in caplog.text


def test_next_due_inclusive():
    obligation = make_obligation()
    assert next_due(obligation, utc(2024, 6, 20, 9, 0)) == utc(2024, 6, 20, 9, 0)
    assert next_due(obligation, utc(2024, 6, 20, 9, 1)) == utc(2024, 7, 20, 9, 0)


class TestOccurrencesBetween:
    def test_closed_range(self):
        obligation = make_obligation(frequency=Weekly(1), starts_on=date(2023, 12, 1), due_time=time(0, 0))
        dues = occurrences_between(obligation, utc(2024, 1, 1), utc(2024, 1, 29))
        assert [d.date() for d in dues] == [
            date(2024, 1, 1),
            date(2024, 1, 8),
            date(2024, 1, 15),
            date(2024, 1, 22),
            date(2024, 1, 29),
        ]

    def test_respects_ends_on(self):
        obligation = make_obligation(starts_on=date(2024, 1, 1), ends_on=date(2024, 3, 1))
        dues = occurrences_between(obligation, utc(2024, 1, 1), utc(2024, 12, 31))
        assert [d.date() for d in dues] == [date(2024, 1, 20), date(2024, 2, 20)]

    def test_max_items(self):
        obligation = make_obligation(frequency=Weekly(3))
        start = utc(2024, 1, 1)
        dues = occurrences_between(obligation, start, start + timedelta(days=365), max_items=5)
        assert len(dues) == 5

    def test_end_before_start(self):
        with pytest.raises(ValueError):
            occurrences_between(make_obligation(), utc(2024, 2, 1), utc(2024, 1, 1))

    def test_result_in_obligation_zone(self):
        obligation = make_obligation(timezone="Asia/Shanghai")
        dues = occurrences_between(obligation, utc(2024, 6, 1), utc(2024, 6, 30))
        assert len(dues) == 1
        assert dues[0].astimezone(timezone.utc) == utc(2024, 6, 20, 1, 0)


class TestWeekendShiftAcrossFrom:
    """6/15 为周六、顺延到周一 6/17 09:00 的每月 15 日账单。"""

    @staticmethod
    def shifted_bill(**overrides):
        return make_obligation(
            frequency=Monthly(15), business_day_rule=BusinessDayRule.NEXT_BUSINESS_DAY, **overrides
        )

    def test_from_on_sunday(self):
        dues = next_occurrences(self.shifted_bill(), utc(2024, 6, 16, 12, 0), 1)
        assert dues == [utc(2024, 6, 17, 9, 0)]

    def test_from_on_monday_before_due_time(self):
        assert next_occurrences(self.shifted_bill(), utc(2024, 6, 17, 8, 0), 1) == [utc(2024, 6, 17, 9, 0)]
        assert next_due(self.shifted_bill(), utc(2024, 6, 17, 8, 0)) == utc(2024, 6, 17, 9, 0)

    def test_from_on_monday_after_due_time(self):
        assert next_occurrences(self.shifted_bill(), utc(2024, 6, 17, 10, 0), 1) == [utc(2024, 7, 15, 9, 0)]

    def test_last_period_on_ends_on(self):
        bill = self.shifted_bill(ends_on=date(2024, 6, 15))
        assert next_occurrences(bill, utc(2024, 6, 16, 12, 0), 3) == [utc(2024, 6, 17, 9, 0)]

    def test_range_starting_on_sunday(self):
        dues = occurrences_between(self.shifted_bill(), utc(2024, 6, 16), utc(2024, 6, 30))
        assert dues == [utc(2024, 6, 17, 9, 0)]
