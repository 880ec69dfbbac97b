"""
下一次到期日计算（纯函数，只处理日历日期）。

规则：
- 结果总是严格晚于 from_day（不会返回同一天或过去的日期）；
- 月份天数不足时，目标日向下钳制到月末（2 月 31 日 → 2 月 28/29 日），
  不报错、不顺延到下个月；
- Biweekly 按 anchor + k·14 天直接计算，不从 from_day 累加，避免相位漂移；
- Quarterly/SemiAnnual/Annual/EveryNMonths 的月份相位锁定在锚定日所在月份。

输入假定已通过 `validate()`，本模块对合法输入是全函数，不抛出校验类异常。
"""

from __future__ import annotations

from calendar import monthrange
from datetime import date, timedelta

from duecal.core.models.frequency import (
    LAST_DAY_OF_MONTH,
    MONTH_STEP_KINDS,
    Biweekly,
    FrequencySpec,
    Monthly,
    Weekly,
    month_step,
)

BIWEEKLY_DAYS = 14


def last_day_of_month(year: int, month: int) -> int:
    """返回某月的天数（即最后一天的日号）。"""
    return monthrange(year, month)[1]


def clamp_day(year: int, month: int, day_of_month: int) -> date:
    """
    在指定月份取 day_of_month，超出当月天数时钳制到月末。

    Args:
        year: 年。
        month: 月（1..12）。
        day_of_month: 1..31 或 LAST_DAY_OF_MONTH。

    Returns:
        钳制后的日期。
    """
    last = last_day_of_month(year, month)
    if day_of_month == LAST_DAY_OF_MONTH:
        return date(year, month, last)
    return date(year, month, min(day_of_month, last))


def month_index(day: date) -> int:
    """将日期映射为连续的月序号（year * 12 + month - 1）。"""
    return day.year * 12 + day.month - 1


def _day_in_month_index(index: int, day_of_month: int) -> date:
    year, month0 = divmod(index, 12)
    return clamp_day(year, month0 + 1, day_of_month)


def sunday_based_weekday(day: date) -> int:
    """返回 0=周日 … 6=周六 口径的星期（`date.weekday()` 为 0=周一）。"""
    return (day.weekday() + 1) % 7


def next_occurrence(spec: FrequencySpec, anchor: date, from_day: date) -> date:
    """
    计算 from_day 之后（严格晚于）的下一次到期日。

    Args:
        spec: 频率。
        anchor: 序列锚定日（Biweekly 的相位基准；按月步进频率的月份基准）。
        from_day: 参考日期。

    Returns:
        严格晚于 from_day 的日历日期（未做工作日调整）。

    Raises:
        ValueError: 未知的频率类型。

    示例：
        >>> next_occurrence(Monthly(31), date(2024, 1, 31), date(2024, 2, 1))
        datetime.date(2024, 2, 29)
    """
    if isinstance(spec, Monthly):
        return _next_monthly(spec.day_of_month, from_day)
    if isinstance(spec, Weekly):
        return _next_weekly(spec.weekday, from_day)
    if isinstance(spec, Biweekly):
        return _next_biweekly(anchor, from_day)
    if isinstance(spec, MONTH_STEP_KINDS):
        return _next_month_step(month_step(spec), spec.day_of_month, anchor, from_day)
    raise ValueError(f"未知的频率类型：{spec!r}")


def _next_monthly(day_of_month: int, from_day: date) -> date:
    # 先取当月；已过（含当天）则进入下月，两次都做钳制
    candidate = clamp_day(from_day.year, from_day.month, day_of_month)
    if candidate <= from_day:
        candidate = _day_in_month_index(month_index(from_day) + 1, day_of_month)
    return candidate


def _next_weekly(weekday: int, from_day: date) -> date:
    days_ahead = (weekday - sunday_based_weekday(from_day)) % 7 or 7
    return from_day + timedelta(days=days_ahead)


def _next_biweekly(anchor: date, from_day: date) -> date:
    if from_day < anchor:
        return anchor
    periods = (from_day - anchor).days // BIWEEKLY_DAYS + 1
    return anchor + timedelta(days=periods * BIWEEKLY_DAYS)


def _next_month_step(step: int, day_of_month: int, anchor: date, from_day: date) -> date:
    anchor_index = month_index(anchor)
    # 最后一个不晚于 from_day 所在月份的周期；其下一周期必然落在更晚的月份
    k = max(0, (month_index(from_day) - anchor_index) // step)
    candidate = _day_in_month_index(anchor_index + k * step, day_of_month)
    if candidate <= from_day:
        candidate = _day_in_month_index(anchor_index + (k + 1) * step, day_of_month)
    return candidate
