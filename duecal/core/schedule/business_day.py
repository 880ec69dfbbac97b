from __future__ import annotations

from datetime import date, timedelta
from typing import Protocol

from duecal.core.models.obligation import BusinessDayRule


class BusinessCalendar(Protocol):
    """
    工作日日历协议：

    - is_business_day(day): 判断给定日期是否为工作日。
    - next_business_day_or_self(day): 若给定日为工作日则返回自身，否则返回其后第一个工作日。
    """

    def is_business_day(self, day: date) -> bool: ...

    def next_business_day_or_self(self, day: date) -> date: ...


class WeekendCalendar:
    """
    简易工作日日历：
    - 仅将周六/周日视为非工作日；
    - 不处理法定节假日（账单/还款到期日只做周末顺延）。
    """

    def is_business_day(self, day: date) -> bool:
        return day.weekday() < 5  # 0..4 = 周一..周五

    def next_business_day_or_self(self, day: date) -> date:
        weekday = day.weekday()
        if weekday == 5:  # 周六
            return day + timedelta(days=2)
        if weekday == 6:  # 周日
            return day + timedelta(days=1)
        return day


DEFAULT_CALENDAR = WeekendCalendar()

# 顺延的最大天数；自定义日历（含长假）不应超过此值
MAX_SHIFT_DAYS = 7


def apply_business_day_rule(
    day: date,
    rule: BusinessDayRule,
    calendar: BusinessCalendar | None = None,
) -> date:
    """
    对已计算出的到期日应用工作日规则。

    Args:
        day: 未调整的到期日。
        rule: NONE 原样返回；NEXT_BUSINESS_DAY 顺延到下一个工作日（周六 +2、周日 +1）。
        calendar: 工作日日历（可选，默认仅处理周末）。

    Returns:
        调整后的展示/扣款日期。

    说明：
        调整只影响本次展示，不回写重复相位。例如每月 1 日的账单落在周六时显示为
        周一到期，但下个月仍按 1 日计算。
    """
    if rule is BusinessDayRule.NONE:
        return day
    return (calendar or DEFAULT_CALENDAR).next_business_day_or_self(day)
