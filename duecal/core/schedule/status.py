from __future__ import annotations

from datetime import datetime

from duecal.core.models.obligation import RecurringObligation
from duecal.core.models.status import DueStatus
from duecal.core.schedule.business_day import BusinessCalendar
from duecal.core.schedule.sequence import next_due
from duecal.core.schedule.timezone import ensure_aware

DEFAULT_DUE_SOON_DAYS = 7


def days_until(due_at: datetime, now: datetime) -> int:
    """
    计算 now 到到期时刻相差的自然日数（按到期时刻所在时区的日历日）。

    - 到期时刻在今天（无论钟点是否已过）：0
    - 明天：1；昨天：-1

    Raises:
        ValueError: 一个带时区、一个不带时区。
    """
    if due_at.tzinfo is not None:
        ensure_aware(now, "now")
        now_day = now.astimezone(due_at.tzinfo).date()
    else:
        if now.tzinfo is not None:
            raise ValueError("due_at 与 now 必须同为带时区或同为不带时区的 datetime")
        now_day = now.date()
    return (due_at.date() - now_day).days


def classify(next_due_at: datetime, now: datetime) -> DueStatus:
    """
    按自然日差划分到期状态。

    当天稍后到期、或当天钟点已过但仍未跨日，都算 DUE_TODAY；跨入下一个自然日才算 OVERDUE。
    now 单调增加时状态只会 UPCOMING → DUE_TODAY → OVERDUE，不会回退。
    """
    days = days_until(next_due_at, now)
    if days < 0:
        return DueStatus.OVERDUE
    if days == 0:
        return DueStatus.DUE_TODAY
    return DueStatus.UPCOMING


def is_due_soon(next_due_at: datetime, now: datetime, threshold: int = DEFAULT_DUE_SOON_DAYS) -> bool:
    """“需要关注”信号：0 <= 剩余天数 <= threshold。"""
    return 0 <= days_until(next_due_at, now) <= threshold


def status_of(
    obligation: RecurringObligation,
    now: datetime,
    *,
    calendar: BusinessCalendar | None = None,
) -> DueStatus | None:
    """
    对义务不早于 now 的下一次到期进行分类；序列已结束返回 None（视为“无待到期”）。

    说明：引擎不持有付款记录，已过期未付的到期时刻需由调用方直接传给 `classify()`。
    """
    due_at = next_due(obligation, now, calendar=calendar)
    if due_at is None:
        return None
    return classify(due_at, now)
