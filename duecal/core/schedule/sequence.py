"""
到期序列生成：反复驱动“日期计算 → 工作日调整 → 时区合成”，产出后续 N 次到期时刻。

约束：
- 每个结果严格晚于 from_instant，且日期严格晚于 starts_on、不早于锚定日；
- 未调整日期晚于 ends_on 的到期不返回；序列已结束时返回空列表；
- 日期计算最多调用 limit × 10 次（安全阀），触发时返回已收集部分并记录 warning，
  不抛异常、不死循环。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterator

from duecal.core.models.obligation import BusinessDayRule, RecurringObligation
from duecal.core.schedule.business_day import MAX_SHIFT_DAYS, BusinessCalendar, apply_business_day_rule
from duecal.core.schedule.occurrence import next_occurrence
from duecal.core.schedule.timezone import compose_instant, ensure_aware, local_date

logger = logging.getLogger(__name__)

# 安全阀：每个请求结果最多允许的日期计算次数
SAFETY_FACTOR = 10

# occurrences_between 的结果上限
MAX_RANGE_OCCURRENCES = 1000


@dataclass(slots=True)
class OccurrenceBatch:
    """序列生成结果；exhausted=True 表示安全阀触发，结果可能少于请求数量。"""

    occurrences: list[datetime] = field(default_factory=list)
    exhausted: bool = False


def _lookback_start(obligation: RecurringObligation, from_instant: datetime) -> date:
    """
    游标起点：from 所在日的前一天；开启工作日顺延时再多回看 MAX_SHIFT_DAYS 天，
    以便找回未调整日期早于 from、顺延后晚于 from 的到期（如周六到期顺延到周一）。
    """
    days = 1 if obligation.business_day_rule is BusinessDayRule.NONE else 1 + MAX_SHIFT_DAYS
    return local_date(from_instant, obligation.timezone) - timedelta(days=days)


def _walk(
    obligation: RecurringObligation,
    from_instant: datetime,
    calendar: BusinessCalendar | None,
) -> Iterator[datetime]:
    """
    按序产出到期时刻（不做 from_instant 过滤），直到越过 ends_on。

    游标始终是未调整的日期，工作日顺延不会改变后续周期的相位。
    """
    starts_on = obligation.starts_on
    if starts_on is None:
        raise ValueError(f"义务缺少 starts_on：{obligation.id}")
    anchor = obligation.anchor
    # 当天尚未到点的到期也能被纳入；回看范围内已过去的到期由调用方按 from 过滤
    cursor = max(_lookback_start(obligation, from_instant), starts_on, anchor - timedelta(days=1))

    while True:
        base = next_occurrence(obligation.frequency, anchor, cursor)
        if obligation.ends_on is not None and base > obligation.ends_on:
            return
        cursor = base
        adjusted = apply_business_day_rule(base, obligation.business_day_rule, calendar)
        yield compose_instant(adjusted, obligation.due_time, obligation.timezone)


def _is_after(instant: datetime, from_instant: datetime, inclusive: bool) -> bool:
    return instant >= from_instant if inclusive else instant > from_instant


def generate_occurrences(
    obligation: RecurringObligation,
    from_instant: datetime,
    limit: int,
    *,
    inclusive: bool = False,
    calendar: BusinessCalendar | None = None,
) -> OccurrenceBatch:
    """
    生成后续到期时刻（带安全阀状态）。

    Args:
        obligation: 已通过校验的义务。
        from_instant: 参考时刻（必须带时区）。
        limit: 最多返回条数（>= 0）。
        inclusive: 是否包含恰好等于 from_instant 的到期（自动扣款窗口判断使用）。
        calendar: 工作日日历（可选）。

    Returns:
        OccurrenceBatch。

    Raises:
        ValueError: limit < 0 或 from_instant 不带时区。
    """
    ensure_aware(from_instant, "from_instant")
    if limit < 0:
        raise ValueError("limit 必须 >= 0")
    batch = OccurrenceBatch()
    if limit == 0:
        return batch
    if obligation.ends_on is not None and obligation.ends_on < _lookback_start(obligation, from_instant):
        return batch

    walker = _walk(obligation, from_instant, calendar)
    max_attempts = limit * SAFETY_FACTOR
    attempts = 0
    while len(batch.occurrences) < limit:
        if attempts >= max_attempts:
            batch.exhausted = True
            break
        instant = next(walker, None)
        if instant is None:
            break
        attempts += 1
        if _is_after(instant, from_instant, inclusive):
            batch.occurrences.append(instant)
    return batch


def next_occurrences(
    obligation: RecurringObligation,
    from_instant: datetime,
    limit: int = 3,
    *,
    calendar: BusinessCalendar | None = None,
) -> list[datetime]:
    """
    返回 from_instant 之后的至多 limit 个到期时刻（UI 预览“接下来 3 次”、预测模块使用）。

    Args:
        obligation: 已通过校验的义务。
        from_instant: 参考时刻（带时区）。
        limit: 最多返回条数。
        calendar: 工作日日历（可选）。

    Returns:
        升序的到期时刻列表；序列已结束或尚无到期时为空列表。
    """
    batch = generate_occurrences(obligation, from_instant, limit, calendar=calendar)
    if batch.exhausted:
        logger.warning(
            f"[Schedule] 安全阀触发：obligation={obligation.id} limit={limit} "
            f"got={len(batch.occurrences)}"
        )
    return batch.occurrences


def next_due(
    obligation: RecurringObligation,
    now: datetime,
    *,
    calendar: BusinessCalendar | None = None,
) -> datetime | None:
    """
    返回不早于 now 的第一次到期时刻（恰好等于 now 也算），无则返回 None。
    """
    batch = generate_occurrences(obligation, now, 1, inclusive=True, calendar=calendar)
    return batch.occurrences[0] if batch.occurrences else None


def occurrences_between(
    obligation: RecurringObligation,
    start: datetime,
    end: datetime,
    *,
    calendar: BusinessCalendar | None = None,
    max_items: int = MAX_RANGE_OCCURRENCES,
) -> list[datetime]:
    """
    返回闭区间 [start, end] 内的全部到期时刻。

    Args:
        obligation: 已通过校验的义务。
        start: 区间起点（带时区，包含）。
        end: 区间终点（带时区，包含）。
        calendar: 工作日日历（可选）。
        max_items: 结果上限；日期计算次数同样受 max_items × 10 的安全阀约束。

    Returns:
        升序的到期时刻列表。

    Raises:
        ValueError: end 早于 start，或时间不带时区。
    """
    ensure_aware(start, "start")
    ensure_aware(end, "end")
    if end < start:
        raise ValueError(f"区间终点早于起点：start={start} end={end}")
    if obligation.ends_on is not None and obligation.ends_on < _lookback_start(obligation, start):
        return []

    result: list[datetime] = []
    max_attempts = max_items * SAFETY_FACTOR
    for attempts, instant in enumerate(_walk(obligation, start, calendar), start=1):
        if instant > end:
            break
        if instant >= start:
            result.append(instant)
        if len(result) >= max_items or attempts >= max_attempts:
            logger.warning(
                f"[Schedule] 区间结果达到上限：obligation={obligation.id} "
                f"items={len(result)} attempts={attempts}"
            )
            break
    return result
