"""到期预览与跨义务汇总流程。"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from duecal.core.log import log
from duecal.core.models import DueStatus, RecurringObligation, ScheduledOccurrence, ValidationError
from duecal.core.schedule.business_day import BusinessCalendar
from duecal.core.schedule.sequence import next_occurrences, occurrences_between
from duecal.core.schedule.status import DEFAULT_DUE_SOON_DAYS, classify, days_until, is_due_soon
from duecal.core.schedule.validation import validate


@dataclass(slots=True)
class ObligationPreview:
    """单个义务的预览（列表页“接下来 N 次”）。"""

    obligation: RecurringObligation
    occurrences: list[datetime] = field(default_factory=list)
    status: DueStatus | None = None  # None 表示无待到期（序列已结束）
    days_until: int | None = None
    due_soon: bool = False
    errors: list[ValidationError] = field(default_factory=list)


def preview_obligations(
    *,
    obligations: list[RecurringObligation],
    now: datetime,
    limit: int = 3,
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
    calendar: BusinessCalendar | None = None,
) -> list[ObligationPreview]:
    """
    生成每个义务的后续到期预览与状态。

    Args:
        obligations: 义务列表。
        now: 当前时刻（带时区）。
        limit: 每个义务预览的到期次数。
        due_soon_days: “即将到期”阈值。
        calendar: 工作日日历（可选）。

    Returns:
        与输入同序的预览列表；未通过校验的义务只填 errors，不参与计算。
    """
    previews: list[ObligationPreview] = []
    for ob in obligations:
        preview = ObligationPreview(obligation=ob, errors=validate(ob))
        if not preview.errors:
            preview.occurrences = next_occurrences(ob, now, limit, calendar=calendar)
            if preview.occurrences:
                first = preview.occurrences[0]
                preview.status = classify(first, now)
                preview.days_until = days_until(first, now)
                preview.due_soon = is_due_soon(first, now, due_soon_days)
        previews.append(preview)
    return previews


def list_upcoming(
    *,
    obligations: list[RecurringObligation],
    now: datetime,
    horizon_days: int = 30,
    calendar: BusinessCalendar | None = None,
) -> list[ScheduledOccurrence]:
    """
    汇总多个义务在 [now, now + horizon_days] 内的全部到期（按时间升序）。

    供预测/预算分配模块消费；金额原样透传。未通过校验的义务跳过并记录。

    Raises:
        ValueError: horizon_days < 0。
    """
    if horizon_days < 0:
        raise ValueError("horizon_days 必须 >= 0")
    end = now + timedelta(days=horizon_days)
    items: list[ScheduledOccurrence] = []
    for ob in obligations:
        errors = validate(ob)
        if errors:
            log(f"⚠️ [Schedule:upcoming] 跳过未通过校验的义务：{ob.id}（{len(errors)} 项问题）")
            continue
        for due_at in occurrences_between(ob, now, end, calendar=calendar):
            items.append(
                ScheduledOccurrence(
                    obligation_id=ob.id,
                    kind=ob.kind,
                    name=ob.name,
                    amount=ob.amount,
                    currency=ob.currency,
                    due_at=due_at,
                    status=classify(due_at, now),
                    days_until=days_until(due_at, now),
                )
            )
    items.sort(key=lambda x: (x.due_at, x.obligation_id))
    return items


def validate_obligations(obligations: list[RecurringObligation]) -> dict[str, list[ValidationError]]:
    """批量校验，只返回存在问题的义务（id -> 问题列表）。"""
    result: dict[str, list[ValidationError]] = {}
    for ob in obligations:
        errors = validate(ob)
        if errors:
            result[ob.id] = errors
    return result
