"""
自动扣款窗口判断与失败策略（纯函数）。

窗口：[ (到期日 - grace_days) 当天 00:00, 到期时刻 ]，均按义务自身时区。
例：grace_days=2、到期 2024-06-20 09:00 → 2024-06-18 00:00 起至 2024-06-20 09:00 止。

调度引擎只做判断；真正扣款、持久化 last_processed/last_paid_due/failure_count 由批处理任务负责
（见 duecal.flows.autopay）。
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta

from duecal.core.models.autopay import AutopayState
from duecal.core.models.obligation import RecurringObligation
from duecal.core.schedule.business_day import BusinessCalendar
from duecal.core.schedule.sequence import next_due
from duecal.core.schedule.timezone import local_date, start_of_day


def autopay_window(
    obligation: RecurringObligation,
    now: datetime,
    *,
    calendar: BusinessCalendar | None = None,
) -> tuple[datetime, datetime] | None:
    """
    返回下一次到期对应的扣款窗口 (start, end)；未开启自动扣款或序列已结束返回 None。
    """
    if obligation.autopay is None or not obligation.autopay.enabled:
        return None
    due_at = next_due(obligation, now, calendar=calendar)
    if due_at is None:
        return None
    window_day = due_at.date() - timedelta(days=obligation.autopay.grace_days)
    return start_of_day(window_day, obligation.timezone), due_at


def is_due_for_autopay(
    obligation: RecurringObligation,
    now: datetime,
    last_processed: date | None,
    *,
    last_paid_due: datetime | None = None,
    calendar: BusinessCalendar | None = None,
) -> bool:
    """
    判断义务此刻是否应执行自动扣款。

    条件（全部满足）：
    1. 自动扣款已开启；
    2. last_processed 不是今天（义务时区下的自然日），保证同一天最多处理一次；
    3. now 落在扣款窗口内（两端包含）；
    4. 本期到期尚未扣款成功（宽限期内后续几天不会重复扣同一期）。

    Args:
        obligation: 已通过校验的义务。
        now: 当前时刻（带时区）。
        last_processed: 最近一次处理日期（None 表示从未处理）。
        last_paid_due: 最近一次扣款成功的到期时刻（None 表示从未成功）。
        calendar: 工作日日历（可选）。

    Returns:
        是否应扣款。
    """
    if obligation.autopay is None or not obligation.autopay.enabled:
        return False
    if last_processed is not None and last_processed == local_date(now, obligation.timezone):
        return False
    window = autopay_window(obligation, now, calendar=calendar)
    if window is None:
        return False
    start, end = window
    if last_paid_due is not None and last_paid_due == end:
        return False
    return start <= now <= end


def apply_payment_result(
    state: AutopayState,
    *,
    success: bool,
    processed_on: date,
    max_retries: int,
    due_at: datetime | None = None,
) -> AutopayState:
    """
    按失败策略推进自动扣款状态（返回新对象，不修改入参）。

    - 成功：failure_count 清零，记录本期到期时刻 due_at；
    - 失败：failure_count + 1，连续失败达到 max_retries 时关闭自动扣款；
    - 无论成败都记录 last_processed_date，当天不再重复处理。

    Raises:
        ValueError: max_retries < 1。
    """
    if max_retries < 1:
        raise ValueError("max_retries 必须 >= 1")
    if success:
        return replace(
            state,
            last_processed_date=processed_on,
            failure_count=0,
            last_paid_due=due_at or state.last_paid_due,
        )
    failures = state.failure_count + 1
    return replace(
        state,
        last_processed_date=processed_on,
        failure_count=failures,
        enabled=state.enabled and failures < max_retries,
    )
