"""自动扣款每日批处理流程。"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

from duecal.core.config import get_autopay_max_retries, get_default_timezone
from duecal.core.dependency import dependency
from duecal.core.log import log
from duecal.core.models import AutopayAttempt, AutopayRunResult, AutopayState, RecurringObligation
from duecal.core.protocols import AutopayStateStore, PaymentExecutor
from duecal.core.schedule.autopay import apply_payment_result, is_due_for_autopay
from duecal.core.schedule.business_day import BusinessCalendar
from duecal.core.schedule.sequence import next_due
from duecal.core.schedule.timezone import ensure_aware, local_date
from duecal.core.schedule.validation import validate

logger = logging.getLogger(__name__)


@dependency
def run_daily_autopay(
    *,
    obligations: list[RecurringObligation],
    now: datetime,
    max_retries: int | None = None,
    calendar: BusinessCalendar | None = None,
    autopay_state_repo: AutopayStateStore | None = None,
    payment_executor: PaymentExecutor | None = None,
) -> AutopayRunResult:
    """
    对所有开启自动扣款的义务执行当日扣款（一般由每日定时任务调用）。

    规则：
    - 每个义务每个自然日最多处理一次（幂等键 = obligation_id + 日期），
      任务中途崩溃后直接重跑即可；
    - 每期到期只扣款成功一次：宽限期内成功后，后续几天不再扣同一期；
      失败则次日在窗口内重试；
    - 扣款失败（返回 False 或抛异常）累计 failure_count，成功后清零；
    - 连续失败达到 max_retries 后关闭该义务的自动扣款，之后不再评估，
      直到用户重新开启（见 reenable_autopay）。

    Args:
        obligations: 义务列表（未开启自动扣款的会被忽略）。
        now: 当前时刻（带时区）。
        max_retries: 连续失败上限（默认读取 AUTOPAY_MAX_RETRIES）。
        calendar: 工作日日历（可选）。
        autopay_state_repo: 运行状态仓储（可选，自动注入）。
        payment_executor: 扣款执行器（可选，自动注入）。

    Returns:
        AutopayRunResult 统计与逐条记录；run_day 为 DEFAULT_TIMEZONE 下的自然日
        （各义务的幂等判断仍按义务自身时区）。
    """
    ensure_aware(now, "now")
    retries = max_retries if max_retries is not None else get_autopay_max_retries()
    result = AutopayRunResult(run_day=local_date(now, get_default_timezone()))

    for ob in obligations:
        if not ob.autopay_enabled:
            continue
        if validate(ob):
            log(f"⚠️ [Autopay:run] 跳过未通过校验的义务：{ob.id}")
            result.skipped += 1
            continue

        state = autopay_state_repo.get_or_default(ob.id)
        if not state.enabled:
            logger.debug(f"[Autopay] 已因连续失败关闭，跳过：{ob.id}")
            result.skipped += 1
            continue
        if not is_due_for_autopay(
            ob,
            now,
            state.last_processed_date,
            last_paid_due=state.last_paid_due,
            calendar=calendar,
        ):
            continue

        due_at = next_due(ob, now, calendar=calendar)
        if due_at is None:
            continue

        message = ""
        try:
            success = payment_executor.pay(ob, due_at)
        except Exception as err:  # noqa: BLE001
            # 执行器异常按一次失败计入，不中断整批
            logger.exception(f"[Autopay] 扣款异常：{ob.id}")
            success = False
            message = str(err)

        new_state = apply_payment_result(
            state,
            success=success,
            processed_on=local_date(now, ob.timezone),
            max_retries=retries,
            due_at=due_at,
        )
        autopay_state_repo.save(new_state)

        if success:
            outcome = "processed"
            result.processed += 1
            log(f"✅ [Autopay:run] 扣款成功：{ob.id} {ob.amount} {ob.currency}")
        elif not new_state.enabled:
            outcome = "disabled"
            result.failed += 1
            result.disabled += 1
            log(f"❌ [Autopay:run] 连续失败 {new_state.failure_count} 次，已关闭自动扣款：{ob.id}")
        else:
            outcome = "failed"
            result.failed += 1
            log(f"⚠️ [Autopay:run] 扣款失败（第 {new_state.failure_count} 次）：{ob.id}")

        result.attempts.append(
            AutopayAttempt(
                obligation_id=ob.id,
                due_at=due_at,
                outcome=outcome,
                failure_count=new_state.failure_count,
                message=message,
            )
        )

    return result


@dependency
def reenable_autopay(
    *,
    obligation_id: str,
    autopay_state_repo: AutopayStateStore | None = None,
) -> AutopayState:
    """
    用户重新开启自动扣款：清零失败计数并恢复评估。

    last_processed_date 保持不变，当天已处理过的不会重复扣款。

    Returns:
        更新后的运行状态。
    """
    state = autopay_state_repo.get_or_default(obligation_id)
    new_state = replace(state, failure_count=0, enabled=True)
    autopay_state_repo.save(new_state)
    return new_state


@dependency
def list_autopay_states(
    *,
    autopay_state_repo: AutopayStateStore | None = None,
) -> list[AutopayState]:
    """返回全部自动扣款运行状态。"""
    return autopay_state_repo.list_all()
