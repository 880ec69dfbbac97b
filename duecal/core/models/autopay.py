"""自动扣款运行状态与批处理结果。"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal

AutopayOutcome = Literal["processed", "failed", "disabled", "skipped"]


@dataclass(frozen=True, slots=True)
class AutopayState:
    """
    单个义务的自动扣款运行状态（由批处理任务持有并持久化，调度引擎不持有）。

    - last_processed_date: 最近一次处理日期（同一天最多处理一次）
    - last_paid_due: 最近一次扣款成功的到期时刻（同一期到期只扣一次）
    - failure_count: 连续失败次数，成功后清零
    - enabled: 连续失败达到上限后被置为 False，需用户重新开启
    """

    obligation_id: str
    last_processed_date: date | None = None
    failure_count: int = 0
    enabled: bool = True
    last_paid_due: datetime | None = None


@dataclass(slots=True)
class AutopayAttempt:
    """单次扣款尝试记录。"""

    obligation_id: str
    due_at: datetime
    outcome: AutopayOutcome
    failure_count: int
    message: str = ""


@dataclass(slots=True)
class AutopayRunResult:
    """每日自动扣款批处理结果统计。"""

    run_day: date
    processed: int = 0
    failed: int = 0
    disabled: int = 0
    skipped: int = 0
    attempts: list[AutopayAttempt] = field(default_factory=list)
