from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from duecal.core.models.obligation import ObligationKind


class DueStatus(Enum):
    """
    到期状态（三种基本状态）。

    “即将到期”（due soon）是基于阈值的派生视图，不是第四种状态。
    """

    OVERDUE = "overdue"
    DUE_TODAY = "due_today"
    UPCOMING = "upcoming"


@dataclass(frozen=True, slots=True)
class ScheduledOccurrence:
    """
    单个义务的一次具体到期（供列表、预测与分配模块消费）。

    金额原样透传，不做币种换算。
    """

    obligation_id: str
    kind: ObligationKind
    name: str
    amount: Decimal | None
    currency: str
    due_at: datetime  # 已按义务时区解析的精确时刻
    status: DueStatus
    days_until: int
