"""
周期性财务义务（账单 / 债务还款 / 定投计划的统一视图）。

调度引擎只读取这些字段，从不修改；“当前时间”总是由调用方传入。
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from enum import Enum
from typing import Literal

from duecal.core.config import CURRENCY, TIMEZONE
from duecal.core.models.frequency import FrequencySpec

ObligationKind = Literal["bill", "debt", "investment"]


class BusinessDayRule(Enum):
    """工作日顺延规则。"""

    NONE = "none"  # 不调整
    NEXT_BUSINESS_DAY = "next_business_day"  # 周六 +2 天、周日 +1 天


@dataclass(frozen=True, slots=True)
class AutopaySettings:
    """
    自动扣款设置。

    - enabled: 是否开启
    - grace_days: 提前扣款窗口（0..7 天），窗口为 [到期日 - grace_days 的 00:00, 到期时刻]
    """

    enabled: bool
    grace_days: int = 0


@dataclass(frozen=True, slots=True)
class RecurringObligation:
    """
    周期性义务。

    字段说明：
    - amount: 原样透传，不做任何金额运算；
    - anchor_date: 序列锚定日；Biweekly 必需，其余频率作为下界；为空时取 starts_on；
    - ends_on: 可选，若存在必须严格晚于 starts_on；
    - due_time + timezone: 到期时刻始终按义务自身时区解析（不是查看者时区）。

    可选字段允许为空，仅用于让 `validate()` 报告缺失项；
    进入调度引擎前应保证已通过校验。
    """

    id: str
    frequency: FrequencySpec
    starts_on: date | None
    name: str = ""
    amount: Decimal | None = None
    currency: str = CURRENCY
    category: str | None = None
    kind: ObligationKind = "bill"
    anchor_date: date | None = None
    ends_on: date | None = None
    due_time: time = time(0, 0)
    timezone: str = TIMEZONE
    business_day_rule: BusinessDayRule = BusinessDayRule.NONE
    autopay: AutopaySettings | None = None

    @property
    def anchor(self) -> date:
        """有效锚定日：anchor_date 优先，否则 starts_on。"""
        anchor = self.anchor_date or self.starts_on
        if anchor is None:
            raise ValueError(f"义务缺少 starts_on/anchor_date：{self.id}")
        return anchor

    @property
    def autopay_enabled(self) -> bool:
        return self.autopay is not None and self.autopay.enabled
