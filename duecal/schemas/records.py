"""
上游领域记录 Schema（Pydantic 模型）。

职责：
- 定义账单 / 债务还款 / 定投计划三类持久化记录的入参结构
- 将各自的领域字段适配为统一的 RecurringObligation，不再各自重复实现日期运算
- 提供 JSON 文件加载（CLI 使用）

设计原则：
- 按 kind 字段区分记录类型（discriminated union）
- 结构校验（类型、格式）在这里完成；业务规则（日号范围、结束日期等）交给 validate()
- 缺失的频率参数不做静默兜底，映射为非法值后由 validate() 报告
"""

from __future__ import annotations

from datetime import date, time
from decimal import Decimal
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from duecal.core.config import get_default_currency, get_default_timezone
from duecal.core.models.frequency import (
    Annual,
    Biweekly,
    EveryNMonths,
    FrequencySpec,
    Monthly,
    Quarterly,
    SemiAnnual,
    Weekly,
)
from duecal.core.models.obligation import AutopaySettings, BusinessDayRule, RecurringObligation

FrequencyName = Literal[
    "monthly",
    "weekly",
    "biweekly",
    "quarterly",
    "semiannual",
    "annual",
    "every_n_months",
]


def build_frequency(
    name: FrequencyName,
    *,
    day_of_month: int | None,
    weekday: int | None,
    every_n: int | None,
    fallback_day: int,
) -> FrequencySpec:
    """
    由扁平字段构造 FrequencySpec。

    Args:
        name: 频率名称。
        day_of_month: 日号（1..31 或 -1）；为空时取 fallback_day。
        weekday: 星期（0=周日）；weekly 缺失时映射为 -1，交由校验报告。
        every_n: 间隔月数；every_n_months 缺失时映射为 0，交由校验报告。
        fallback_day: 日号缺省值（一般为开始日期的日号）。
    """
    day = day_of_month if day_of_month is not None else fallback_day
    if name == "monthly":
        return Monthly(day)
    if name == "weekly":
        return Weekly(weekday if weekday is not None else -1)
    if name == "biweekly":
        return Biweekly()
    if name == "quarterly":
        return Quarterly(day)
    if name == "semiannual":
        return SemiAnnual(day)
    if name == "annual":
        return Annual(day)
    return EveryNMonths(every_n if every_n is not None else 0, day)


class _ScheduleFields(BaseModel):
    """三类记录共享的时间字段。"""

    id: str = Field(..., min_length=1, description="记录主键")
    name: str = Field("", description="展示名称")
    currency: str = Field(default_factory=get_default_currency, description="币种，原样透传")
    starts_on: date | None = Field(None, description="开始日期")
    ends_on: date | None = Field(None, description="结束日期（可选）")
    anchor_date: date | None = Field(None, description="锚定日，缺省取开始日期")
    due_time: time = Field(time(0, 0), description="到期墙上时间 HH:MM")
    timezone: str = Field(default_factory=get_default_timezone, description="IANA 时区")
    business_day_rule: Literal["none", "next_business_day"] = Field(
        "none",
        description="工作日规则：none / next_business_day",
    )
    autopay_enabled: bool = False
    autopay_grace_days: int = Field(0, description="提前扣款天数 0..7")

    def _fallback_day(self) -> int:
        anchor = self.anchor_date or self.starts_on
        return anchor.day if anchor else 1

    def _common(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "currency": self.currency,
            "starts_on": self.starts_on,
            "ends_on": self.ends_on,
            "anchor_date": self.anchor_date,
            "due_time": self.due_time,
            "timezone": self.timezone,
            "business_day_rule": BusinessDayRule(self.business_day_rule),
            "autopay": AutopaySettings(
                enabled=self.autopay_enabled,
                grace_days=self.autopay_grace_days,
            ),
        }


class BillRecord(_ScheduleFields):
    """账单记录。"""

    kind: Literal["bill"] = "bill"
    amount: Decimal | None = Field(None, description="账单金额")
    category_id: str | None = Field(None, description="预算分类")
    frequency: FrequencyName = "monthly"
    day_of_month: int | None = Field(None, description="日号 1..31，-1 表示月末")
    weekday: int | None = Field(None, description="星期 0..6，0=周日")
    every_n: int | None = Field(None, description="every_n_months 的间隔月数")

    def to_obligation(self) -> RecurringObligation:
        return RecurringObligation(
            kind="bill",
            amount=self.amount,
            category=self.category_id,
            frequency=build_frequency(
                self.frequency,
                day_of_month=self.day_of_month,
                weekday=self.weekday,
                every_n=self.every_n,
                fallback_day=self._fallback_day(),
            ),
            **self._common(),
        )


class DebtRecord(_ScheduleFields):
    """
    债务还款记录（按月到期）。

    due_day: 1..31，-1 表示月末；最低还款额作为扣款金额。
    """

    kind: Literal["debt"] = "debt"
    min_payment: Decimal | None = Field(None, description="最低还款额")
    due_day: int | None = Field(None, description="每月到期日号")
    category_id: str | None = Field("debt_payment", description="预算分类")

    def to_obligation(self) -> RecurringObligation:
        return RecurringObligation(
            kind="debt",
            amount=self.min_payment,
            category=self.category_id,
            frequency=Monthly(self.due_day if self.due_day is not None else self._fallback_day()),
            **self._common(),
        )


class InvestmentPlanRecord(_ScheduleFields):
    """
    定投计划记录。

    autopay_enabled 对应“自动入账定投”。
    """

    kind: Literal["investment"] = "investment"
    amount: Decimal | None = Field(None, description="每期投入金额")
    account_id: str | None = Field(None, description="投资账户")
    frequency: FrequencyName = "monthly"
    day_of_month: int | None = None
    weekday: int | None = None
    every_n: int | None = None

    def to_obligation(self) -> RecurringObligation:
        return RecurringObligation(
            kind="investment",
            amount=self.amount,
            category=self.account_id or "investment",
            frequency=build_frequency(
                self.frequency,
                day_of_month=self.day_of_month,
                weekday=self.weekday,
                every_n=self.every_n,
                fallback_day=self._fallback_day(),
            ),
            **self._common(),
        )


ObligationRecord = Annotated[
    Union[BillRecord, DebtRecord, InvestmentPlanRecord],
    Field(discriminator="kind"),
]

_RECORDS_ADAPTER: TypeAdapter[list[ObligationRecord]] = TypeAdapter(list[ObligationRecord])


def parse_records(raw: list[dict]) -> list[RecurringObligation]:
    """
    将原始字典列表解析为统一义务。

    Raises:
        pydantic.ValidationError: 结构不合法（类型错误、未知 kind 等）。
    """
    return [r.to_obligation() for r in _RECORDS_ADAPTER.validate_python(raw)]


def load_records(path: str | Path) -> list[RecurringObligation]:
    """
    从 JSON 文件（记录数组）加载义务。

    Raises:
        FileNotFoundError: 文件不存在。
        pydantic.ValidationError: 结构不合法。
    """
    file = Path(path)
    if not file.exists():
        raise FileNotFoundError(f"记录文件不存在：{path}")
    records = _RECORDS_ADAPTER.validate_json(file.read_text(encoding="utf-8"))
    return [r.to_obligation() for r in records]
