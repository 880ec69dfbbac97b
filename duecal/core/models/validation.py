"""义务校验结果模型。"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ValidationErrorCode(Enum):
    """字段级校验错误码。"""

    MISSING_NAME = "missing_name"  # 名称为空
    INVALID_AMOUNT = "invalid_amount"  # 金额缺失或 <= 0
    MISSING_CATEGORY = "missing_category"  # 缺少分类
    MISSING_START_DATE = "missing_start_date"  # 缺少开始日期
    INVALID_INTERVAL = "invalid_interval"  # EveryNMonths.n 不在 1..12
    INVALID_DAY_OF_MONTH = "invalid_day_of_month"  # 不在 1..31 且不是月末哨兵
    INVALID_WEEKDAY = "invalid_weekday"  # 不在 0..6
    INVALID_END_DATE = "invalid_end_date"  # ends_on <= starts_on
    INVALID_ANCHOR_DATE = "invalid_anchor_date"  # anchor_date < starts_on
    INVALID_GRACE_DAYS = "invalid_grace_days"  # grace_days 不在 0..7
    UNKNOWN_TIMEZONE = "unknown_timezone"  # 无法识别的 IANA 时区


@dataclass(frozen=True, slots=True)
class ValidationError:
    """字段级校验问题（用于表单提示，不作为控制流抛出）。"""

    field: str
    code: ValidationErrorCode
    message: str


class ObligationInvalid(ValueError):
    """`ensure_valid()` 在校验失败时抛出，携带全部字段问题。"""

    def __init__(self, obligation_id: str, errors: list[ValidationError]) -> None:
        self.obligation_id = obligation_id
        self.errors = errors
        detail = "；".join(f"{e.field}: {e.message}" for e in errors)
        super().__init__(f"义务 {obligation_id} 校验失败：{detail}")
