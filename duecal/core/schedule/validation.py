from __future__ import annotations

from decimal import Decimal

from duecal.core.models.frequency import (
    LAST_DAY_OF_MONTH,
    MONTH_STEP_KINDS,
    EveryNMonths,
    Monthly,
    Weekly,
)
from duecal.core.models.obligation import RecurringObligation
from duecal.core.models.validation import ObligationInvalid, ValidationError, ValidationErrorCode
from duecal.core.schedule.timezone import is_known_timezone

MAX_GRACE_DAYS = 7
MAX_EVERY_N_MONTHS = 12


def _is_valid_day_of_month(value: int) -> bool:
    return value == LAST_DAY_OF_MONTH or 1 <= value <= 31


def validate(obligation: RecurringObligation) -> list[ValidationError]:
    """
    校验义务字段（表单提交、入库前调用）。

    Args:
        obligation: 待校验义务。

    Returns:
        字段级问题列表；为空表示校验通过。
    """
    errors: list[ValidationError] = []

    def add(field: str, code: ValidationErrorCode, message: str) -> None:
        errors.append(ValidationError(field=field, code=code, message=message))

    if not obligation.name or not obligation.name.strip():
        add("name", ValidationErrorCode.MISSING_NAME, "名称不能为空")
    if obligation.amount is None or obligation.amount <= Decimal("0"):
        add("amount", ValidationErrorCode.INVALID_AMOUNT, "金额必须大于 0")
    if not obligation.category:
        add("category", ValidationErrorCode.MISSING_CATEGORY, "分类不能为空")
    if obligation.starts_on is None:
        add("starts_on", ValidationErrorCode.MISSING_START_DATE, "开始日期不能为空")

    spec = obligation.frequency
    if isinstance(spec, EveryNMonths) and not 1 <= spec.n <= MAX_EVERY_N_MONTHS:
        add("frequency.n", ValidationErrorCode.INVALID_INTERVAL, f"间隔月数必须在 1..{MAX_EVERY_N_MONTHS}")
    if isinstance(spec, (Monthly, *MONTH_STEP_KINDS)) and not _is_valid_day_of_month(spec.day_of_month):
        add(
            "frequency.day_of_month",
            ValidationErrorCode.INVALID_DAY_OF_MONTH,
            f"日号必须为 1..31 或 {LAST_DAY_OF_MONTH}（月末）",
        )
    if isinstance(spec, Weekly) and not 0 <= spec.weekday <= 6:
        add("frequency.weekday", ValidationErrorCode.INVALID_WEEKDAY, "星期必须为 0..6（0=周日）")

    if obligation.starts_on is not None:
        if obligation.ends_on is not None and obligation.ends_on <= obligation.starts_on:
            add("ends_on", ValidationErrorCode.INVALID_END_DATE, "结束日期必须晚于开始日期")
        if obligation.anchor_date is not None and obligation.anchor_date < obligation.starts_on:
            add("anchor_date", ValidationErrorCode.INVALID_ANCHOR_DATE, "锚定日不能早于开始日期")

    if obligation.autopay is not None and not 0 <= obligation.autopay.grace_days <= MAX_GRACE_DAYS:
        add(
            "autopay.grace_days",
            ValidationErrorCode.INVALID_GRACE_DAYS,
            f"提前扣款天数必须在 0..{MAX_GRACE_DAYS}",
        )
    if not is_known_timezone(obligation.timezone):
        add("timezone", ValidationErrorCode.UNKNOWN_TIMEZONE, f"无法识别的时区：{obligation.timezone}")

    return errors


def ensure_valid(obligation: RecurringObligation) -> RecurringObligation:
    """
    校验并原样返回义务。

    Raises:
        ObligationInvalid: 存在任一字段问题。
    """
    errors = validate(obligation)
    if errors:
        raise ObligationInvalid(obligation.id, errors)
    return obligation
