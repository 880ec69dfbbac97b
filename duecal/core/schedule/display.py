from __future__ import annotations

from duecal.core.models.frequency import (
    LAST_DAY_OF_MONTH,
    Annual,
    Biweekly,
    EveryNMonths,
    FrequencySpec,
    Monthly,
    Quarterly,
    SemiAnnual,
    Weekly,
)

WEEKDAY_NAMES = ["周日", "周一", "周二", "周三", "周四", "周五", "周六"]


def _day_label(day_of_month: int) -> str:
    if day_of_month == LAST_DAY_OF_MONTH:
        return "最后一天"
    return f"{day_of_month} 日"


def describe_frequency(spec: FrequencySpec) -> str:
    """
    频率的展示文案（列表/详情页使用）。

    示例：
        Monthly(31) → "每月 31 日"；Monthly(-1) → "每月最后一天"；
        Weekly(5) → "每周五"；EveryNMonths(4, 15) → "每 4 个月 15 日"。
    """
    if isinstance(spec, Monthly):
        return f"每月{_spaced(_day_label(spec.day_of_month))}"
    if isinstance(spec, Weekly):
        if 0 <= spec.weekday <= 6:
            return f"每{WEEKDAY_NAMES[spec.weekday]}"
        return "每周"
    if isinstance(spec, Biweekly):
        return "每两周"
    if isinstance(spec, Quarterly):
        return f"每季度{_spaced(_day_label(spec.day_of_month))}"
    if isinstance(spec, SemiAnnual):
        return f"每半年{_spaced(_day_label(spec.day_of_month))}"
    if isinstance(spec, Annual):
        return f"每年{_spaced(_day_label(spec.day_of_month))}"
    if isinstance(spec, EveryNMonths):
        return f"每 {spec.n} 个月{_spaced(_day_label(spec.day_of_month))}"
    return "自定义"


def _spaced(label: str) -> str:
    # 数字前补空格，“最后一天”直接拼接
    return f" {label}" if label[0].isdigit() else label
