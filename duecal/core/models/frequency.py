"""
重复频率（FrequencySpec）。

设计原则：封闭的变体集合，每种频率只携带自己需要的字段。
- 不使用“字符串枚举 + 可选字段”的松散结构；
- 所有变体不可变（frozen），可安全地在线程间共享。

约定：
- day_of_month: 1..31，或哨兵 LAST_DAY_OF_MONTH（-1，表示“当月最后一天”）；
  目标月份天数不足时向下钳制到月末，不报错、不顺延到下月；
- weekday: 0..6，0=周日 … 6=周六（与账单表单口径一致，不是 `date.weekday()`）。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Union

LAST_DAY_OF_MONTH: Final = -1
"""月末哨兵：总是解析为目标月份的最后一天。"""


@dataclass(frozen=True, slots=True)
class Monthly:
    """每月一次。"""

    day_of_month: int


@dataclass(frozen=True, slots=True)
class Weekly:
    """每周一次（weekday: 0=周日 … 6=周六）。"""

    weekday: int


@dataclass(frozen=True, slots=True)
class Biweekly:
    """每两周一次，相位锁定在序列锚定日（anchor_date），与“当前时间”无关。"""


@dataclass(frozen=True, slots=True)
class Quarterly:
    """每季度一次（步长 3 个月）。"""

    day_of_month: int


@dataclass(frozen=True, slots=True)
class SemiAnnual:
    """每半年一次（步长 6 个月）。"""

    day_of_month: int


@dataclass(frozen=True, slots=True)
class Annual:
    """每年一次（步长 12 个月，月份取自锚定日）。"""

    day_of_month: int


@dataclass(frozen=True, slots=True)
class EveryNMonths:
    """每 n 个月一次（n: 1..12）。"""

    n: int
    day_of_month: int


FrequencySpec = Union[Monthly, Weekly, Biweekly, Quarterly, SemiAnnual, Annual, EveryNMonths]

# 按月步进的变体 -> 步长（月）
MONTH_STEP_KINDS: Final = (Quarterly, SemiAnnual, Annual, EveryNMonths)


def month_step(spec: FrequencySpec) -> int:
    """
    返回按月步进频率的步长（月）。

    Raises:
        ValueError: 非按月步进的频率（Monthly/Weekly/Biweekly）。
    """
    if isinstance(spec, Quarterly):
        return 3
    if isinstance(spec, SemiAnnual):
        return 6
    if isinstance(spec, Annual):
        return 12
    if isinstance(spec, EveryNMonths):
        return spec.n
    raise ValueError(f"不是按月步进的频率：{spec!r}")
