from .autopay import AutopayAttempt, AutopayOutcome, AutopayRunResult, AutopayState
from .frequency import (
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
from .obligation import AutopaySettings, BusinessDayRule, ObligationKind, RecurringObligation
from .status import DueStatus, ScheduledOccurrence
from .validation import ObligationInvalid, ValidationError, ValidationErrorCode

"""
领域模型聚合导出。

说明：
- 仅做名称聚合，不引入额外逻辑，便于上层模块统一引用；
- 调度算法位于 duecal.core.schedule，本包只放数据结构。
"""

__all__ = [
    # 频率
    "FrequencySpec",
    "Monthly",
    "Weekly",
    "Biweekly",
    "Quarterly",
    "SemiAnnual",
    "Annual",
    "EveryNMonths",
    "LAST_DAY_OF_MONTH",
    # 义务
    "RecurringObligation",
    "AutopaySettings",
    "BusinessDayRule",
    "ObligationKind",
    # 状态
    "DueStatus",
    "ScheduledOccurrence",
    # 校验
    "ValidationError",
    "ValidationErrorCode",
    "ObligationInvalid",
    # 自动扣款
    "AutopayState",
    "AutopayAttempt",
    "AutopayOutcome",
    "AutopayRunResult",
]
