from __future__ import annotations

from datetime import datetime
from typing import Protocol

from duecal.core.models.autopay import AutopayState
from duecal.core.models.obligation import RecurringObligation

# ============================================================================
# 外部协作方协议（引擎只依赖这些接口，不关心实现）
# ============================================================================


class PaymentExecutor(Protocol):
    """
    扣款执行器（不透明的副作用回调）。

    约定：成功返回 True；业务失败（余额不足、拒付）返回 False；
    网络等异常可以直接抛出，由批处理任务计为一次失败。
    """

    def pay(self, obligation: RecurringObligation, due_at: datetime) -> bool:
        """
        为 obligation 的本期到期（due_at）发起扣款。

        Args:
            obligation: 待扣款义务（金额原样透传）。
            due_at: 本期到期时刻。
        """


class AutopayStateStore(Protocol):
    """自动扣款运行状态存取（默认实现见 duecal.data.db.autopay_state_repo）。"""

    def get_or_default(self, obligation_id: str) -> AutopayState:
        """读取运行状态；不存在时返回初始状态。"""

    def save(self, state: AutopayState) -> None:
        """按 obligation_id 幂等写入。"""

    def list_all(self) -> list[AutopayState]:
        """返回全部运行状态。"""
