from __future__ import annotations

from datetime import datetime
from time import sleep

import httpx

from duecal.core.config import PaymentConfig
from duecal.core.log import log
from duecal.core.models.obligation import RecurringObligation


class HttpPaymentExecutor:
    """
    支付服务 HTTP 客户端（实现 PaymentExecutor 协议）。

    职责：
    - 调用 `POST {base_url}/obligations/{id}/pay` 发起扣款；
    - 5xx/429 视为可重试错误，按指数退避有限重试；
    - 其它非 2xx 视为业务失败，返回 False，由批处理任务累计失败次数。

    设计原则：
    - 仅负责 HTTP 请求与响应判断，不直接落库；
    - 重试耗尽后抛出 httpx 异常，由上层计为失败并记录。
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        retries: int | None = None,
        backoff_base: float = 0.5,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        初始化支付客户端。

        Args:
            base_url: 支付服务地址；为空时读取 PAYMENT_API_BASE_URL。
            token: Bearer Token；为空时读取 PAYMENT_API_TOKEN。
            timeout: 单次请求超时（秒）。
            retries: 最大重试次数（不含首次请求）。
            backoff_base: 退避基础间隔（秒），实际等待约为 base * 2^attempt。
            transport: 自定义 httpx 传输层（测试时注入 MockTransport）。
        """
        self.base_url = (base_url or PaymentConfig.get_base_url()).rstrip("/")
        self.token = token if token is not None else PaymentConfig.get_token()
        self.timeout = timeout if timeout is not None else PaymentConfig.get_timeout()
        self.retries = retries if retries is not None else PaymentConfig.get_retries()
        if self.retries < 0:
            raise ValueError("retries 必须 >= 0")
        self.backoff_base = backoff_base
        self.transport = transport

    def pay(self, obligation: RecurringObligation, due_at: datetime) -> bool:
        url = f"{self.base_url}/obligations/{obligation.id}/pay"
        payload = {
            "obligation_id": obligation.id,
            "kind": obligation.kind,
            "amount": str(obligation.amount) if obligation.amount is not None else None,
            "currency": obligation.currency,
            "due_at": due_at.isoformat(),
            # 幂等键：同一义务同一到期日只扣一次
            "idempotency_key": f"{obligation.id}:{due_at.date().isoformat()}",
            "note": "autopay",
        }
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        attempt = 0
        while True:
            try:
                with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                    resp = client.post(url, json=payload, headers=headers)
                if resp.status_code >= 500 or resp.status_code == 429:
                    resp.raise_for_status()
                if not resp.is_success:
                    log(
                        "[Client:Payment] 扣款被拒绝："
                        f"obligation={obligation.id} status={resp.status_code}"
                    )
                    return False
                return True
            except httpx.HTTPError as err:
                log(f"[Client:Payment] 请求失败：obligation={obligation.id} err={err}")
                if attempt >= self.retries:
                    raise
                attempt += 1
                sleep(self.backoff_base * (2**attempt))


class DryRunPaymentExecutor:
    """本地演练用执行器：只打印，不发起扣款，始终返回成功。"""

    def pay(self, obligation: RecurringObligation, due_at: datetime) -> bool:
        log(
            f"[Payment:dry-run] {obligation.id} {obligation.name} "
            f"{obligation.amount} {obligation.currency} @ {due_at.isoformat()}"
        )
        return True
