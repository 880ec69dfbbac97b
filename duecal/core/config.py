from __future__ import annotations

import os


def get_db_path() -> str:
    """
    返回 SQLite DB 路径（自动扣款状态库）。

    Returns:
        数据库文件路径；默认 `data/duecal.db`（可由 `DB_PATH` 覆盖）。
    """
    return os.getenv("DB_PATH", "data/duecal.db")


def enable_sql_debug() -> bool:
    """
    是否启用 SQL 打印（开发期可打开）。

    Returns:
        True/False（由 `ENABLE_SQL_DEBUG=1` 控制）。
    """
    return os.getenv("ENABLE_SQL_DEBUG", "0") == "1"


TIMEZONE = "Asia/Shanghai"
CURRENCY = "CNY"


def get_default_timezone() -> str:
    """记录未填写时区时使用的默认时区（`DEFAULT_TIMEZONE`）。"""
    return os.getenv("DEFAULT_TIMEZONE", TIMEZONE)


def get_default_currency() -> str:
    """记录未填写币种时使用的默认币种（`DEFAULT_CURRENCY`）。"""
    return os.getenv("DEFAULT_CURRENCY", CURRENCY)


def get_due_soon_days() -> int:
    """
    返回“即将到期”阈值天数。

    Returns:
        默认 7（由 `DUE_SOON_DAYS` 配置）。
    """
    return int(os.getenv("DUE_SOON_DAYS", "7"))


def get_autopay_max_retries() -> int:
    """
    返回自动扣款连续失败上限，达到后自动关闭该义务的自动扣款。

    Returns:
        默认 3（由 `AUTOPAY_MAX_RETRIES` 配置）。
    """
    return int(os.getenv("AUTOPAY_MAX_RETRIES", "3"))


class PaymentConfig:
    """
    支付接口配置。

    环境变量：
    - PAYMENT_API_BASE_URL: 支付服务地址（未配置时只能使用 dry-run 执行器）
    - PAYMENT_API_TOKEN: Bearer Token（可选）
    - PAYMENT_API_TIMEOUT: 请求超时秒数（默认 10）
    - PAYMENT_API_RETRIES: 5xx/429 时的重试次数（默认 2）
    """

    @staticmethod
    def get_base_url() -> str:
        """
        返回支付服务地址。

        Raises:
            RuntimeError: 未配置 PAYMENT_API_BASE_URL 环境变量。
        """
        value = os.getenv("PAYMENT_API_BASE_URL")
        if not value:
            raise RuntimeError("未配置 PAYMENT_API_BASE_URL 环境变量")
        return value.rstrip("/")

    @staticmethod
    def get_token() -> str | None:
        """返回支付服务 Token（可选）。"""
        return os.getenv("PAYMENT_API_TOKEN") or None

    @staticmethod
    def get_timeout() -> float:
        """返回请求超时秒数。"""
        return float(os.getenv("PAYMENT_API_TIMEOUT", "10"))

    @staticmethod
    def get_retries() -> int:
        """返回最大重试次数。"""
        return int(os.getenv("PAYMENT_API_RETRIES", "2"))
