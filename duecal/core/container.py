"""
依赖容器模块（Dependency Container）。

职责：
- 集中管理依赖对象的创建逻辑，通过 @register 注册到依赖注入容器
- 数据库连接在模块级缓存复用

注意事项：
    - @register 的名字必须与 Flow 函数参数名一致
    - 本模块在 duecal/flows/__init__.py 中自动导入，确保注册表在任何 Flow 使用前被填充
"""

from __future__ import annotations

import sqlite3

from duecal.core.config import PaymentConfig
from duecal.core.dependency import register
from duecal.core.log import log
from duecal.core.protocols import PaymentExecutor
from duecal.data.client.payment import DryRunPaymentExecutor, HttpPaymentExecutor
from duecal.data.db.autopay_state_repo import AutopayStateRepo
from duecal.data.db.db_helper import DbHelper

# ========== 全局单例（连接复用） ==========

_db_connection: sqlite3.Connection | None = None


def get_db_connection() -> sqlite3.Connection:
    """
    获取数据库连接（单例模式）。

    Returns:
        SQLite 连接对象；首次调用时初始化 Schema，后续复用同一连接。
    """
    global _db_connection
    if _db_connection is None:
        db_helper = DbHelper()
        db_helper.init_schema_if_needed()
        _db_connection = db_helper.get_connection()
    return _db_connection


# ========== 依赖工厂函数（注册到容器） ==========


@register("autopay_state_repo")
def get_autopay_state_repo() -> AutopayStateRepo:
    """
    获取自动扣款运行状态仓储。

    注册名：autopay_state_repo
    """
    return AutopayStateRepo(get_db_connection())


@register("payment_executor")
def get_payment_executor() -> PaymentExecutor:
    """
    获取扣款执行器。

    Returns:
        已配置 PAYMENT_API_BASE_URL 时返回 HTTP 执行器，否则返回 dry-run 执行器。

    注册名：payment_executor
    """
    try:
        PaymentConfig.get_base_url()
    except RuntimeError:
        log("[Container] 未配置 PAYMENT_API_BASE_URL，使用 dry-run 扣款执行器")
        return DryRunPaymentExecutor()
    return HttpPaymentExecutor()
