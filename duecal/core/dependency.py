"""
依赖注入装饰器（Dependency Injection）。

职责：
- 通过装饰器自动填充 Flow 函数的可选参数（状态仓储、扣款执行器等）
- 测试时可手动传入替身对象覆盖默认依赖

约定：
- 注册名必须与函数参数名完全一致（大小写敏感）
- 仅当参数值为 None（未传或显式传 None）时才会注入
- 注册在 duecal/flows/__init__.py 导入容器时自动完成

使用示例：
    # 1. 注册依赖工厂（在 duecal/core/container.py 中）
    @register("autopay_state_repo")
    def get_autopay_state_repo() -> AutopayStateRepo:
        return AutopayStateRepo(get_db_connection())

    # 2. Flow 函数声明可注入参数
    @dependency
    def run_daily_autopay(
        *,
        obligations: list[RecurringObligation],
        now: datetime,
        autopay_state_repo: AutopayStateRepo | None = None,  # 自动注入
    ) -> AutopayRunResult:
        ...

    # 3. 测试时传入替身，不会被覆盖
    run_daily_autopay(obligations=[...], now=now, autopay_state_repo=repo)
"""

from __future__ import annotations

import inspect
from functools import wraps
from typing import Any, Callable, TypeVar

# 依赖注册表：参数名 -> 工厂函数
_REGISTRY: dict[str, Callable[[], Any]] = {}

T = TypeVar("T")


def register(name: str) -> Callable[[Callable[[], T]], Callable[[], T]]:
    """
    装饰器：将工厂函数注册到依赖注入容器。

    Args:
        name: 注册名称，必须与目标函数的参数名完全一致。

    Returns:
        原样返回工厂函数的装饰器。
    """

    def decorator(factory_func: Callable[[], T]) -> Callable[[], T]:
        _REGISTRY[name] = factory_func
        return factory_func

    return decorator


def dependency(func: Callable[..., T]) -> Callable[..., T]:
    """
    依赖注入装饰器：调用时为值为 None 且已注册的参数创建实例。

    Args:
        func: 需要自动注入依赖的函数。

    Returns:
        包装后的函数。
    """
    sig = inspect.signature(func)

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        bound_args = sig.bind_partial(*args, **kwargs)
        bound_args.apply_defaults()

        for param_name in sig.parameters:
            if param_name in _REGISTRY and bound_args.arguments.get(param_name) is None:
                kwargs[param_name] = _REGISTRY[param_name]()

        return func(*args, **kwargs)

    return wrapper


def get_registered_deps() -> dict[str, Callable[[], Any]]:
    """
    获取当前注册的所有依赖（用于调试）。

    Returns:
        依赖注册表的副本。
    """
    return _REGISTRY.copy()
