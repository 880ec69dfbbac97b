"""CLI 公共参数解析。"""

from __future__ import annotations

import logging
from datetime import datetime

from duecal.core.config import get_default_timezone
from duecal.core.schedule.timezone import get_zone


def parse_now(value: str | None) -> datetime:
    """
    解析 --now 参数。

    Args:
        value: ISO 时间（如 2024-06-18T08:00 或 2024-06-18T08:00+08:00）；
            不带偏移时按 DEFAULT_TIMEZONE 解释；为空时取当前时刻。

    Returns:
        带时区的 datetime。

    Raises:
        ValueError: 非法时间格式。
    """
    zone = get_zone(get_default_timezone())
    if not value:
        return datetime.now(zone)
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=zone)
    return parsed


def setup_logging(debug: bool) -> None:
    """按 --debug 配置日志级别。"""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)
