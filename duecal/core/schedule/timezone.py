"""
到期时刻合成：日历日期 + 墙上时间 + 义务自身时区 → 精确时刻。

说明：
- 始终使用义务记录上的 timezone 字段解析，与查看者所在时区、服务器本地时区无关；
- 夏令时跳变（不存在的时刻，如 02:30）按跳变前的偏移解析后规整，结果顺延为 03:30；
- 夏令时回拨（重复的时刻）取第一次出现（fold=0）。
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


@lru_cache(maxsize=64)
def get_zone(tz: str) -> ZoneInfo:
    """
    按 IANA 名称获取时区。

    Raises:
        ValueError: 无法识别的时区名称。
    """
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as err:
        raise ValueError(f"无法识别的时区：{tz}") from err


def is_known_timezone(tz: str) -> bool:
    """时区名称是否可解析。"""
    try:
        get_zone(tz)
    except ValueError:
        return False
    return True


def compose_instant(day: date, due_time: time, tz: str) -> datetime:
    """
    合成到期时刻。

    Args:
        day: 已做工作日调整的日历日期。
        due_time: 墙上时间（忽略其自带 tzinfo）。
        tz: 义务时区（IANA 名称，如 "Asia/Shanghai"）。

    Returns:
        带时区的 datetime（时区为 tz）。
    """
    zone = get_zone(tz)
    naive = datetime.combine(day, due_time.replace(tzinfo=None, fold=0))
    local = naive.replace(tzinfo=zone)
    # 经 UTC 往返一次，把夏令时缺口内的时刻规整为真实存在的墙上时间
    return local.astimezone(timezone.utc).astimezone(zone)


def local_date(instant: datetime, tz: str) -> date:
    """
    返回某时刻在指定时区下的日历日期。

    Raises:
        ValueError: instant 不带时区。
    """
    ensure_aware(instant, "instant")
    return instant.astimezone(get_zone(tz)).date()


def start_of_day(day: date, tz: str) -> datetime:
    """指定时区下某日 00:00 对应的时刻。"""
    return compose_instant(day, time(0, 0), tz)


def ensure_aware(value: datetime, name: str) -> None:
    """
    要求 datetime 带时区，避免按服务器本地时区隐式解析。

    Raises:
        ValueError: 不带时区的 datetime。
    """
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{name} 必须是带时区的 datetime：{value!r}")
