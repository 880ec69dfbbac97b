from __future__ import annotations

import logging
from datetime import datetime

_logger = logging.getLogger("duecal")


def log(msg: str) -> None:
    """
    CLI/Job 统一输出。

    Args:
        msg: 文本内容（约定以 `[Area:action]` 前缀标注来源）。

    说明：
        - 终端输出带时间戳，便于定时任务日志排查；
        - 同时写入 `duecal` logger（DEBUG 级别），`--debug` 时可见完整链路。
    """
    print(f"{datetime.now():%H:%M:%S} {msg}", flush=True)
    _logger.debug(msg)
