from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional

from duecal.core.config import enable_sql_debug, get_db_path

SCHEMA_VERSION = 2

SCHEMA_DDL = """
CREATE TABLE IF NOT EXISTS autopay_state (
    obligation_id TEXT PRIMARY KEY,
    last_processed_date TEXT,
    last_paid_due TEXT,
    failure_count INTEGER NOT NULL DEFAULT 0,
    enabled INTEGER NOT NULL DEFAULT 1 CHECK(enabled IN (0,1)),
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS meta (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class DbHelper:
    """
    SQLite 连接/Schema 初始化 Helper。

    职责：
    - 初始化数据库文件与表结构（如不存在则创建）；
    - 提供带 RowFactory 的连接；
    - 维护一个进程内共享连接（简单场景）。

    db_path 传入 ":memory:" 时使用内存库（测试场景）。
    """

    def __init__(self, db_path: Optional[str] = None) -> None:
        self.db_path = db_path or get_db_path()
        self._conn: Optional[sqlite3.Connection] = None

    def get_connection(self) -> sqlite3.Connection:
        """
        获取（或创建）SQLite 连接。

        Returns:
            已初始化的 sqlite3.Connection，`row_factory` 已设置为 sqlite3.Row。
        """
        if self._conn is None:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row
            if enable_sql_debug():
                conn.set_trace_callback(print)
            self._conn = conn
        return self._conn

    def init_schema_if_needed(self) -> None:
        """
        初始化表结构与 meta.schema_version（若未设置）。

        副作用：可能创建目录/文件，执行 DDL。

        Raises:
            RuntimeError: 已有数据库的 schema 版本过旧。
        """
        conn = self.get_connection()
        with conn:
            conn.executescript(SCHEMA_DDL)
            row = conn.execute(
                "SELECT value FROM meta WHERE key = ?",
                ("schema_version",),
            ).fetchone()
            if row is None:
                conn.execute(
                    "INSERT INTO meta(key, value) VALUES (?, ?)",
                    ("schema_version", str(SCHEMA_VERSION)),
                )
            elif int(row["value"]) < SCHEMA_VERSION:
                raise RuntimeError(
                    f"[DbHelper] Schema 版本过旧（当前 v{row['value']}，需要 v{SCHEMA_VERSION}）。"
                    f"请删除 {self.db_path} 后重新运行。"
                )

    def close(self) -> None:
        """关闭连接并释放引用。"""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
