from __future__ import annotations

import sqlite3
from datetime import date, datetime

from duecal.core.models.autopay import AutopayState


class AutopayStateRepo:
    """
    自动扣款运行状态仓储（SQLite）。

    说明：只保存批处理任务自己的状态（最近处理日、连续失败数、是否被自动关闭）；
    义务本身由上游领域持久化，不在此处存储。
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def get(self, obligation_id: str) -> AutopayState | None:
        """读取某义务的运行状态，从未处理过返回 None。"""
        row = self.conn.execute(
            "SELECT * FROM autopay_state WHERE obligation_id = ?",
            (obligation_id,),
        ).fetchone()
        if not row:
            return None
        return _row_to_state(row)

    def get_or_default(self, obligation_id: str) -> AutopayState:
        """读取运行状态；不存在时返回初始状态（不落库）。"""
        return self.get(obligation_id) or AutopayState(obligation_id=obligation_id)

    def save(self, state: AutopayState) -> None:
        """
        按 obligation_id 幂等写入运行状态。

        副作用：
            插入或更新 autopay_state 表。
        """
        self.conn.execute(
            """
            INSERT INTO autopay_state (
                obligation_id, last_processed_date, last_paid_due, failure_count, enabled, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(obligation_id) DO UPDATE SET
                last_processed_date = excluded.last_processed_date,
                last_paid_due = excluded.last_paid_due,
                failure_count = excluded.failure_count,
                enabled = excluded.enabled,
                updated_at = excluded.updated_at
            """,
            (
                state.obligation_id,
                state.last_processed_date.isoformat() if state.last_processed_date else None,
                state.last_paid_due.isoformat() if state.last_paid_due else None,
                state.failure_count,
                1 if state.enabled else 0,
                datetime.now().isoformat(timespec="seconds"),
            ),
        )
        self.conn.commit()

    def list_all(self) -> list[AutopayState]:
        """按 obligation_id 排序返回全部运行状态。"""
        rows = self.conn.execute("SELECT * FROM autopay_state ORDER BY obligation_id").fetchall()
        return [_row_to_state(r) for r in rows]

    def list_disabled(self) -> list[AutopayState]:
        """返回因连续失败被自动关闭的义务状态。"""
        rows = self.conn.execute(
            "SELECT * FROM autopay_state WHERE enabled = 0 ORDER BY obligation_id"
        ).fetchall()
        return [_row_to_state(r) for r in rows]


def _row_to_state(row: sqlite3.Row) -> AutopayState:
    """将 SQLite Row 转换为 AutopayState 对象。"""
    last = row["last_processed_date"]
    paid_due = row["last_paid_due"]
    return AutopayState(
        obligation_id=row["obligation_id"],
        last_processed_date=date.fromisoformat(last) if last else None,
        failure_count=int(row["failure_count"]),
        enabled=bool(row["enabled"]),
        last_paid_due=datetime.fromisoformat(paid_due) if paid_due else None,
    )
