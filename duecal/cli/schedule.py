"""
到期预览 CLI。

使用方式：
    python -m duecal.cli.schedule preview --file obligations.json --limit 3
    python -m duecal.cli.schedule upcoming --file obligations.json --days 30
    python -m duecal.cli.schedule validate --file obligations.json
"""

from __future__ import annotations

import argparse
import sys

from dotenv import load_dotenv
from pydantic import ValidationError as RecordSchemaError
from rich.console import Console
from rich.table import Table

from duecal.cli.args import parse_now, setup_logging
from duecal.core.config import get_due_soon_days
from duecal.core.log import log
from duecal.core.models import DueStatus
from duecal.core.schedule.display import describe_frequency
from duecal.flows.schedule import list_upcoming, preview_obligations, validate_obligations
from duecal.schemas.records import load_records

load_dotenv()

console = Console()

STATUS_STYLES = {
    DueStatus.OVERDUE: ("逾期", "red"),
    DueStatus.DUE_TODAY: ("今日到期", "yellow"),
    DueStatus.UPCOMING: ("待到期", "white"),
}


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="python -m duecal.cli.schedule",
        description="周期性账单/还款/定投到期预览",
    )
    parser.add_argument("--debug", action="store_true", help="启用调试日志")
    subparsers = parser.add_subparsers(dest="command", required=True, help="子命令")

    preview_parser = subparsers.add_parser("preview", help="每个义务接下来 N 次到期")
    preview_parser.add_argument("--file", required=True, help="义务记录 JSON 文件")
    preview_parser.add_argument("--limit", type=int, default=3, help="预览次数（默认 3）")
    preview_parser.add_argument("--now", help="参考时刻（ISO 格式，默认当前时刻）")

    upcoming_parser = subparsers.add_parser("upcoming", help="汇总未来 N 天的全部到期")
    upcoming_parser.add_argument("--file", required=True, help="义务记录 JSON 文件")
    upcoming_parser.add_argument("--days", type=int, default=30, help="时间窗口天数（默认 30）")
    upcoming_parser.add_argument("--now", help="参考时刻（ISO 格式，默认当前时刻）")

    validate_parser = subparsers.add_parser("validate", help="校验义务记录")
    validate_parser.add_argument("--file", required=True, help="义务记录 JSON 文件")

    return parser.parse_args()


def _status_text(status: DueStatus | None, due_soon: bool) -> str:
    if status is None:
        return "[dim]无待到期[/dim]"
    label, color = STATUS_STYLES[status]
    if status is DueStatus.UPCOMING and due_soon:
        return "[cyan]即将到期[/cyan]"
    return f"[{color}]{label}[/{color}]"


def _do_preview(args: argparse.Namespace) -> int:
    """执行 preview 命令。"""
    now = parse_now(args.now)
    obligations = load_records(args.file)
    previews = preview_obligations(
        obligations=obligations,
        now=now,
        limit=args.limit,
        due_soon_days=get_due_soon_days(),
    )

    table = Table(title=f"到期预览（参考时刻 {now.isoformat(timespec='minutes')}）")
    table.add_column("ID")
    table.add_column("名称")
    table.add_column("频率")
    table.add_column("金额", justify="right")
    table.add_column("接下来到期")
    table.add_column("状态")
    for p in previews:
        ob = p.obligation
        if p.errors:
            table.add_row(ob.id, ob.name, "-", "-", "[red]校验失败[/red]", f"{len(p.errors)} 项问题")
            continue
        dues = "\n".join(d.strftime("%Y-%m-%d %H:%M %Z") for d in p.occurrences) or "-"
        table.add_row(
            ob.id,
            ob.name,
            describe_frequency(ob.frequency),
            f"{ob.amount} {ob.currency}",
            dues,
            _status_text(p.status, p.due_soon),
        )
    console.print(table)
    return 0


def _do_upcoming(args: argparse.Namespace) -> int:
    """执行 upcoming 命令。"""
    now = parse_now(args.now)
    obligations = load_records(args.file)
    items = list_upcoming(obligations=obligations, now=now, horizon_days=args.days)

    table = Table(title=f"未来 {args.days} 天到期汇总（共 {len(items)} 笔）")
    table.add_column("到期时刻")
    table.add_column("类型")
    table.add_column("名称")
    table.add_column("金额", justify="right")
    table.add_column("剩余天数", justify="right")
    for item in items:
        table.add_row(
            item.due_at.strftime("%Y-%m-%d %H:%M %Z"),
            item.kind,
            item.name,
            f"{item.amount} {item.currency}",
            str(item.days_until),
        )
    console.print(table)
    return 0


def _do_validate(args: argparse.Namespace) -> int:
    """执行 validate 命令。"""
    obligations = load_records(args.file)
    problems = validate_obligations(obligations)
    if not problems:
        log(f"✅ 全部 {len(obligations)} 条记录校验通过")
        return 0
    for obligation_id, errors in problems.items():
        for err in errors:
            log(f"❌ {obligation_id} {err.field}: {err.message}")
    return 4


def main() -> int:
    """
    到期预览 CLI。

    Returns:
        退出码：0=成功；1=未知命令；4=记录校验失败；5=执行失败。
    """
    args = _parse_args()
    setup_logging(args.debug)

    try:
        if args.command == "preview":
            return _do_preview(args)
        if args.command == "upcoming":
            return _do_upcoming(args)
        if args.command == "validate":
            return _do_validate(args)
        log(f"❌ 未知命令：{args.command}")
        return 1
    except RecordSchemaError as err:
        log(f"❌ 记录格式错误：{err}")
        return 4
    except Exception as err:  # noqa: BLE001
        log(f"❌ 执行失败：{err}")
        return 5


if __name__ == "__main__":
    sys.exit(main())
