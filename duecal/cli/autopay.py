from __future__ import annotations

import argparse
import sys

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from duecal.cli.args import parse_now, setup_logging
from duecal.core.log import log
from duecal.data.client.payment import DryRunPaymentExecutor
from duecal.flows.autopay import list_autopay_states, reenable_autopay, run_daily_autopay
from duecal.schemas.records import load_records

load_dotenv()

console = Console()


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="python -m duecal.cli.autopay",
        description="自动扣款批处理",
    )
    parser.add_argument("--debug", action="store_true", help="启用调试日志")
    subparsers = parser.add_subparsers(dest="command", required=True, help="子命令")

    # ========== run 子命令 ==========
    run_parser = subparsers.add_parser("run", help="执行当日自动扣款")
    run_parser.add_argument("--file", required=True, help="义务记录 JSON 文件")
    run_parser.add_argument("--now", help="执行时刻（ISO 格式，默认当前时刻）")
    run_parser.add_argument("--dry-run", action="store_true", help="只打印，不发起真实扣款")

    # ========== reenable 子命令 ==========
    reenable_parser = subparsers.add_parser("reenable", help="重新开启被自动关闭的扣款")
    reenable_parser.add_argument("--id", required=True, help="义务 ID")

    # ========== state 子命令 ==========
    subparsers.add_parser("state", help="查看自动扣款运行状态")

    return parser.parse_args()


def _do_run(args: argparse.Namespace) -> int:
    """执行 run 命令。"""
    now = parse_now(args.now)
    obligations = load_records(args.file)
    log(f"[Autopay:run] 开始：now={now.isoformat(timespec='minutes')} 义务数={len(obligations)}")

    executor = DryRunPaymentExecutor() if args.dry_run else None
    result = run_daily_autopay(obligations=obligations, now=now, payment_executor=executor)

    log(
        f"✅ 完成：成功 {result.processed} 笔，失败 {result.failed} 笔，"
        f"关闭 {result.disabled} 笔，跳过 {result.skipped} 笔"
    )
    return 0 if result.failed == 0 else 5


def _do_reenable(args: argparse.Namespace) -> int:
    """执行 reenable 命令。"""
    state = reenable_autopay(obligation_id=args.id)
    log(f"✅ 已重新开启自动扣款：{state.obligation_id}")
    return 0


def _do_state(args: argparse.Namespace) -> int:  # noqa: ARG001
    """执行 state 命令。"""
    states = list_autopay_states()
    if not states:
        log("⚠️ 暂无自动扣款运行记录")
        return 0
    table = Table(title="自动扣款运行状态")
    table.add_column("义务 ID")
    table.add_column("最近处理日")
    table.add_column("最近扣款到期")
    table.add_column("连续失败", justify="right")
    table.add_column("状态")
    for s in states:
        table.add_row(
            s.obligation_id,
            s.last_processed_date.isoformat() if s.last_processed_date else "-",
            s.last_paid_due.strftime("%Y-%m-%d %H:%M") if s.last_paid_due else "-",
            str(s.failure_count),
            "[green]开启[/green]" if s.enabled else "[red]已关闭[/red]",
        )
    console.print(table)
    return 0


def main() -> int:
    """
    自动扣款批处理 CLI。

    Returns:
        退出码：0=成功；1=未知命令；5=存在失败或执行异常。
    """
    args = _parse_args()
    setup_logging(args.debug)

    try:
        if args.command == "run":
            return _do_run(args)
        if args.command == "reenable":
            return _do_reenable(args)
        if args.command == "state":
            return _do_state(args)
        log(f"❌ 未知命令：{args.command}")
        return 1
    except Exception as err:  # noqa: BLE001
        log(f"❌ 执行失败：{err}")
        return 5


if __name__ == "__main__":
    sys.exit(main())
