"""残業クロック - エントリーポイント"""
import logging
import os
import signal
import sys
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

from services.aggregator import month_details, trailing_months_overtime
from services.config_loader import load_config
from services.holiday_calendar import HolidayCalendarSync, WorkdayOverrides
from services.overtime import WorkRules
from services.record_store import RecordStore
from services.slack_client import SlackNotifier, ConsoleNotifier
from services.time_utils import format_duration, parse_date_key, weekday_name
from graph.graph import build_graph, initial_state
from schedulers.scheduler import HolidaySyncScheduler

HELP = """コマンド:
  p                        打刻（出勤 → 退勤 → 退勤更新）
  c                        本日の打刻を1件取り消す
  m YYYY-MM-DD 時間 [leave] 手動補正（leave は代休消化として減算）
  s                        残業サマリー
  d                        今月の明細と過去の月別合計
  clear-all                全記録を削除
  q                        終了"""


def create_services(config: dict):
    """設定に基づいてサービスインスタンスを生成"""
    load_dotenv()

    data_dir = Path(os.getenv("TIMECLOCK_DATA_DIR", config["storage"]["data_dir"]))
    store = RecordStore(data_dir / "records.json")
    overrides = WorkdayOverrides(data_dir / "workday_overrides.json")

    # 祝日カレンダー同期
    sync_config = config["holiday_sync"]
    holiday_sync = HolidayCalendarSync(
        overrides=overrides,
        cache_path=data_dir / "holiday_cache.json",
        feed_url=os.getenv("HOLIDAY_FEED_URL", sync_config["feed_url"]),
        timeout=sync_config["timeout_seconds"],
    )

    # Slack通知
    slack_config = config["slack"]
    slack_token = os.getenv("SLACK_BOT_TOKEN", "")
    slack_channel = os.getenv("SLACK_NOTIFY_CHANNEL", slack_config.get("notify_channel", ""))
    if slack_config["enabled"] and slack_token:
        notifier = SlackNotifier(token=slack_token, channel=slack_channel)
    else:
        notifier = ConsoleNotifier()

    return store, overrides, holiday_sync, notifier


def run_action(graph, action: str, **fields) -> dict:
    """1回分の操作をグラフで実行"""
    state = initial_state(date.today().isoformat(), action, **fields)
    return graph.invoke(state)


def print_details(store, overrides, rules, months: int):
    """今月の日別明細と月別合計を表示"""
    today = date.today()
    records = store.snapshot()

    days, total = month_details(records, overrides, today, rules)
    if not days:
        print("今月の記録はありません")
    for day in days:
        d = parse_date_key(day.date_key)
        mark = " 振替" if day.is_override_day else ""
        print(f"  {day.date_key}({weekday_name(d)}){mark}  {format_duration(day.minutes)}")
    print(f"今月合計: {format_duration(total)}")

    for monthly in trailing_months_overtime(records, overrides, today, months, rules):
        print(f"  {monthly.year}年{monthly.month:02d}月  {format_duration(monthly.total_minutes)}")


def handle_command(line: str, graph, store, overrides, rules, config) -> bool:
    """コマンド1行を処理する。終了時はFalse"""
    parts = line.split()
    if not parts:
        return True
    command = parts[0]

    if command == "q":
        return False
    if command == "p":
        run_action(graph, "clock")
    elif command == "c":
        run_action(graph, "clear")
    elif command == "s":
        run_action(graph, "summary")
    elif command == "d":
        print_details(store, overrides, rules, config["summary"]["trailing_months"])
    elif command == "m" and len(parts) in (3, 4):
        kind = parts[3] if len(parts) == 4 else "overtime"
        run_action(graph, "manual", manual_date=parts[1], manual_hours=parts[2], manual_kind=kind)
    elif command == "clear-all":
        answer = input("全ての打刻記録を削除します。元に戻せません。よろしいですか？ [y/N] ")
        run_action(graph, "clear_all", confirmed=answer.strip().lower() == "y")
    else:
        print(HELP)
    return True


def main():
    """メイン起動処理"""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = load_config("config.yaml")
    store, overrides, holiday_sync, notifier = create_services(config)
    rules = WorkRules.from_config(config)
    graph = build_graph(store=store, overrides=overrides, rules=rules, notifier=notifier)

    scheduler = None
    sync_config = config["holiday_sync"]
    if sync_config["enabled"]:
        def on_synced(added: int):
            # 振替出勤日が増えたらサマリーを再表示
            if added:
                notifier.send_workdays_added(added)
                run_action(graph, "summary")

        holiday_sync.on_synced = on_synced
        scheduler = HolidaySyncScheduler(
            interval_hours=sync_config["check_interval_hours"],
            job_func=holiday_sync.run_if_due,
        )
        scheduler.start()
        print("[残業クロック] 祝日カレンダー同期を開始しました")

    def shutdown(signum, frame):
        print("\n[残業クロック] 停止中...")
        if scheduler:
            scheduler.stop()
        print("[残業クロック] 停止しました")
        sys.exit(0)

    signal.signal(signal.SIGTERM, shutdown)

    run_action(graph, "summary")
    print(HELP)

    try:
        while True:
            line = input("> ")
            try:
                if not handle_command(line, graph, store, overrides, rules, config):
                    break
            except Exception as e:
                print(f"[残業クロック] 操作中にエラー: {e}")
                notifier.send_error(str(e))
    except (KeyboardInterrupt, EOFError):
        pass
    shutdown(None, None)


if __name__ == "__main__":
    main()
