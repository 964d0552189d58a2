# graph/nodes/overtime_summary_node.py
from datetime import datetime
from typing import Container

from graph.state import ClockState
from services.aggregator import month_overtime, today_overtime, week_overtime
from services.overtime import DEFAULT_RULES, WorkRules
from services.record_store import RecordStore


def _now() -> datetime:
    """テスト時にモック可能な現在時刻取得"""
    return datetime.now()


def overtime_summary_node(
    state: ClockState,
    store: RecordStore = None,
    overrides: Container[str] = None,
    rules: WorkRules = None,
) -> dict:
    """本日・今週・今月の残業時間を再計算するノード"""
    if overrides is None:
        overrides = set()
    if rules is None:
        rules = DEFAULT_RULES

    records = store.snapshot()
    now = _now()

    return {
        "today_minutes": today_overtime(records, overrides, now.date(), rules),
        "week_minutes": week_overtime(records, overrides, now, rules),
        "month_minutes": month_overtime(records, overrides, now.date(), rules),
    }
