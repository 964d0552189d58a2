# graph/nodes/record_node.py
from datetime import datetime

from graph.state import ClockState
from services.day_record import DayPhase, PUNCH_LAST
from services.record_store import RecordStore


def _now() -> datetime:
    """テスト時にモック可能な現在時刻取得"""
    return datetime.now()


def record_node(state: ClockState, store: RecordStore = None) -> dict:
    """打刻記録ストアに操作を反映するノード（保存はストア側で実行）"""
    action = state["action"]

    if action == "clock":
        result = store.clock(_now())
        if result.previous_phase is DayPhase.EMPTY:
            taken = "first"
        elif result.previous_phase is DayPhase.STARTED:
            taken = "last"
        else:
            taken = "last_updated"
        return {
            "today": result.date_key,
            "action_taken": taken,
            "punch_time": result.punch.timestamp[11:],
            "error_message": None,
        }

    elif action == "clear":
        removed = store.clear(state["today"])
        if removed is None:
            return {"action_taken": "skipped"}
        taken = "cleared_last" if removed == PUNCH_LAST else "cleared_first"
        return {"action_taken": taken, "error_message": None}

    elif action == "clear_all":
        store.clear_all(confirmed=state["confirmed"])
        return {"action_taken": "cleared_all", "error_message": None}

    elif action == "manual":
        result = store.add_manual_overtime(
            state["manual_date"],
            state["manual_hours"],
            state["manual_kind"] or "overtime",
        )
        if not result.success:
            return {"action_taken": "error", "error_message": result.error}
        return {
            "action_taken": "manual",
            "error_message": None,
            "extra": {**state["extra"], "manual_value": result.value},
        }

    return {"action_taken": "summary"}
