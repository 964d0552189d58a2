# graph/nodes/action_gate_node.py
from graph.state import ClockState

ACTIONS = ("clock", "clear", "clear_all", "manual", "summary")


def action_gate_node(state: ClockState) -> dict:
    """要求された操作を検証し、実行可否を決定するノード"""
    action = state["action"]

    if action not in ACTIONS:
        return {"action_taken": "error", "error_message": f"不明な操作です: {action}"}

    # 全削除は確認済みの場合のみ
    if action == "clear_all" and not state["confirmed"]:
        return {"action_taken": "skipped"}

    return {"action_taken": None, "error_message": None}
