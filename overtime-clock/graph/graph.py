# graph/graph.py
from langgraph.graph import StateGraph, END
from graph.state import ClockState


def route_after_action_gate(state: ClockState) -> str:
    if state["action_taken"] == "skipped":
        return "end"
    if state["action_taken"] == "error":
        return "notify"
    return "record"


def build_graph(
    store=None,
    overrides=None,
    rules=None,
    notifier=None,
):
    """LangGraphのグラフを構築して返す

    各ノード関数はサービス依存を持つため、functools.partialでラップして
    LangGraphが期待する (state) -> dict シグネチャに合わせる。
    """
    from functools import partial
    from graph.nodes.action_gate_node import action_gate_node
    from graph.nodes.record_node import record_node
    from graph.nodes.overtime_summary_node import overtime_summary_node
    from graph.nodes.notify_node import notify_node

    record_wrapped = partial(record_node, store=store)
    summary_wrapped = partial(
        overtime_summary_node, store=store, overrides=overrides, rules=rules
    )
    notify_wrapped = partial(notify_node, notifier=notifier)

    workflow = StateGraph(ClockState)

    workflow.add_node("action_gate", action_gate_node)
    workflow.add_node("record", record_wrapped)
    workflow.add_node("overtime_summary", summary_wrapped)
    workflow.add_node("notify", notify_wrapped)

    workflow.set_entry_point("action_gate")

    workflow.add_conditional_edges(
        "action_gate",
        route_after_action_gate,
        {"record": "record", "notify": "notify", "end": END},
    )

    workflow.add_edge("record", "overtime_summary")
    workflow.add_edge("overtime_summary", "notify")
    workflow.add_edge("notify", END)

    return workflow.compile()


def initial_state(today: str, action: str, **overrides) -> ClockState:
    """操作1回分の初期状態"""
    state: ClockState = {
        "today": today,
        "action": action,
        "confirmed": False,
        "manual_date": None,
        "manual_hours": None,
        "manual_kind": None,
        "action_taken": None,
        "punch_time": None,
        "error_message": None,
        "today_minutes": 0,
        "week_minutes": 0,
        "month_minutes": 0,
        "extra": {},
    }
    state.update(overrides)
    return state
