# tests/test_graph.py
from unittest.mock import MagicMock, patch
from datetime import datetime

from graph.graph import build_graph, initial_state, route_after_action_gate
from services.record_store import RecordStore


def _make_state(**overrides):
    return initial_state("2025-01-20", "clock", **overrides)


def test_route_action_gate_skipped():
    """スキップの場合endへ"""
    assert route_after_action_gate(_make_state(action_taken="skipped")) == "end"


def test_route_action_gate_error():
    """エラーの場合notifyへ"""
    assert route_after_action_gate(_make_state(action_taken="error")) == "notify"


def test_route_action_gate_record():
    """実行可能な場合recordへ"""
    assert route_after_action_gate(_make_state(action_taken=None)) == "record"


def test_build_graph():
    """グラフが正常にビルドできること"""
    graph = build_graph()
    assert graph is not None


def _invoke(graph, now, action, **fields):
    with patch("graph.nodes.record_node._now", return_value=now), \
            patch("graph.nodes.overtime_summary_node._now", return_value=now):
        return graph.invoke(initial_state(now.date().isoformat(), action, **fields))


def test_graph_clock_flow(tmp_path):
    """打刻→集計→通知まで一連で実行されること"""
    store = RecordStore(tmp_path / "records.json")
    notifier = MagicMock()
    graph = build_graph(store=store, overrides=set(), notifier=notifier)

    result = _invoke(graph, datetime(2025, 1, 20, 9, 0), "clock")
    assert result["action_taken"] == "first"

    result = _invoke(graph, datetime(2025, 1, 20, 19, 30), "clock")
    assert result["action_taken"] == "last"
    assert result["today_minutes"] == 60
    assert result["week_minutes"] == 60
    assert result["month_minutes"] == 60

    assert notifier.send_overtime.call_count == 2
    assert "退勤" in notifier.send_overtime.call_args[0][0]


def test_graph_invalid_manual_reports_error(tmp_path):
    """不正な手動補正はエラー通知され、記録は変わらないこと"""
    store = RecordStore(tmp_path / "records.json")
    notifier = MagicMock()
    graph = build_graph(store=store, notifier=notifier)

    result = _invoke(
        graph, datetime(2025, 1, 20, 12, 0), "manual", manual_date="2025-01-20", manual_hours=30
    )
    assert result["action_taken"] == "error"
    notifier.send_error.assert_called_once()
    assert len(store) == 0


def test_graph_unconfirmed_clear_all(tmp_path):
    """確認なしの全削除は何もしないこと"""
    store = RecordStore(tmp_path / "records.json")
    store.clock(datetime(2025, 1, 20, 9, 0))
    notifier = MagicMock()
    graph = build_graph(store=store, notifier=notifier)

    result = _invoke(graph, datetime(2025, 1, 20, 12, 0), "clear_all")
    assert result["action_taken"] == "skipped"
    assert len(store) == 1
    notifier.send_overtime.assert_not_called()


def test_graph_unknown_action(tmp_path):
    store = RecordStore(tmp_path / "records.json")
    notifier = MagicMock()
    graph = build_graph(store=store, notifier=notifier)

    result = _invoke(graph, datetime(2025, 1, 20, 12, 0), "reset")
    assert result["action_taken"] == "error"
    notifier.send_error.assert_called_once()
