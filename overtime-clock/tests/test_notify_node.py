from unittest.mock import MagicMock
from graph.graph import initial_state
from graph.nodes.notify_node import notify_node


def _make_state(**overrides):
    return initial_state("2025-01-20", "clock", **overrides)


def test_notify_first_punch():
    """出勤打刻の通知に時刻と集計値が渡されること"""
    mock_notifier = MagicMock()
    state = _make_state(action_taken="first", punch_time="09:05:00", week_minutes=-65)
    notify_node(state, notifier=mock_notifier)

    mock_notifier.send_overtime.assert_called_once()
    headline, today, week, month = mock_notifier.send_overtime.call_args[0]
    assert "出勤" in headline
    assert "09:05:00" in headline
    assert (today, week, month) == (0, -65, 0)


def test_notify_last_updated():
    mock_notifier = MagicMock()
    state = _make_state(action_taken="last_updated", punch_time="19:30:00", today_minutes=60)
    notify_node(state, notifier=mock_notifier)

    headline, today, _, _ = mock_notifier.send_overtime.call_args[0]
    assert "退勤打刻を更新" in headline
    assert today == 60


def test_notify_manual():
    mock_notifier = MagicMock()
    state = _make_state(
        action_taken="manual", manual_date="2025-01-18", extra={"manual_value": -2.5}
    )
    notify_node(state, notifier=mock_notifier)

    headline = mock_notifier.send_overtime.call_args[0][0]
    assert "2025-01-18" in headline
    assert "-2.5時間" in headline


def test_notify_error():
    """エラー通知"""
    mock_notifier = MagicMock()
    state = _make_state(action_taken="error", error_message="日付が不正です")
    notify_node(state, notifier=mock_notifier)

    mock_notifier.send_error.assert_called_once_with("日付が不正です")
    mock_notifier.send_overtime.assert_not_called()


def test_notify_skipped_no_message():
    """スキップ時は通知しない"""
    mock_notifier = MagicMock()
    notify_node(_make_state(action_taken="skipped"), notifier=mock_notifier)

    mock_notifier.send_overtime.assert_not_called()
    mock_notifier.send_error.assert_not_called()


def test_notify_summary():
    mock_notifier = MagicMock()
    state = _make_state(action_taken="summary", month_minutes=135)
    notify_node(state, notifier=mock_notifier)
    headline, _, _, month = mock_notifier.send_overtime.call_args[0]
    assert "残業時間" in headline
    assert month == 135
