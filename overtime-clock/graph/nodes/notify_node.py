from graph.state import ClockState


MESSAGES = {
    "first": "✅ 出勤打刻しました（{time}）",
    "last": "🕐 退勤打刻しました（{time}）",
    "last_updated": "🕐 退勤打刻を更新しました（{time}）",
    "cleared_last": "↩️ 本日の退勤打刻を取り消しました",
    "cleared_first": "↩️ 本日の出勤打刻を取り消しました",
    "cleared_all": "🗑️ 全ての打刻記録を削除しました",
    "manual": "✏️ {date} に {hours}時間の補正を記録しました",
}


def notify_node(state: ClockState, notifier=None) -> dict:
    """操作結果と残業サマリーを通知するノード"""
    action = state["action_taken"]

    if action == "error":
        notifier.send_error(state["error_message"])
        return {}

    if action == "skipped":
        return {}

    if action == "manual":
        msg = MESSAGES["manual"].format(
            date=state["manual_date"],
            hours=f"{state['extra']['manual_value']:+g}",
        )
    elif action in MESSAGES:
        msg = MESSAGES[action].format(time=state["punch_time"])
    else:
        msg = "📊 残業時間"

    notifier.send_overtime(
        msg, state["today_minutes"], state["week_minutes"], state["month_minutes"]
    )
    return {}
