from typing import TypedDict, Optional


class ClockState(TypedDict):
    today: str                          # YYYY-MM-DD
    action: str                         # "clock" / "clear" / "clear_all" / "manual" / "summary"
    confirmed: bool                     # 全削除の確認済みフラグ
    manual_date: Optional[str]          # 手動補正の対象日
    manual_hours: Optional[float]       # 手動補正の時間数（0〜24）
    manual_kind: Optional[str]          # "overtime" / "leave"
    action_taken: Optional[str]         # "first" / "last" / "last_updated" / "cleared_*" / "manual" / "summary" / "skipped" / "error"
    punch_time: Optional[str]           # 打刻時刻 HH:MM:SS
    error_message: Optional[str]        # エラー詳細
    today_minutes: int                  # 本日の残業（分）
    week_minutes: int                   # 今週の残業（分）
    month_minutes: int                  # 今月の残業（分）
    extra: dict                         # 任意の追加データ
