# services/time_utils.py
import math
from datetime import date, datetime, time, timedelta

WEEKDAY_NAMES = ("月", "火", "水", "木", "金", "土", "日")


def date_key(d: date) -> str:
    """date/datetimeをYYYY-MM-DD形式の日付キーに変換"""
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def parse_date_key(key: str) -> date:
    """YYYY-MM-DD形式の日付キーをdateに変換（不正な日付はValueError）"""
    parts = key.split("-")
    if len(parts) != 3 or len(parts[0]) != 4 or len(parts[1]) != 2 or len(parts[2]) != 2:
        raise ValueError(f"不正な日付キー: {key!r}")
    return date(int(parts[0]), int(parts[1]), int(parts[2]))


def day_start(key: str) -> datetime:
    """日付キーのローカル0:00"""
    return datetime.combine(parse_date_key(key), time.min)


def at_time(key: str, t: time) -> datetime:
    """日付キーの指定時刻（ローカル）"""
    return datetime.combine(parse_date_key(key), t)


def parse_time(time_str: str) -> time:
    """HH:MM形式の文字列をtimeオブジェクトに変換"""
    h, m = map(int, time_str.split(":"))
    return time(h, m)


def is_weekday(d: date) -> bool:
    """月曜〜金曜ならTrue"""
    return d.weekday() < 5


def weekday_name(d: date) -> str:
    return WEEKDAY_NAMES[d.weekday()]


def round_minutes(value: float) -> int:
    """分数を整数に丸める（0.5は0から遠い方へ）"""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def minutes_between(start: datetime, end: datetime) -> int:
    """start→endの経過分数（負になり得る）"""
    return round_minutes((end - start).total_seconds() / 60)


def week_start(now: datetime) -> datetime:
    """今週月曜日の0:00（日曜日は6日前の月曜日）"""
    monday = now.date() - timedelta(days=now.weekday())
    return datetime.combine(monday, time.min)


def shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    """year/monthをoffsetヶ月ずらす（年跨ぎ対応）"""
    index = year * 12 + (month - 1) + offset
    shifted_year, shifted_month = divmod(index, 12)
    return shifted_year, shifted_month + 1


def format_duration(minutes: int) -> str:
    """分数を符号付きH:MM表記にする"""
    sign = "-" if minutes < 0 else ""
    hours, mins = divmod(abs(minutes), 60)
    return f"{sign}{hours}:{mins:02d}"
