# services/aggregator.py
import calendar
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Container, Mapping, Optional

from services.day_record import DayRecord
from services.overtime import DEFAULT_RULES, WorkRules, compute_overtime_minutes
from services.time_utils import date_key, day_start, shift_month, week_start


@dataclass
class MonthlyOvertime:
    year: int
    month: int          # 1〜12
    total_minutes: int


@dataclass
class DayOvertime:
    date_key: str
    minutes: int
    has_punch_record: bool
    manual_hours: Optional[float]
    is_override_day: bool


def _in_range(records: Mapping[str, DayRecord], range_start: datetime, range_end: datetime):
    for key in records.keys():
        if range_start <= day_start(key) <= range_end:
            yield key


def month_range(year: int, month: int) -> tuple[datetime, datetime]:
    """指定月の1日0:00〜末日23:59:59.999999"""
    last_day = calendar.monthrange(year, month)[1]
    return (
        datetime.combine(date(year, month, 1), time.min),
        datetime.combine(date(year, month, last_day), time.max),
    )


def sum_overtime_over_range(
    records: Mapping[str, DayRecord],
    overrides: Container[str],
    range_start: datetime,
    range_end: datetime,
    rules: WorkRules = DEFAULT_RULES,
) -> int:
    """範囲内（両端含む）の日付の残業時間を合計する"""
    return sum(
        compute_overtime_minutes(records[key], key, overrides, rules)
        for key in _in_range(records, range_start, range_end)
    )


def today_overtime(
    records: Mapping[str, DayRecord],
    overrides: Container[str],
    today: date,
    rules: WorkRules = DEFAULT_RULES,
) -> int:
    key = date_key(today)
    record = records.get(key)
    if record is None:
        return 0
    return compute_overtime_minutes(record, key, overrides, rules)


def week_overtime(
    records: Mapping[str, DayRecord],
    overrides: Container[str],
    now: datetime,
    rules: WorkRules = DEFAULT_RULES,
) -> int:
    """今週（月曜0:00〜今日の終わり）の残業合計"""
    end = datetime.combine(now.date(), time.max)
    return sum_overtime_over_range(records, overrides, week_start(now), end, rules)


def month_overtime(
    records: Mapping[str, DayRecord],
    overrides: Container[str],
    today: date,
    rules: WorkRules = DEFAULT_RULES,
) -> int:
    start, end = month_range(today.year, today.month)
    return sum_overtime_over_range(records, overrides, start, end, rules)


def trailing_months_overtime(
    records: Mapping[str, DayRecord],
    overrides: Container[str],
    today: date,
    months: int = 6,
    rules: WorkRules = DEFAULT_RULES,
) -> list[MonthlyOvertime]:
    """今月から遡ってmonthsヶ月分の月別残業合計（新しい月が先頭）"""
    result = []
    for i in range(months):
        year, month = shift_month(today.year, today.month, -i)
        start, end = month_range(year, month)
        result.append(
            MonthlyOvertime(
                year=year,
                month=month,
                total_minutes=sum_overtime_over_range(records, overrides, start, end, rules),
            )
        )
    return result


def list_day_overtime(
    records: Mapping[str, DayRecord],
    overrides: Container[str],
    range_start: datetime,
    range_end: datetime,
    rules: WorkRules = DEFAULT_RULES,
) -> list[DayOvertime]:
    """範囲内の日別明細（日付の降順）"""
    days = []
    for key in _in_range(records, range_start, range_end):
        record = records[key]
        days.append(
            DayOvertime(
                date_key=key,
                minutes=compute_overtime_minutes(record, key, overrides, rules),
                has_punch_record=record.has_punch_record,
                manual_hours=record.manual_overtime,
                is_override_day=key in overrides,
            )
        )
    days.sort(key=lambda d: d.date_key, reverse=True)
    return days


def month_details(
    records: Mapping[str, DayRecord],
    overrides: Container[str],
    today: date,
    rules: WorkRules = DEFAULT_RULES,
) -> tuple[list[DayOvertime], int]:
    """今月の日別明細と月合計"""
    start, end = month_range(today.year, today.month)
    days = list_day_overtime(records, overrides, start, end, rules)
    return days, sum(d.minutes for d in days)
