# services/overtime.py
from dataclasses import dataclass
from datetime import time
from typing import Container

from services.day_record import DayRecord
from services.time_utils import at_time, minutes_between, parse_time, round_minutes
from services.workday import should_use_workday_rules


@dataclass(frozen=True)
class WorkRules:
    """平日規則の基準時刻"""

    standard_start: time = time(9, 0)
    overtime_threshold: time = time(18, 30)

    @classmethod
    def from_config(cls, config: dict = None) -> "WorkRules":
        if not config or "work_rules" not in config:
            return cls()
        rules = config["work_rules"]
        return cls(
            standard_start=parse_time(rules["standard_start"]),
            overtime_threshold=parse_time(rules["overtime_threshold"]),
        )


DEFAULT_RULES = WorkRules()


def compute_overtime_minutes(
    record: DayRecord,
    date_key: str,
    overrides: Container[str],
    rules: WorkRules = DEFAULT_RULES,
) -> int:
    """1日分の残業時間（分、符号付き）を計算する

    平日規則:
      - 退勤が基準（18:30）以降 → 基準以降の分数 - 遅刻分
      - 退勤が基準より前       → -(早退分 + 遅刻分)
    土日（振替出勤日以外）: 出勤〜退勤の経過時間をそのまま残業とする。
    出勤・退勤の片方しかない日は打刻分を0とし、手動補正のみ加算する。
    打刻時刻は日付で切り詰めない（日跨ぎもそのまま経過時間として扱う）。
    """
    punch_minutes = 0

    if record.first is not None and record.last is not None:
        start = record.first.instant
        end = record.last.instant

        if should_use_workday_rules(date_key, overrides):
            standard_start = at_time(date_key, rules.standard_start)
            threshold = at_time(date_key, rules.overtime_threshold)

            late_minutes = max(0, minutes_between(standard_start, start))

            if end >= threshold:
                punch_minutes = minutes_between(threshold, end) - late_minutes
            else:
                early_leave_minutes = max(0, minutes_between(end, threshold))
                punch_minutes = -(early_leave_minutes + late_minutes)
        else:
            punch_minutes = minutes_between(start, end)

    if record.manual_overtime:
        punch_minutes += round_minutes(record.manual_overtime * 60)

    return punch_minutes
