# services/workday.py
from typing import Container

from services.time_utils import is_weekday, parse_date_key


def should_use_workday_rules(date_key: str, overrides: Container[str]) -> bool:
    """平日規則で残業計算すべき日かを判定する

    月〜金は常に平日規則。土日は振替出勤日（overridesに含まれる日）のみ平日規則。
    """
    if is_weekday(parse_date_key(date_key)):
        return True
    return date_key in overrides
