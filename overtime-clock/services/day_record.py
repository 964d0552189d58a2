# services/day_record.py
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

PUNCH_FIRST = "first"
PUNCH_LAST = "last"


class DayPhase(Enum):
    """1日の打刻状態"""

    EMPTY = "empty"          # 出勤打刻なし
    STARTED = "started"      # 出勤のみ
    COMPLETED = "completed"  # 出勤・退勤あり


def parse_instant(value: str) -> datetime:
    """ISO-8601文字列をローカルのnaive datetimeに変換する

    タイムゾーン付き（末尾Zを含む）の場合はローカル時刻に変換する。
    """
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def format_instant(now: datetime) -> str:
    """toISOString()と同じUTC表記（ミリ秒・末尾Z）"""
    utc = now.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


@dataclass
class Punch:
    id: int
    timestamp: str   # YYYY-MM-DD HH:MM:SS（表示用）
    count: int
    date: str        # ISO-8601（読み込んだ文字列をそのまま保持）
    type: str        # "first" / "last"

    @property
    def instant(self) -> datetime:
        return parse_instant(self.date)

    @classmethod
    def stamp(cls, now: datetime, count: int, kind: str) -> "Punch":
        return cls(
            id=int(now.timestamp() * 1000),
            timestamp=now.strftime("%Y-%m-%d %H:%M:%S"),
            count=count,
            date=format_instant(now),
            type=kind,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "count": self.count,
            "date": self.date,
            "type": self.type,
        }

    @classmethod
    def from_dict(cls, data: dict, kind: str) -> "Punch":
        if not isinstance(data.get("date"), str):
            raise ValueError(f"打刻時刻がありません: {data!r}")
        parse_instant(data["date"])
        return cls(
            id=data.get("id", 0),
            timestamp=data.get("timestamp", ""),
            count=data.get("count", 0),
            date=data["date"],
            type=data.get("type", kind),
        )


@dataclass
class DayRecord:
    """1日分の打刻と手動補正（時間単位、負数は代休消化）"""

    first: Optional[Punch] = None
    last: Optional[Punch] = None
    manual_overtime: Optional[float] = None

    @property
    def phase(self) -> DayPhase:
        if self.first is None:
            return DayPhase.EMPTY
        if self.last is None:
            return DayPhase.STARTED
        return DayPhase.COMPLETED

    @property
    def has_punch_record(self) -> bool:
        return self.first is not None or self.last is not None

    def is_empty(self) -> bool:
        return not self.has_punch_record and not self.manual_overtime

    def to_dict(self) -> dict:
        payload = {}
        if self.first is not None:
            payload["first"] = self.first.to_dict()
        if self.last is not None:
            payload["last"] = self.last.to_dict()
        if self.manual_overtime:
            payload["manualOvertime"] = self.manual_overtime
        return payload

    @classmethod
    def from_dict(cls, data: dict) -> "DayRecord":
        first = data.get("first")
        last = data.get("last")
        manual = data.get("manualOvertime")
        if isinstance(manual, bool) or not isinstance(manual, (int, float)):
            manual = None
        return cls(
            first=Punch.from_dict(first, PUNCH_FIRST) if first else None,
            last=Punch.from_dict(last, PUNCH_LAST) if last else None,
            manual_overtime=manual,
        )
