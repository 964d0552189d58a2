# services/record_store.py
import json
import logging
import math
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from services.day_record import PUNCH_FIRST, PUNCH_LAST, DayPhase, DayRecord, Punch
from services.time_utils import date_key, parse_date_key

logger = logging.getLogger(__name__)

MANUAL_KINDS = ("overtime", "leave")  # 残業補録 / 代休消化
MAX_MANUAL_HOURS = 24


def _now() -> datetime:
    """テスト時にモック可能な現在時刻取得"""
    return datetime.now()


@dataclass
class ClockResult:
    date_key: str
    punch: Punch
    previous_phase: DayPhase


@dataclass
class ManualEntryResult:
    success: bool
    value: Optional[float]
    error: Optional[str]


class RecordStore(Mapping):
    """日付キー → DayRecord の打刻記録ストア（JSONファイルに永続化）

    変更操作は毎回即座に保存する。読み書きの失敗はログに残して空の状態として扱う。
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.click_count = 0
        self._records: dict[str, DayRecord] = {}
        self._lock = threading.Lock()
        self.load()

    def __getitem__(self, key: str) -> DayRecord:
        return self._records[key]

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._records))

    def __len__(self) -> int:
        return len(self._records)

    def snapshot(self) -> dict[str, DayRecord]:
        with self._lock:
            return dict(self._records)

    def load(self) -> None:
        records: dict[str, DayRecord] = {}
        content = {}
        try:
            if self.path.exists():
                content = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(content, dict):
                raise ValueError(f"オブジェクト形式ではありません: {type(content).__name__}")
        except (OSError, ValueError) as e:
            logger.warning("打刻記録の読み込みに失敗しました: %s", e)
            content = {}

        # 壊れた日だけを読み飛ばす
        for key, value in content.items():
            try:
                parse_date_key(key)
                record = DayRecord.from_dict(value)
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning("%s の打刻記録を読み飛ばしました: %s", key, e)
                continue
            if not record.is_empty():
                records[key] = record

        self._records = records
        self.click_count = max(
            (
                punch.count
                for record in records.values()
                for punch in (record.first, record.last)
                if punch is not None
            ),
            default=0,
        )

    def save(self) -> bool:
        payload = {key: record.to_dict() for key, record in self._records.items()}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8"
            )
        except (OSError, TypeError, ValueError) as e:
            logger.warning("打刻記録の保存に失敗しました: %s", e)
            return False
        return True

    def put(self, key: str, record: DayRecord) -> None:
        parse_date_key(key)
        with self._lock:
            if record.is_empty():
                self._records.pop(key, None)
            else:
                self._records[key] = record
            self.save()

    def delete(self, key: str) -> None:
        with self._lock:
            if self._records.pop(key, None) is not None:
                self.save()

    def clock(self, now: datetime = None) -> ClockResult:
        """打刻: 未打刻→出勤、出勤のみ→退勤、完了済み→退勤を更新"""
        if now is None:
            now = _now()
        key = date_key(now)

        with self._lock:
            self.click_count += 1
            record = self._records.setdefault(key, DayRecord())
            phase = record.phase
            if phase is DayPhase.EMPTY:
                punch = Punch.stamp(now, self.click_count, PUNCH_FIRST)
                record.first = punch
            else:
                punch = Punch.stamp(now, self.click_count, PUNCH_LAST)
                record.last = punch
            self.save()

        return ClockResult(date_key=key, punch=punch, previous_phase=phase)

    def clear(self, key: str) -> Optional[str]:
        """退勤があれば退勤を、なければ出勤を取り消す。取り消した種別を返す"""
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return None

            if record.last is not None:
                record.last = None
                removed = PUNCH_LAST
            elif record.first is not None:
                record.first = None
                removed = PUNCH_FIRST
            else:
                return None

            if record.is_empty():
                del self._records[key]
            self.save()
        return removed

    def clear_all(self, confirmed: bool = False) -> bool:
        """全記録を削除する（確認済みの場合のみ）"""
        if not confirmed:
            return False
        with self._lock:
            self._records = {}
            self.click_count = 0
            self.save()
        return True

    def add_manual_overtime(self, date_str: str, hours, kind: str = "overtime") -> ManualEntryResult:
        """手動補正を追加する（既存の補正値に加算）

        kind="overtime" は加算、kind="leave"（代休消化）は減算。
        入力が不正な場合は状態を変更せずエラーを返す。
        """
        try:
            key = date_key(parse_date_key(str(date_str).strip()))
        except ValueError:
            return ManualEntryResult(False, None, f"日付が不正です: {date_str}")

        try:
            value = float(hours)
        except (TypeError, ValueError):
            return ManualEntryResult(False, None, f"時間が数値ではありません: {hours}")

        if not math.isfinite(value) or not 0 <= value <= MAX_MANUAL_HOURS:
            return ManualEntryResult(
                False, None, f"時間は0〜{MAX_MANUAL_HOURS}の範囲で入力してください: {hours}"
            )

        if kind not in MANUAL_KINDS:
            return ManualEntryResult(False, None, f"補正種別が不正です: {kind}")

        signed = value if kind == "overtime" else -value

        with self._lock:
            record = self._records.setdefault(key, DayRecord())
            # 小数の誤差で0にならない合計を丸める
            total = round((record.manual_overtime or 0) + signed, 9)
            record.manual_overtime = total or None
            if record.is_empty():
                del self._records[key]
            self.save()

        return ManualEntryResult(True, signed, None)
