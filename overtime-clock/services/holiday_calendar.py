"""
振替出勤日（土日だが平日扱いとなる日）の取得・保持。

年単位の祝日カレンダーJSONを取得し、`work: true` の土日だけを
WorkdayOverrides に追加する。同期は月1回（未同期の年は初回起動時）。
取得失敗時は既存の振替出勤日をそのまま使う。
"""

import json
import logging
import threading
import time
from datetime import date
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

import httpx

from services.time_utils import date_key, is_weekday, parse_date_key

logger = logging.getLogger(__name__)


def _today() -> date:
    """テスト時にモック可能"""
    return date.today()


def _read_json(path: Path) -> dict:
    try:
        if path.exists():
            content = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(content, dict):
                return content
            logger.warning("%s の形式が不正です", path)
    except (OSError, ValueError) as e:
        logger.warning("%s の読み込みに失敗しました: %s", path, e)
    return {}


def _write_json(path: Path, payload: dict) -> bool:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    except (OSError, TypeError, ValueError) as e:
        logger.warning("%s の保存に失敗しました: %s", path, e)
        return False
    return True


class WorkdayOverrides:
    """振替出勤日の集合（追加のみ、{日付: true} 形式で永続化）"""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._dates: set[str] = {
            key for key, value in _read_json(self.path).items() if value is True
        }

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._dates

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(sorted(self._dates))

    def __len__(self) -> int:
        with self._lock:
            return len(self._dates)

    def merge(self, dates: Iterable[str]) -> int:
        """振替出勤日を追加する。新規に追加された件数を返す"""
        with self._lock:
            new_dates = set(dates) - self._dates
            if not new_dates:
                return 0
            self._dates |= new_dates
            _write_json(self.path, {key: True for key in sorted(self._dates)})
        return len(new_dates)


def extract_workday_overrides(payload: dict, year: int) -> set[str]:
    """カレンダーJSONから `work: true` の土日を抽出する

    キーは YYYY-MM-DD または MM-DD（エントリに date があればそちらを優先）。
    """
    if not isinstance(payload, dict):
        raise ValueError("カレンダーデータの形式が不正です")
    entries = payload["holiday"] if isinstance(payload.get("holiday"), dict) else payload

    result = set()
    for key, entry in entries.items():
        if not isinstance(entry, dict) or entry.get("work") is not True:
            continue
        raw = entry.get("date", key)
        if not isinstance(raw, str):
            continue
        if len(raw) == 5:
            raw = f"{year}-{raw}"
        try:
            d = parse_date_key(raw)
        except ValueError:
            continue
        if not is_weekday(d):
            result.add(date_key(d))
    return result


class HolidayCalendarSync:
    """祝日カレンダーの月次同期（失敗しても例外は外に出さない）"""

    def __init__(
        self,
        overrides: WorkdayOverrides,
        cache_path: Path,
        feed_url: str = "",
        timeout: float = 10.0,
        on_synced: Optional[Callable[[int], None]] = None,
    ):
        self._overrides = overrides
        self._cache_path = Path(cache_path)
        self._feed_url = feed_url
        self._timeout = timeout
        self.on_synced = on_synced
        self._cache = _read_json(self._cache_path)

    def is_sync_due(self, today: date = None) -> bool:
        """今年の同期記録がない、または最終同期月が今月でなければ同期が必要"""
        if today is None:
            today = _today()
        entry = self._cache.get(str(today.year))
        if not isinstance(entry, dict):
            return True
        return entry.get("lastSyncMonth") != today.month

    def _fetch(self, year: int) -> Optional[dict]:
        try:
            url = self._feed_url.format(year=year)
        except (KeyError, IndexError, ValueError) as exc:
            logger.warning("祝日カレンダーURLの書式が不正です: %r (%s)", self._feed_url, exc)
            return None
        try:
            with httpx.Client(timeout=self._timeout, follow_redirects=True) as client:
                resp = client.get(url)
                resp.raise_for_status()
            return resp.json()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("祝日カレンダーの取得に失敗しました year=%d: %s", year, exc)
        except ValueError as exc:
            logger.warning("祝日カレンダーのJSONが不正です year=%d: %s", year, exc)
        return None

    def sync(self, today: date = None) -> bool:
        """今年のカレンダーを取得して振替出勤日をマージする。成功時True"""
        if today is None:
            today = _today()
        if not self._feed_url:
            logger.info("祝日カレンダーURLが未設定のため同期をスキップします")
            return False

        year = today.year
        payload = self._fetch(year)
        if payload is None:
            return False

        try:
            dates = extract_workday_overrides(payload, year)
        except ValueError as exc:
            logger.warning("祝日カレンダーの解析に失敗しました year=%d: %s", year, exc)
            return False

        added = self._overrides.merge(dates)
        self._cache[str(year)] = {
            "timestamp": int(time.time() * 1000),
            "lastSyncMonth": today.month,
            "data": payload,
        }
        _write_json(self._cache_path, self._cache)
        logger.info("祝日カレンダーを同期しました year=%d 振替出勤日=%d件（新規%d件）", year, len(dates), added)

        if self.on_synced:
            try:
                self.on_synced(added)
            except Exception as exc:
                logger.warning("同期後の処理に失敗しました: %s", exc)
        return True

    def run_if_due(self, today: date = None) -> bool:
        """同期が必要な場合のみ同期する（スケジューラのジョブ本体）"""
        if today is None:
            today = _today()
        if not self.is_sync_due(today):
            return False
        return self.sync(today)
