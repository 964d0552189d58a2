"""
残業サマリーの通知。

SLACK_BOT_TOKEN があれば Slack に投稿し、なければコンソールに出力する。
"""

import logging
import sys

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

from services.time_utils import format_duration

logger = logging.getLogger(__name__)

PREFIX = "[残業クロック]"
SUMMARY = "本日 {today} / 今週 {week} / 今月 {month}"


def format_summary(today_minutes: int, week_minutes: int, month_minutes: int) -> str:
    """本日・今週・今月の残業を符号付き H:MM で1行にまとめる"""
    return SUMMARY.format(
        today=format_duration(today_minutes),
        week=format_duration(week_minutes),
        month=format_duration(month_minutes),
    )


class ConsoleNotifier:
    """コンソール出力による通知"""

    def send(self, message: str) -> bool:
        print(f"{PREFIX} {message}", file=sys.stdout)
        return True

    def send_error(self, error: str) -> bool:
        print(f"{PREFIX} ❌ {error}", file=sys.stderr)
        return True

    def send_overtime(self, headline: str, today_minutes: int, week_minutes: int, month_minutes: int) -> bool:
        """操作結果の見出しと残業サマリーを通知"""
        summary = format_summary(today_minutes, week_minutes, month_minutes)
        return self.send(f"{headline}\n{summary}")

    def send_workdays_added(self, added: int) -> bool:
        return self.send(f"📅 振替出勤日を{added}件追加しました。集計に反映されます")


class SlackNotifier(ConsoleNotifier):
    """Slack APIによる通知（トークン未設定時はコンソール）"""

    def __init__(self, token: str, channel: str):
        self._channel = channel
        self._client = WebClient(token=token) if token else None

    def _post(self, text: str, blocks: list = None) -> bool:
        try:
            self._client.chat_postMessage(channel=self._channel, text=text, blocks=blocks)
            return True
        except SlackApiError as e:
            logger.warning("Slack通知に失敗しました: %s", e.response.get("error", e))
        except OSError as e:
            logger.warning("Slackに接続できません: %s", e)
        return False

    def send(self, message: str) -> bool:
        if self._client is None:
            return super().send(message)
        return self._post(message)

    def send_error(self, error: str) -> bool:
        return self.send(f"❌ 操作に失敗しました（エラー: {error}）")

    def send_overtime(self, headline: str, today_minutes: int, week_minutes: int, month_minutes: int) -> bool:
        """見出しをセクション、サマリーをcontextブロックで投稿"""
        if self._client is None:
            return super().send_overtime(headline, today_minutes, week_minutes, month_minutes)
        summary = format_summary(today_minutes, week_minutes, month_minutes)
        blocks = [
            {"type": "section", "text": {"type": "mrkdwn", "text": headline}},
            {"type": "context", "elements": [{"type": "mrkdwn", "text": summary}]},
        ]
        return self._post(f"{headline}\n{summary}", blocks)
