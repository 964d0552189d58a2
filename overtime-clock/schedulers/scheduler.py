# schedulers/scheduler.py
from datetime import datetime
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger


class HolidaySyncScheduler:
    """APSchedulerによる祝日カレンダー同期の定期実行管理

    ジョブ本体は同期が必要かを毎回判定するため、間隔は月1回より短くてよい。
    """

    def __init__(self, interval_hours: int, job_func: Callable, run_at_start: bool = True):
        self._interval = interval_hours
        self._job_func = job_func
        self._scheduler = BackgroundScheduler()

        job_options = {}
        if run_at_start:
            job_options["next_run_time"] = datetime.now()
        self._scheduler.add_job(
            self._job_func,
            trigger=IntervalTrigger(hours=self._interval),
            id="holiday_sync",
            replace_existing=True,
            **job_options,
        )

    def start(self):
        """スケジューラ開始"""
        self._scheduler.start()

    def stop(self):
        """スケジューラ停止"""
        self._scheduler.shutdown(wait=False)
