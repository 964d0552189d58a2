import copy

import yaml
from pathlib import Path

DEFAULT_CONFIG = {
    "storage": {
        "data_dir": ".timeclock",
    },
    "work_rules": {
        "standard_start": "09:00",
        "overtime_threshold": "18:30",
    },
    "holiday_sync": {
        "enabled": True,
        "feed_url": "",
        "check_interval_hours": 6,
        "timeout_seconds": 10,
    },
    "summary": {
        "trailing_months": 6,
    },
    "slack": {
        "enabled": False,
        "notify_channel": "",
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """ベース設定にオーバーライドをマージする"""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str = "config.yaml") -> dict:
    """YAML設定ファイルをロードし、デフォルト設定とマージして返す"""
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
        return _deep_merge(DEFAULT_CONFIG, user_config)
    return copy.deepcopy(DEFAULT_CONFIG)
