import os
import tempfile
from services.config_loader import DEFAULT_CONFIG, load_config


def test_load_config_defaults():
    """設定ファイルの値がデフォルトを上書きすること"""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write("holiday_sync:\n  check_interval_hours: 12\n")
        f.flush()
        config = load_config(f.name)
    os.unlink(f.name)
    assert config["holiday_sync"]["check_interval_hours"] == 12
    assert config["holiday_sync"]["timeout_seconds"] == 10


def test_load_config_nested():
    """ネストされた設定が正しく取得できること"""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write(
            "work_rules:\n"
            "  standard_start: \"08:30\"\n"
            "  overtime_threshold: \"17:30\"\n"
        )
        f.flush()
        config = load_config(f.name)
    os.unlink(f.name)
    assert config["work_rules"]["standard_start"] == "08:30"
    assert config["work_rules"]["overtime_threshold"] == "17:30"


def test_load_config_file_not_found():
    """存在しないファイルの場合デフォルト設定を返すこと"""
    config = load_config("nonexistent.yaml")
    assert config["work_rules"]["standard_start"] == "09:00"
    assert config["work_rules"]["overtime_threshold"] == "18:30"
    assert config["summary"]["trailing_months"] == 6


def test_load_config_does_not_share_defaults():
    """返した設定を変更してもデフォルトが変わらないこと"""
    config = load_config("nonexistent.yaml")
    config["storage"]["data_dir"] = "/tmp/other"
    assert DEFAULT_CONFIG["storage"]["data_dir"] == ".timeclock"
