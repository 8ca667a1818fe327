from datetime import date, datetime, timedelta
from typing import Optional

import pytz

from lunchbot.utils import utc_now
from lunchbot.utils.config import DEFAULT_TIMEZONE, ConfigError

# この時刻（ローカル時刻）以降は翌日のランチを対象にする
LUNCH_CUTOFF_HOUR = 13


def get_timezone(timezone_name: Optional[str]):
    """タイムゾーン名からpytzのタイムゾーンを取得する。未設定時のみ既定値を使う"""
    name = timezone_name or DEFAULT_TIMEZONE
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise ConfigError(f"Invalid timezone: {name}")


def select_target_date(now: Optional[datetime] = None, timezone_name: Optional[str] = None) -> date:
    """
    対象となるランチの日付を決める。

    指定タイムゾーンのローカル時刻が13時以降なら翌日、それ以外は当日。
    日付の加算はUTCではなくローカルの暦で行う。

    Args:
        now: 現在時刻。タイムゾーン情報がない場合はUTCとして扱う
        timezone_name: タイムゾーン名（例: America/Los_Angeles）

    Returns:
        date: 対象日

    Raises:
        ConfigError: タイムゾーン名が不正な場合
    """
    tz = get_timezone(timezone_name)
    local_now = utc_now(now).astimezone(tz)
    days_ahead = 1 if local_now.hour >= LUNCH_CUTOFF_HOUR else 0
    return local_now.date() + timedelta(days=days_ahead)


def target_date_string(now: Optional[datetime] = None, timezone_name: Optional[str] = None) -> str:
    """対象日をYYYY-MM-DD形式の文字列で返す"""
    return select_target_date(now, timezone_name).isoformat()
