import datetime
from typing import Optional

import pytz


def to_epoch_ms(value: datetime.datetime) -> int:
    """
    datetimeをエポックミリ秒に変換する関数

    タイムゾーン情報を持たない値はUTCとして扱う。

    :param value: 変換するdatetime
    :return: エポックミリ秒
    """
    if value.tzinfo is None:
        value = pytz.utc.localize(value)
    return int(value.timestamp() * 1000)


def from_epoch_ms(value: int) -> datetime.datetime:
    """
    エポックミリ秒をUTCのdatetimeに変換する関数

    :param value: エポックミリ秒
    :return: UTCのdatetime
    """
    return datetime.datetime.fromtimestamp(value / 1000, tz=pytz.utc)


def utc_now(now: Optional[datetime.datetime] = None) -> datetime.datetime:
    """
    現在時刻（UTC）を返す関数。nowが渡された場合はそれをUTCに揃えて返す

    :param now: 基準時刻（テスト用）
    :return: UTCのdatetime
    """
    if now is None:
        return datetime.datetime.now(pytz.utc)
    if now.tzinfo is None:
        return pytz.utc.localize(now)
    return now.astimezone(pytz.utc)
