import re
from datetime import datetime
from typing import Callable, Optional

import pytz

from lunchbot.models import SessionMaterial
from lunchbot.utils.config import create_logger

logger = create_logger(__name__)

SESSION_COOKIE_NAME = "_easyorder_session"

_SESSION_COOKIE_PATTERN = re.compile(re.escape(SESSION_COOKIE_NAME) + r"=([^;]+)")
# 例: "expires=Tue, 20 Oct 2026 12:00:00 GMT" の日付部分
_EXPIRY_PATTERN = re.compile(r"(\d{1,2}\s+\w+\s+\d{4}\s+\d{2}:\d{2}:\d{2}\s+GMT)")
_EXPIRY_FORMATS = ("%d %b %Y %H:%M:%S GMT", "%d %B %Y %H:%M:%S GMT")

SessionMaterialExtractor = Callable[[str], Optional[SessionMaterial]]


def extract_session_material(raw_header: Optional[str]) -> Optional[SessionMaterial]:
    """
    Set-Cookie ヘッダーからセッションクッキーと有効期限の文字列を取り出す。

    複数のクッキーが1つの文字列に連結されたヘッダーを想定し、
    セッションクッキーのみを "_easyorder_session=<value>" の形で返す。
    有効期限はセッションクッキー以降に現れる最初の日付パターンを採用する。

    Args:
        raw_header: レスポンスの Set-Cookie ヘッダー

    Returns:
        Optional[SessionMaterial]: セッションクッキーが見つからなければ None
    """
    if not raw_header:
        return None

    match = _SESSION_COOKIE_PATTERN.search(raw_header)
    if not match:
        return None

    token = f"{SESSION_COOKIE_NAME}={match.group(1)}"
    after_session_cookie = raw_header[match.start():]
    date_match = _EXPIRY_PATTERN.search(after_session_cookie)
    expiry_hint = date_match.group(1) if date_match else None
    if expiry_hint is None:
        logger.warning("Could not find expiration date pattern after session cookie")

    return SessionMaterial(token=token, expiry_hint=expiry_hint)


def parse_cookie_expiry(expiry_hint: Optional[str]) -> Optional[datetime]:
    """クッキーの有効期限文字列をUTCのdatetimeに変換する。解釈できなければ None"""
    if not expiry_hint:
        return None

    normalized = " ".join(expiry_hint.split())
    for fmt in _EXPIRY_FORMATS:
        try:
            return pytz.utc.localize(datetime.strptime(normalized, fmt))
        except ValueError:
            continue

    logger.warning(f"Could not parse expiration date: {expiry_hint}")
    return None
