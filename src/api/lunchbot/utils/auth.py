import secrets
from typing import Optional

from lunchbot.utils.config import create_logger

logger = create_logger(__name__)

BEARER_PREFIX = "Bearer "


def verify_api_key(api_key: str, valid_api_key: Optional[str]) -> bool:
    """APIキーを検証する

    Args:
        api_key (str): 検証するAPIキー
        valid_api_key (Optional[str]): 設定されている正しいAPIキー

    Returns:
        bool: 検証結果（Trueなら有効）
    """
    if not valid_api_key:
        logger.error("FORKABLE_AUTH_TOKENが設定されていません")
        return False

    return secrets.compare_digest(api_key.encode("utf-8"), valid_api_key.encode("utf-8"))


def verify_bearer_header(authorization: Optional[str], valid_api_key: Optional[str]) -> bool:
    """Authorizationヘッダー（Bearer形式）を検証する"""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return False
    return verify_api_key(authorization[len(BEARER_PREFIX):], valid_api_key)
