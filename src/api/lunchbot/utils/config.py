import logging
import os
from datetime import timedelta
from typing import List, Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

# 必要な環境変数のリスト
REQUIRED_ENV_VARS = [
    "FORKABLE_EMAIL",
    "FORKABLE_PASSWORD",
    "FORKABLE_AUTH_TOKEN",
    "FORKABLE_SESSION_ENC_KEY",
    "COSMOS_DB_ACCOUNT_URL",
    "COSMOS_DB_ACCOUNT_KEY",
]

DEFAULT_TIMEZONE = "America/Los_Angeles"
DEFAULT_GRAPHQL_URL = "https://forkable.com/api/v2/graphql"


class ConfigError(EnvironmentError):
    """設定値の欠落・不正を表す例外"""


def create_logger(name: str) -> logging.Logger:
    """
    ロガーを作成するファクトリー関数

    Args:
        name (str): ロガーの名前（通常は__name__を使用）

    Returns:
        logging.Logger: 設定済みのロガーインスタンス
    """
    # ルートロガーの伝搬を無効化
    logger = logging.getLogger(name)
    logger.propagate = False

    if not logger.handlers:  # 既にハンドラーが設定されている場合は追加しない
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        handler.encoding = "utf-8"
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


logger = create_logger(__name__)


def get_env_variable(key: str) -> str:
    """必須の環境変数を取得するヘルパー関数"""

    value = os.getenv(key)
    if not value:
        logger.error("環境変数 %s が設定されていません", key)
        raise ConfigError(f"環境変数 {key} が設定されていません")
    return value


def check_environment_variables() -> Tuple[bool, List[str]]:
    """
    必要な環境変数が設定されているかチェックする関数

    Returns:
        Tuple[bool, List[str]]:
            - bool: すべての環境変数が設定されている場合はTrue、そうでない場合はFalse
            - List[str]: 未設定の環境変数のリスト
    """
    missing_vars = []

    for var in REQUIRED_ENV_VARS:
        if not os.getenv(var):
            missing_vars.append(var)
            logger.error(f"環境変数 {var} が設定されていません")

    return len(missing_vars) == 0, missing_vars


def _get_float(key: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"環境変数 {key} は数値で指定してください: {raw}")


class LunchSettings(BaseModel):
    """Forkable 連携に必要な設定値

    環境変数から直接読むのではなく、この値をオーケストレーターへ渡す。
    テストでは任意の値で組み立てられる。
    """

    forkable_email: Optional[str] = None
    forkable_password: Optional[str] = None
    auth_token: Optional[str] = None
    timezone: str = DEFAULT_TIMEZONE
    graphql_url: str = DEFAULT_GRAPHQL_URL
    # セッション有効期限の安全マージンと、期限が読めなかった場合の寿命
    session_safety_margin: timedelta = timedelta(hours=1)
    session_fallback_lifetime: timedelta = timedelta(hours=23)
    request_timeout: Optional[float] = None

    @property
    def has_credentials(self) -> bool:
        return bool(self.forkable_email and self.forkable_password)

    @classmethod
    def from_env(cls) -> "LunchSettings":
        """環境変数（.env を含む）から設定値を組み立てる"""
        safety_margin_minutes = _get_float("FORKABLE_SESSION_SAFETY_MARGIN_MINUTES", 60)
        fallback_hours = _get_float("FORKABLE_SESSION_FALLBACK_HOURS", 23)

        return cls(
            forkable_email=os.getenv("FORKABLE_EMAIL") or None,
            forkable_password=os.getenv("FORKABLE_PASSWORD") or None,
            auth_token=os.getenv("FORKABLE_AUTH_TOKEN") or None,
            timezone=os.getenv("TIMEZONE") or DEFAULT_TIMEZONE,
            graphql_url=os.getenv("FORKABLE_GRAPHQL_URL") or DEFAULT_GRAPHQL_URL,
            session_safety_margin=timedelta(minutes=safety_margin_minutes),
            session_fallback_lifetime=timedelta(hours=fallback_hours),
            request_timeout=_get_float("FORKABLE_REQUEST_TIMEOUT", None),
        )
