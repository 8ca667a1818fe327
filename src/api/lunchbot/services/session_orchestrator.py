"""Forkable のセッションキャッシュと再ログインを制御するオーケストレーター。

1リクエストあたりの流れ:

    LOOKUP -> TRY_CACHED -> LOGIN -> RETRY -> DONE

- LOOKUP: キャッシュに有効なセッションがあれば TRY_CACHED、なければ LOGIN
- TRY_CACHED: キャッシュのセッションで取得。認証エラーのときだけ LOGIN、それ以外は DONE
- LOGIN: ログインしてセッションを保存し RETRY。ログイン失敗は DONE
- RETRY: 新しいセッションで1回だけ取得し、その結果で DONE

ログインは最大1回、配達情報の取得は最大2回。ループはしない。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Union

from lunchbot.database.core import StorageError
from lunchbot.database.interfaces import SessionStore
from lunchbot.forkable.client import ForkableClient
from lunchbot.forkable.errors import ForkableError, QueryError
from lunchbot.models import DeliverySummary
from lunchbot.utils.config import ConfigError, LunchSettings, create_logger

logger = create_logger(__name__)

LunchOutcome = Union[DeliverySummary, ForkableError]


class SessionStage(str, Enum):
    LOOKUP = "lookup"
    TRY_CACHED = "try_cached"
    LOGIN = "login"
    RETRY = "retry"
    DONE = "done"


@dataclass
class _LunchRequest:
    """1リクエスト分の状態"""

    target_date: str
    session_token: Optional[str] = None
    outcome: Optional[LunchOutcome] = None


class LunchSessionOrchestrator:
    def __init__(self, settings: LunchSettings, session_store: SessionStore, client: ForkableClient):
        if not settings.has_credentials:
            raise ConfigError("Missing credentials")
        self.settings = settings
        self.session_store = session_store
        self.client = client
        self._handlers: Dict[SessionStage, Callable[[_LunchRequest], SessionStage]] = {
            SessionStage.LOOKUP: self._lookup,
            SessionStage.TRY_CACHED: self._try_cached,
            SessionStage.LOGIN: self._login,
            SessionStage.RETRY: self._retry,
        }

    @property
    def account_id(self) -> str:
        return self.settings.forkable_email

    def fetch_lunch(self, target_date: str) -> LunchOutcome:
        """
        対象日のランチを取得する。

        失敗は例外ではなく ForkableError を値として返す。
        セッションストアの障害はキャッシュなしとして扱い、処理を続ける。

        Args:
            target_date: YYYY-MM-DD形式の対象日

        Returns:
            LunchOutcome: DeliverySummary または ForkableError
        """
        request = _LunchRequest(target_date=target_date)
        stage = SessionStage.LOOKUP
        while stage is not SessionStage.DONE:
            logger.debug(f"Session stage: {stage.value}")
            stage = self._handlers[stage](request)
        return request.outcome

    def _lookup(self, request: _LunchRequest) -> SessionStage:
        try:
            record = self.session_store.get(self.account_id)
        except StorageError as e:
            logger.error(f"Failed to read cached session, will login: {e}")
            return SessionStage.LOGIN

        if record is None:
            logger.info("No cached session found, will login")
            return SessionStage.LOGIN

        logger.info("Using cached session")
        request.session_token = record.session_token
        return SessionStage.TRY_CACHED

    def _try_cached(self, request: _LunchRequest) -> SessionStage:
        try:
            request.outcome = self.client.query_deliveries(request.session_token, request.target_date)
        except QueryError as e:
            if e.is_unauthenticated:
                # 古いセッションは削除せず、ログイン後に上書きする
                logger.info("Cached session expired, will login again")
                return SessionStage.LOGIN
            logger.error(f"Lunch query with cached session failed: {e.message}")
            request.outcome = e
        return SessionStage.DONE

    def _login(self, request: _LunchRequest) -> SessionStage:
        try:
            session = self.client.login(self.account_id, self.settings.forkable_password)
        except ForkableError as e:
            logger.error(f"Login to Forkable failed: {e.message}")
            request.outcome = e
            return SessionStage.DONE

        request.session_token = session.session_token
        try:
            self.session_store.put(self.account_id, session.session_token, session.expires_at)
            logger.info("Stored new session in cache")
        except StorageError as e:
            # 保存できなくても取得したセッションは有効なので、このリクエストは続行する
            logger.error(f"Failed to store new session: {e}")
        return SessionStage.RETRY

    def _retry(self, request: _LunchRequest) -> SessionStage:
        try:
            request.outcome = self.client.query_deliveries(request.session_token, request.target_date)
        except QueryError as e:
            logger.error(f"Lunch query after login failed: {e.message}")
            request.outcome = e
        return SessionStage.DONE
