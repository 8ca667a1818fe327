from datetime import datetime
from typing import Any, Dict, Optional

from lunchbot.models import SessionRecord
from lunchbot.utils import to_epoch_ms, utc_now
from lunchbot.utils.config import create_logger
from lunchbot.utils.crypto import decrypt_text, encrypt_text

from .core import CosmosCore
from .interfaces import SessionStore

logger = create_logger(__name__)

SESSION_CONTAINER_NAME = "forkable_sessions"


class SessionRepository(SessionStore):
    """Forkable のセッションをアカウントごとに1件だけ保持するリポジトリ"""

    def __init__(self, core: CosmosCore):
        self._core = core

    def get(self, account_id: str, now: Optional[datetime] = None) -> Optional[SessionRecord]:
        """
        有効期限内のセッションを返す。

        期限切れと未保存は区別せず、どちらも None を返す。
        復号できないトークンも未保存として扱う。
        """
        now_ms = to_epoch_ms(utc_now(now))
        query = "SELECT TOP 1 * FROM c WHERE c.id = @account_id AND c.expires_at > @now"
        parameters = [
            {"name": "@account_id", "value": account_id},
            {"name": "@now", "value": now_ms},
        ]
        result = self._core.fetch(query, parameters)
        if not result:
            return None

        item = result[0]
        session_token = decrypt_text(item.get("session_token_enc", ""))
        if not session_token:
            return None

        record = SessionRecord(
            account_id=account_id,
            session_token=session_token,
            expires_at=int(item["expires_at"]),
            created_at=int(item.get("created_at", 0)),
        )
        # クエリの条件に加えて、期限切れのレコードは返さない
        if not record.is_valid(now_ms):
            return None
        return record

    def put(self, account_id: str, session_token: str, expires_at: int, now: Optional[datetime] = None) -> SessionRecord:
        """
        アカウントのセッションを置き換える。

        idをアカウントIDにしてupsertするため、古いレコードの削除と新規作成が
        1回の操作になり、同じアカウントのレコードが2件見えることはない。
        """
        if not account_id:
            raise ValueError("account_id must be a non-empty string")

        record = SessionRecord(
            account_id=account_id,
            session_token=session_token,
            expires_at=expires_at,
            created_at=to_epoch_ms(utc_now(now)),
        )
        item: Dict[str, Any] = {
            "id": account_id,
            "session_token_enc": encrypt_text(session_token),
            "expires_at": record.expires_at,
            "created_at": record.created_at,
        }
        self._core.save(item)
        logger.info(f"Stored new Forkable session for {account_id}")
        return record
