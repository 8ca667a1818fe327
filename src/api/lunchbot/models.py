from typing import List, Optional

from pydantic import BaseModel


class SessionRecord(BaseModel):
    """Cosmos DB 上で管理する Forkable のセッション情報（アカウントごとに1件）"""

    account_id: str
    session_token: str
    expires_at: int
    created_at: int

    def is_valid(self, now_ms: int) -> bool:
        return now_ms < self.expires_at


class LoginSession(BaseModel):
    """ログイン成功時に得られるセッション"""

    session_token: str
    expires_at: int


class SessionMaterial(BaseModel):
    """Set-Cookie ヘッダーから取り出したセッションクッキーと有効期限の文字列"""

    token: str
    expiry_hint: Optional[str] = None


class LunchOrder(BaseModel):
    restaurant: str
    items: List[str]


class DeliverySummary(BaseModel):
    """対象日のランチ配達の一覧"""

    date: str
    lunch: List[LunchOrder] = []
