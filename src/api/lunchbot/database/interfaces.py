from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from lunchbot.models import SessionRecord


class SessionStore(ABC):
    @abstractmethod
    def get(self, account_id: str, now: Optional[datetime] = None) -> Optional[SessionRecord]:
        pass

    @abstractmethod
    def put(self, account_id: str, session_token: str, expires_at: int, now: Optional[datetime] = None) -> SessionRecord:
        pass
