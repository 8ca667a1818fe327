from enum import Enum
from typing import Optional


class LoginErrorKind(str, Enum):
    REJECTED = "rejected"
    UNREACHABLE = "unreachable"
    MALFORMED_RESPONSE = "malformed_response"


class QueryErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    UNREACHABLE = "unreachable"
    MALFORMED_RESPONSE = "malformed_response"


class ForkableError(Exception):
    """Forkable API 呼び出しの失敗を表す例外。messageはそのまま利用者に返す文言。"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class LoginError(ForkableError):
    """ログインの失敗"""

    def __init__(self, kind: LoginErrorKind, message: str):
        super().__init__(message)
        self.kind = kind


class QueryError(ForkableError):
    """配達情報取得の失敗。UNAUTHENTICATED のみ再ログインの対象になる。"""

    def __init__(self, kind: QueryErrorKind, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code

    @property
    def is_unauthenticated(self) -> bool:
        return self.kind is QueryErrorKind.UNAUTHENTICATED
