from datetime import datetime
from typing import Any, Dict, List, Optional

import requests

from lunchbot.forkable.cookies import SessionMaterialExtractor, extract_session_material, parse_cookie_expiry
from lunchbot.forkable.errors import LoginError, LoginErrorKind, QueryError, QueryErrorKind
from lunchbot.models import DeliverySummary, LoginSession, LunchOrder
from lunchbot.utils import to_epoch_ms, utc_now
from lunchbot.utils.config import LunchSettings, create_logger

logger = create_logger(__name__)

UNKNOWN_RESTAURANT = "Unknown Restaurant"

LOGIN_MUTATION = """mutation ($input: CreateSessionInput!) {
  createSession (input: $input) {
    errorAttributes
    user { id firstName email }
  }
}"""

DELIVERIES_QUERY = """query {
  myDeliveries (from: "%s") {
    forDeliveryAt
    orders {
      venue { displayName }
      pieces { name }
    }
  }
}"""

_AUTH_ERROR_WORDS = ("unauthenticated", "unauthorized")


class ForkableClient:
    """Forkable の GraphQL API クライアント（ログインと配達情報の取得）"""

    def __init__(
        self,
        settings: Optional[LunchSettings] = None,
        session_extractor: SessionMaterialExtractor = extract_session_material,
    ):
        self.settings = settings or LunchSettings()
        self.url = self.settings.graphql_url
        self.session_extractor = session_extractor
        self.headers = {"content-type": "application/json"}

    def _post(self, payload: Dict[str, Any], headers: Dict[str, str]) -> requests.Response:
        return requests.post(self.url, json=payload, headers=headers, timeout=self.settings.request_timeout)

    def login(self, account_id: str, secret: str, now: Optional[datetime] = None) -> LoginSession:
        """
        Forkable にログインし、セッションクッキーと有効期限を返す。

        有効期限はクッキーの期限から安全マージン（既定1時間）を引いた値。
        期限が読み取れない場合は現在時刻 + 既定の寿命（既定23時間）。

        Raises:
            LoginError: 認証情報の拒否、通信失敗、想定外のレスポンスの場合
        """
        payload = {"query": LOGIN_MUTATION, "variables": {"input": {"email": account_id, "password": secret}}}

        logger.info("Logging in to Forkable")
        try:
            response = self._post(payload, self.headers)
        except requests.RequestException as e:
            logger.error(f"Login request failed: {e}")
            raise LoginError(LoginErrorKind.UNREACHABLE, f"Failed to login: {e}")

        if not response.ok:
            logger.error(f"Login failed with status {response.status_code}")
            raise LoginError(LoginErrorKind.UNREACHABLE, f"Failed to login with status {response.status_code}")

        try:
            data = response.json()
        except ValueError:
            logger.error("Login response is not valid JSON")
            raise LoginError(LoginErrorKind.MALFORMED_RESPONSE, "Failed to login: unexpected response")

        create_session = ((data or {}).get("data") or {}).get("createSession") or {}
        if create_session.get("errorAttributes"):
            logger.error("Invalid credentials")
            raise LoginError(LoginErrorKind.REJECTED, "Failed to login: invalid credentials")

        material = self.session_extractor(response.headers.get("set-cookie"))
        if material is None:
            logger.error("No session cookie found in login response")
            raise LoginError(LoginErrorKind.MALFORMED_RESPONSE, "Failed to login: no session cookie received")

        current = utc_now(now)
        cookie_expiry = parse_cookie_expiry(material.expiry_hint)
        if cookie_expiry is not None:
            expires_at = cookie_expiry - self.settings.session_safety_margin
        else:
            expires_at = current + self.settings.session_fallback_lifetime

        logger.info(f"Successfully logged in to Forkable. session expires at {expires_at.isoformat()}")
        return LoginSession(session_token=material.token, expires_at=to_epoch_ms(expires_at))

    def query_deliveries(self, session_token: str, target_date: str) -> DeliverySummary:
        """
        対象日の配達情報を取得する。

        Raises:
            QueryError: 認証エラー（UNAUTHENTICATED）、通信失敗、想定外のレスポンスの場合
        """
        payload = {"query": DELIVERIES_QUERY % target_date, "variables": {}}
        headers = {**self.headers, "Cookie": session_token}

        logger.info(f"Fetching lunch data for {target_date}")
        try:
            response = self._post(payload, headers)
        except requests.RequestException as e:
            logger.error(f"Lunch request failed: {e}")
            raise QueryError(QueryErrorKind.UNREACHABLE, f"Failed to fetch lunch data: {e}")

        # 401に加えて403もセッション切れとして扱い、再ログインの対象にする
        if response.status_code in (401, 403):
            raise QueryError(QueryErrorKind.UNAUTHENTICATED, "Authentication failed", status_code=response.status_code)

        if not response.ok:
            raise QueryError(
                QueryErrorKind.UNREACHABLE,
                f"Failed to fetch lunch data with status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json() or {}
        except ValueError:
            raise QueryError(QueryErrorKind.MALFORMED_RESPONSE, "Unexpected response from Forkable")
        if not isinstance(data, dict):
            raise QueryError(QueryErrorKind.MALFORMED_RESPONSE, "Unexpected response from Forkable")

        errors = data.get("errors") or []
        if not isinstance(errors, list):
            errors = [errors]
        if any(self._is_auth_error(error) for error in errors):
            raise QueryError(QueryErrorKind.UNAUTHENTICATED, "Authentication failed", status_code=401)

        body = data.get("data") or {}
        if not isinstance(body, dict):
            raise QueryError(QueryErrorKind.MALFORMED_RESPONSE, "Unexpected response from Forkable")
        deliveries = body.get("myDeliveries")
        if deliveries is None and errors:
            message = errors[0].get("message") if isinstance(errors[0], dict) else str(errors[0])
            raise QueryError(QueryErrorKind.MALFORMED_RESPONSE, f"Forkable returned an error: {message}")

        summary = DeliverySummary(date=target_date, lunch=self._parse_deliveries(deliveries or [], target_date))
        logger.info("Successfully fetched lunch data")
        return summary

    @staticmethod
    def _is_auth_error(error: Any) -> bool:
        if not isinstance(error, dict):
            return False
        message = (error.get("message") or "").lower()
        if any(word in message for word in _AUTH_ERROR_WORDS):
            return True
        extensions = error.get("extensions") or {}
        return extensions.get("code") == "UNAUTHENTICATED"

    @staticmethod
    def _parse_deliveries(deliveries: Any, target_date: str) -> List[LunchOrder]:
        """myDeliveries から対象日の注文を取り出す。想定外の形の場合は MALFORMED_RESPONSE。"""
        malformed = QueryError(QueryErrorKind.MALFORMED_RESPONSE, "Unexpected response from Forkable")
        if not isinstance(deliveries, list):
            raise malformed

        lunch: List[LunchOrder] = []
        for delivery in deliveries:
            if not isinstance(delivery, dict):
                raise malformed
            delivery_date = str(delivery.get("forDeliveryAt") or "")[:10]
            if delivery_date != target_date:
                continue

            orders = delivery.get("orders") or []
            if not isinstance(orders, list):
                raise malformed
            for order in orders:
                if not isinstance(order, dict):
                    raise malformed
                pieces = order.get("pieces") or []
                venue = order.get("venue") or {}
                if not isinstance(pieces, list) or not isinstance(venue, dict):
                    raise malformed
                if not pieces:
                    continue
                if any(piece and not isinstance(piece, dict) for piece in pieces):
                    raise malformed
                restaurant = venue.get("displayName") or UNKNOWN_RESTAURANT
                items = [piece.get("name") for piece in pieces if piece and piece.get("name")]
                lunch.append(LunchOrder(restaurant=restaurant, items=items))
        return lunch
