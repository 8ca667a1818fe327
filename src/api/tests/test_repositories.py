"""SessionRepository（セッションキャッシュ）のテスト"""

from datetime import datetime, timedelta
from typing import Any, Dict, List

import pytest
import pytz
from cryptography.fernet import Fernet

from lunchbot.database.repositories import SessionRepository
from lunchbot.utils import to_epoch_ms

NOW = datetime(2026, 10, 19, 18, 0, tzinfo=pytz.utc)
ACCOUNT = "me@example.com"


class InMemoryCore:
    """id をキーに1件だけ保持する CosmosCore の代替"""

    def __init__(self):
        self.items: Dict[str, Dict[str, Any]] = {}
        self.queries: List[str] = []

    def save(self, data: Dict[str, Any]) -> None:
        self.items[data["id"]] = dict(data)

    def fetch(self, query: str, parameters: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        self.queries.append(query)
        values = {p["name"]: p["value"] for p in parameters}
        item = self.items.get(values["@account_id"])
        if item and item["expires_at"] > values["@now"]:
            return [dict(item)]
        return []


@pytest.fixture(autouse=True)
def encryption_key(monkeypatch):
    monkeypatch.setenv("FORKABLE_SESSION_ENC_KEY", Fernet.generate_key().decode())


@pytest.fixture
def core():
    return InMemoryCore()


@pytest.fixture
def repository(core):
    return SessionRepository(core)


def test_put_then_get_returns_same_session(repository):
    expires_at = to_epoch_ms(NOW + timedelta(hours=5))

    repository.put(ACCOUNT, "_easyorder_session=tok", expires_at, now=NOW)
    record = repository.get(ACCOUNT, now=NOW)

    assert record is not None
    assert record.session_token == "_easyorder_session=tok"
    assert record.expires_at == expires_at
    assert record.created_at == to_epoch_ms(NOW)


def test_put_replaces_existing_session(repository, core):
    """同じアカウントで保存すると古いセッションは取得できなくなることを確認"""
    repository.put(ACCOUNT, "old", to_epoch_ms(NOW + timedelta(hours=1)), now=NOW)
    repository.put(ACCOUNT, "new", to_epoch_ms(NOW + timedelta(hours=2)), now=NOW)

    record = repository.get(ACCOUNT, now=NOW)

    assert len(core.items) == 1
    assert record.session_token == "new"


def test_get_missing_session_returns_none(repository):
    assert repository.get(ACCOUNT, now=NOW) is None


def test_get_expired_session_returns_none(repository):
    expires_at = to_epoch_ms(NOW + timedelta(hours=1))
    repository.put(ACCOUNT, "tok", expires_at, now=NOW)

    assert repository.get(ACCOUNT, now=NOW + timedelta(hours=2)) is None
    # 有効期限ちょうども無効
    assert repository.get(ACCOUNT, now=NOW + timedelta(hours=1)) is None


def test_get_never_returns_expired_record_from_store(mocker):
    """ストアが期限切れのレコードを返しても、それを使わないことを確認"""
    core = mocker.Mock()
    core.fetch.return_value = [{"id": ACCOUNT, "session_token_enc": "x", "expires_at": to_epoch_ms(NOW) - 1}]
    mocker.patch("lunchbot.database.repositories.decrypt_text", return_value="tok")

    assert SessionRepository(core).get(ACCOUNT, now=NOW) is None


def test_get_queries_by_account_and_expiry(mocker):
    core = mocker.Mock()
    core.fetch.return_value = []

    SessionRepository(core).get(ACCOUNT, now=NOW)

    query, parameters = core.fetch.call_args.args
    assert "c.id = @account_id" in query
    assert "c.expires_at > @now" in query
    assert {"name": "@now", "value": to_epoch_ms(NOW)} in parameters


def test_session_token_is_encrypted_at_rest(repository, core):
    repository.put(ACCOUNT, "_easyorder_session=secret-token", to_epoch_ms(NOW + timedelta(hours=1)), now=NOW)

    stored = core.items[ACCOUNT]
    assert "session_token" not in stored
    assert "secret-token" not in stored["session_token_enc"]


def test_undecryptable_session_is_treated_as_missing(repository, monkeypatch):
    repository.put(ACCOUNT, "tok", to_epoch_ms(NOW + timedelta(hours=1)), now=NOW)
    # 鍵が変わると復号できない
    monkeypatch.setenv("FORKABLE_SESSION_ENC_KEY", Fernet.generate_key().decode())

    assert repository.get(ACCOUNT, now=NOW) is None


def test_put_requires_account_id(repository):
    with pytest.raises(ValueError):
        repository.put("", "tok", to_epoch_ms(NOW + timedelta(hours=1)), now=NOW)
