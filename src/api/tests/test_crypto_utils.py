from cryptography.fernet import Fernet

from lunchbot.utils.crypto import decrypt_text, encrypt_text


def test_encrypt_decrypt_roundtrip(monkeypatch):
    key = Fernet.generate_key().decode()
    monkeypatch.setenv("FORKABLE_SESSION_ENC_KEY", key)

    encrypted = encrypt_text("_easyorder_session=abc")

    assert encrypted != "_easyorder_session=abc"
    assert decrypt_text(encrypted) == "_easyorder_session=abc"


def test_decrypt_invalid_returns_empty_string(monkeypatch):
    key = Fernet.generate_key().decode()
    monkeypatch.setenv("FORKABLE_SESSION_ENC_KEY", key)

    assert decrypt_text("invalid-token") == ""
    assert decrypt_text("") == ""
