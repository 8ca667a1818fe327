from cryptography.fernet import Fernet, InvalidToken

from lunchbot.utils.config import create_logger, get_env_variable

logger = create_logger(__name__)


def _get_fernet() -> Fernet:
    """環境変数から取得した鍵でFernetインスタンスを返す"""
    key = get_env_variable("FORKABLE_SESSION_ENC_KEY")
    return Fernet(key.encode("utf-8"))


def encrypt_text(text: str) -> str:
    """文字列をFernetで暗号化し、文字列を返す"""
    fernet = _get_fernet()
    return fernet.encrypt(text.encode("utf-8")).decode("utf-8")


def decrypt_text(token: str) -> str:
    """Fernetで復号して文字列を返す。失敗時は空文字を返す。"""
    if not token:
        return ""

    fernet = _get_fernet()
    try:
        return fernet.decrypt(token.encode("utf-8")).decode("utf-8")
    except (InvalidToken, ValueError) as error:
        logger.error("Failed to decrypt session token: %s", error)
        return ""
