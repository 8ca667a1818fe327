"""FastAPI依存性注入の定義モジュール。

アプリケーション全体で共有する CosmosClient と、リクエストごとの
設定値・セッションリポジトリ・Forkable クライアントを提供します。
"""

import os
from typing import Optional

from azure.cosmos import CosmosClient
from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security.api_key import APIKeyHeader

from lunchbot.database.core import CosmosCore
from lunchbot.database.repositories import SESSION_CONTAINER_NAME, SessionRepository
from lunchbot.forkable.client import ForkableClient
from lunchbot.utils.auth import verify_bearer_header
from lunchbot.utils.config import ConfigError, LunchSettings, create_logger

logger = create_logger(__name__)

api_key_header = APIKeyHeader(name="Authorization", auto_error=False)


def get_settings() -> LunchSettings:
    """環境変数から LunchSettings を生成。

    Raises:
        HTTPException: 設定値が不正な場合（500）
    """
    try:
        return LunchSettings.from_env()
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


def get_auth_token() -> Optional[str]:
    """受け付けるAPIトークン（FORKABLE_AUTH_TOKEN）を取得。"""
    return os.getenv("FORKABLE_AUTH_TOKEN") or None


def get_api_key(
    authorization: str = Security(api_key_header),
    auth_token: Optional[str] = Depends(get_auth_token),
) -> str:
    """Authorization: Bearer <token> を検証する。

    トークンが未設定・不一致の場合は 401 を返し、Forkable へのアクセスは行わない。
    他の設定値の検証より先に行う。
    """
    if not verify_bearer_header(authorization, auth_token):
        logger.warning("Rejected request with invalid or missing API key")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return authorization


def get_cosmos_client(request: Request) -> CosmosClient:
    """アプリケーションスコープの CosmosClient を取得。

    app.state.cosmos_client から共有インスタンスを取得します。
    lifespan 関数で初期化済みであることが前提です。

    Raises:
        RuntimeError: cosmos_client が初期化されていない場合
    """
    if not hasattr(request.app.state, "cosmos_client"):
        raise RuntimeError("CosmosClient not initialized in app.state. Check lifespan configuration.")
    return request.app.state.cosmos_client


def create_session_repository(cosmos_client: CosmosClient) -> SessionRepository:
    """CosmosClient から SessionRepository を生成するヘルパー関数。"""
    cosmos_core = CosmosCore(cosmos_client, SESSION_CONTAINER_NAME)
    return SessionRepository(cosmos_core)


def get_session_repository(cosmos_client: CosmosClient = Depends(get_cosmos_client)) -> SessionRepository:
    """CosmosClient を使って SessionRepository を生成。

    コンテナの準備は最初の読み書きまで行われないため、
    認可前にデータベースへアクセスすることはありません。
    """
    return create_session_repository(cosmos_client)


def get_forkable_client(settings: LunchSettings = Depends(get_settings)) -> ForkableClient:
    """設定値から ForkableClient を生成。"""
    return ForkableClient(settings)
