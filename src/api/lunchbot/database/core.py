import os
from typing import Any, Dict, List

from azure.core.exceptions import AzureError
from azure.cosmos import CosmosClient, PartitionKey

from lunchbot.utils.config import create_logger

logger = create_logger(__name__)

DATABASE_NAME = "main"


class StorageError(Exception):
    """CosmosDBの操作失敗を表す例外"""


def _create_cosmos_client() -> CosmosClient:
    """CosmosDBクライアントの初期化"""
    url = os.getenv("COSMOS_DB_ACCOUNT_URL")
    key = os.getenv("COSMOS_DB_ACCOUNT_KEY")
    verify_setting = os.getenv("COSMOS_DB_CONNECTION_VERIFY")

    if verify_setting is None:
        connection_verify = True
    else:
        lowered = verify_setting.lower()
        if lowered in {"false", "0", "no"}:
            connection_verify = False
        elif lowered in {"true", "1", "yes"}:
            connection_verify = True
        else:
            connection_verify = verify_setting

    return CosmosClient(url=url, credential=key, connection_verify=connection_verify)


class CosmosCore:
    """CosmosDBの基本操作を提供するクラス"""

    def __init__(self, cosmos_client: CosmosClient, container_name: str):
        """
        Args:
            cosmos_client: 共有のCosmosClient
            container_name: コンテナ名
        """
        self._client = cosmos_client
        self._container_name = container_name
        self._container = None

    @property
    def container(self):
        # 初回アクセス時にコンテナを準備する
        if self._container is None:
            self._container = self._init_container(self._container_name)
        return self._container

    def _init_container(self, container_name: str):
        """コンテナの初期化"""
        try:
            # mainデータベースを600 RU/sの共有スループットで作成（存在しない場合のみ）
            database = self._client.create_database_if_not_exists(id=DATABASE_NAME, offer_throughput=600)
            container = database.create_container_if_not_exists(id=container_name, partition_key=PartitionKey(path="/id"))
            logger.info("Successfully initialized the database and container.")
            return container
        except AzureError as e:
            logger.error(f"Failed to create the database or container: {e}")
            raise StorageError("Failed to prepare the session store") from e

    def save(self, data: Dict[str, Any]) -> None:
        """データの保存（同じidのアイテムは置き換える）"""
        if "id" not in data:
            raise ValueError("data must have an id")
        try:
            self.container.upsert_item(data)
        except AzureError as e:
            logger.error(f"Failed to save data to CosmosDB: {e}")
            raise StorageError("Failed to save data") from e

    def fetch(self, query: str, parameters: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """データの取得"""
        try:
            return list(self.container.query_items(query=query, parameters=parameters, enable_cross_partition_query=True))
        except AzureError as e:
            logger.error(f"Failed to fetch data from CosmosDB: {e}")
            raise StorageError("Failed to fetch data") from e
