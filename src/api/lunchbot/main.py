import os
from contextlib import asynccontextmanager

# Azure Application Insights imports
from azure.monitor.opentelemetry import configure_azure_monitor
from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.responses import PlainTextResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from lunchbot.database.core import _create_cosmos_client
from lunchbot.database.repositories import SessionRepository
from lunchbot.dependencies import get_api_key, get_forkable_client, get_session_repository, get_settings
from lunchbot.forkable.client import ForkableClient
from lunchbot.services import LunchSessionOrchestrator
from lunchbot.utils.config import ConfigError, LunchSettings, check_environment_variables, create_logger
from lunchbot.utils.dates import target_date_string
from lunchbot.utils.formatter import format_lunch_response

load_dotenv()

logger = create_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI アプリのライフサイクルで CosmosClient を管理する

    認証情報の欠落はリクエスト時に 500 として返すため、ここでは警告のみ出力する。
    """
    is_valid, missing_vars = check_environment_variables()
    if not is_valid:
        logger.warning(f"Missing environment variables: {', '.join(missing_vars)}")

    try:
        cosmos_client = _create_cosmos_client()
        app.state.cosmos_client = cosmos_client
        logger.info("CosmosClient initialized")
    except Exception as e:
        logger.error(f"Failed to initialize CosmosClient: {e}")
        raise

    yield

    logger.info("Application shutdown")


app = FastAPI(
    title="FORKABLE-LUNCH",
    description="Today's (or tomorrow's) Forkable lunch as plain text.",
    lifespan=lifespan,
)

# Azure Application Insightsの初期化
APPLICATIONINSIGHTS_CONNECTION_STRING = os.getenv("APPLICATIONINSIGHTS_CONNECTION_STRING")
if APPLICATIONINSIGHTS_CONNECTION_STRING:
    configure_azure_monitor(connection_string=APPLICATIONINSIGHTS_CONNECTION_STRING)
    FastAPIInstrumentor.instrument_app(app)


@app.get("/")
async def root():
    return {"message": "The server is up and running."}


@app.get("/forkable", response_class=PlainTextResponse)
def get_lunch(
    api_key: str = Depends(get_api_key),
    settings: LunchSettings = Depends(get_settings),
    session_repository: SessionRepository = Depends(get_session_repository),
    forkable_client: ForkableClient = Depends(get_forkable_client),
):
    """対象日（13時以降は翌日）のランチをテキストで返すエンドポイント"""
    if not settings.has_credentials:
        logger.error("Forkable credentials are not configured")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Missing credentials")

    try:
        target_date = target_date_string(timezone_name=settings.timezone)
        orchestrator = LunchSessionOrchestrator(settings, session_repository, forkable_client)
        outcome = orchestrator.fetch_lunch(target_date)
        return PlainTextResponse(format_lunch_response(outcome), status_code=status.HTTP_200_OK)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    except Exception as e:
        logger.exception(f"Unexpected error while fetching lunch: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Unexpected error: {e}",
        )
