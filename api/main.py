import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import db
from core.errors import register_exception_handlers
from recipes.router import router as recipes_router

VERSION = "1.0.0"

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


def app_env() -> str:
    return os.environ.get("APP_ENV", "development").strip() or "development"


def cors_allow_origins() -> list[str]:
    raw = os.environ.get("CORS_ALLOW_ORIGINS", "*")
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool()
    logger.info("database connection pool established env=%s", app_env())
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(title="recipe-catalog", version=VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allow_origins(),
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(recipes_router, tags=["recipes"])


@app.get("/v1/healthcheck")
def healthcheck() -> dict:
    return {"status": "available", "environment": app_env(), "version": VERSION}
