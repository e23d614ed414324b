"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api import simplefin
from database import init_db
from logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup."""
    try:
        init_db()
    except Exception:
        logger.warning("Database initialisation failed on startup", exc_info=True)
    yield


app = FastAPI(
    title="SimpleFIN Importer",
    description="Incremental import of SimpleFIN accounts and transactions",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(simplefin.router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}
