"""FastAPI entry-point exposing the dispatch engine."""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from concierge.api.chat import router as chat_router
from concierge.api.routes import router as agents_router
from concierge.config import config
from concierge.core.log import setup_logging
from concierge.runtime import initialize_agents, shutdown_agents


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for FastAPI application."""
    setup_logging(config.log_level)
    await initialize_agents()
    yield
    await shutdown_agents()


app = FastAPI(title="Concierge Dispatch", lifespan=lifespan)
app.include_router(chat_router)
app.include_router(agents_router)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
