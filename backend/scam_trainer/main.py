"""FastAPI application entry point."""

import logging
import os
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scam_trainer.db.database import close_database, init_database
from scam_trainer.llm.chat.manager import init_session_manager, shutdown_session_manager

# Configure logging
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown."""
    # Startup
    db_path = os.getenv("DATABASE_PATH", "./data/trainer.db")
    await init_database(db_path)

    await init_session_manager()

    yield

    # Shutdown
    await shutdown_session_manager()

    await close_database()


app = FastAPI(
    title="Scam Awareness Trainer",
    description="Practice spotting scams by chatting with a simulated scammer, then get feedback",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware - allow any localhost port by default
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=os.getenv("CORS_ALLOW_ORIGIN_REGEX", r"^http://localhost(:\d+)?$"),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


# Import and include routers after app is created to avoid circular imports
from scam_trainer.api import credential, scenarios, sessions  # noqa: E402

app.include_router(scenarios.router, prefix="/api/v1", tags=["scenarios"])
app.include_router(credential.router, prefix="/api/v1", tags=["credential"])
app.include_router(sessions.router, prefix="/api/v1", tags=["sessions"])
