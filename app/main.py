"""
FastAPI Main Application
Asset availability & pro-rata pricing service
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from pathlib import Path
import logging
from typing import AsyncGenerator

from app.config import settings
from app.core.logging import setup_logging
from app.infrastructure.db.database import init_db, close_db, get_session_factory
from app.domain.services.config_engine import EngineConfig
from app.infrastructure.conflict_check.source_factory import build_verifier, close_conflict_source
from app.api.routes import availability, pricing, health

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).parent.parent / "config"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Handles startup and shutdown of the engine
    """
    # ===================
    # STARTUP
    # ===================
    logger.info("=" * 60)
    logger.info("🚀 Starting Media Availability Engine")
    logger.info("=" * 60)

    # 1. Initialize database
    logger.info("📊 Step 1/3: Initializing database...")
    await init_db()
    logger.info("✅ Database initialized")

    # 2. Load configuration
    logger.info("⚙️  Step 2/3: Loading engine configuration...")
    engine_config = EngineConfig.load(CONFIG_DIR)
    app.state.engine_config = engine_config
    logger.info(
        f"   Policy statuses: {sorted(s.value for s in engine_config.policy_relevant_statuses)}"
    )

    # 3. Build verifier
    logger.info("🔧 Step 3/3: Building conflict verifier...")
    app.state.verifier = build_verifier(engine_config, get_session_factory())
    logger.info(
        f"   Backend: {settings.CONFLICT_CHECK_BACKEND}, batch width: {app.state.verifier.batch_size}"
    )

    logger.info(f"API Server: http://{settings.API_HOST}:{settings.API_PORT}")

    yield

    # ===================
    # SHUTDOWN
    # ===================
    logger.info("🛑 Shutting down Media Availability Engine...")
    await close_conflict_source(app.state.verifier.source)
    await close_db()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Media Availability Engine",
    description="Asset availability, conflict detection and pro-rata pricing for outdoor media",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["Health"])
app.include_router(availability.router, prefix="/api/v1/availability", tags=["Availability"])
app.include_router(pricing.router, prefix="/api/v1/pricing", tags=["Pricing"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )
