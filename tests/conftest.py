from typing import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.infrastructure.db.database import Base, get_db
from app.infrastructure.db.models import CampaignAssetModel, CampaignModel, MediaAssetModel
from app.infrastructure.conflict_check.repository_source import RepositoryConflictSource
from app.domain.services.conflict_verifier import BatchConflictVerifier
from app.api.routes import availability, pricing, health


@pytest.fixture()
async def db_engine(tmp_path):
    db_path = tmp_path / "test.db"
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{db_path}",
        future=True,
        echo=False
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(db_engine) -> async_sessionmaker:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
def seed(db_session):
    """Insert assets / campaigns / bookings and commit"""

    async def _seed(assets=(), campaigns=(), bookings=()):
        for asset in assets:
            db_session.add(MediaAssetModel(**asset))
        for campaign in campaigns:
            db_session.add(CampaignModel(**campaign))
        await db_session.flush()
        for booking in bookings:
            db_session.add(CampaignAssetModel(**booking))
        await db_session.commit()

    return _seed


@pytest.fixture()
async def app(db_session, session_factory) -> FastAPI:
    app = FastAPI()
    app.include_router(health.router, tags=["Health"])
    app.include_router(availability.router, prefix="/api/v1/availability", tags=["Availability"])
    app.include_router(pricing.router, prefix="/api/v1/pricing", tags=["Pricing"])

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.state.verifier = BatchConflictVerifier(RepositoryConflictSource(session_factory))

    return app


@pytest.fixture()
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
