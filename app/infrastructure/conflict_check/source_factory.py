"""
Conflict source factory (settings-driven).
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from app.config import settings
from app.domain.services.config_engine import EngineConfig
from app.domain.services.conflict_verifier import BatchConflictVerifier, ConflictSource
from app.infrastructure.conflict_check.repository_source import RepositoryConflictSource
from app.infrastructure.conflict_check.rpc_client import ConflictRpcClient


def build_conflict_source(
    engine_config: EngineConfig,
    session_factory: async_sessionmaker,
    backend: Optional[str] = None,
) -> ConflictSource:
    name = (backend or settings.CONFLICT_CHECK_BACKEND or "database").lower()
    if name == "rpc":
        return ConflictRpcClient(
            base_url=(settings.SUPABASE_URL or "").strip(),
            service_key=(settings.SUPABASE_SERVICE_KEY or "").strip(),
            function_name=engine_config.rpc_function_name,
            timeout_seconds=settings.CONFLICT_CHECK_TIMEOUT_SECONDS,
            retries=engine_config.rpc_retries,
            backoff_base_seconds=engine_config.rpc_backoff_base_seconds,
        )
    if name == "database":
        return RepositoryConflictSource(session_factory, engine_config.policy_relevant_statuses)
    raise ValueError(f"Unknown conflict check backend: {name}")


def reports_full_history(source: ConflictSource) -> bool:
    """
    The RPC only returns overlapping campaigns, so an empty answer says
    nothing about the asset's wider booking history.
    """
    return isinstance(source, RepositoryConflictSource)


def build_verifier(
    engine_config: EngineConfig,
    session_factory: async_sessionmaker,
    backend: Optional[str] = None,
) -> BatchConflictVerifier:
    return BatchConflictVerifier(
        source=build_conflict_source(engine_config, session_factory, backend),
        classifier=engine_config.build_classifier(),
        batch_size=settings.CONFLICT_BATCH_SIZE or engine_config.batch_size,
        lookup_timeout=engine_config.lookup_timeout_seconds,
    )


async def close_conflict_source(source: ConflictSource) -> None:
    """Release pooled connections held by a source (RPC client only)"""
    if isinstance(source, ConflictRpcClient):
        await source.aclose()
