"""
CONFIG ENGINE
Load, validate, and expose engine configuration

RESPONSIBILITIES:
- Load config/engine.yml
- Validate statuses and numeric limits
- Expose read-only typed objects

RULES:
✅ Fail fast on missing or invalid config
✅ Deterministic output
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional

import yaml

from app.domain.models import AssetStatus, CampaignStatus
from app.domain.services.availability_classifier import AvailabilityClassifier

CONFIG_FILE = "engine.yml"


@dataclass(frozen=True)
class EngineConfig:
    """Typed view of engine.yml"""
    policy_relevant_statuses: FrozenSet[CampaignStatus]
    blocking_intrinsic_statuses: FrozenSet[AssetStatus]
    batch_size: int
    lookup_timeout_seconds: Optional[float]
    rpc_function_name: str
    rpc_retries: int
    rpc_backoff_base_seconds: float

    @staticmethod
    def load(config_dir: Path) -> "EngineConfig":
        config_file = Path(config_dir) / CONFIG_FILE
        if not config_file.exists():
            raise FileNotFoundError(f"Engine config not found: {config_file}")

        with open(config_file, "r") as f:
            data = yaml.safe_load(f) or {}

        return EngineConfig.from_dict(data)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "EngineConfig":
        availability = data.get("availability") or {}
        verification = data.get("verification") or {}
        rpc = data.get("rpc") or {}

        statuses = availability.get("policy_relevant_statuses")
        if not statuses:
            raise ValueError("availability.policy_relevant_statuses must not be empty")
        policy = frozenset(CampaignStatus.parse(s) for s in statuses)
        if CampaignStatus.CANCELLED in policy or CampaignStatus.COMPLETED in policy:
            raise ValueError("Completed / Cancelled campaigns cannot block availability")

        blocking = frozenset(
            AssetStatus(s) for s in availability.get("blocking_intrinsic_statuses", [])
        )

        batch_size = int(verification.get("batch_size", 10))
        if batch_size < 1:
            raise ValueError("verification.batch_size must be at least 1")

        timeout = verification.get("lookup_timeout_seconds")
        if timeout is not None:
            timeout = float(timeout)
            if timeout <= 0:
                raise ValueError("verification.lookup_timeout_seconds must be positive")

        retries = int(rpc.get("retries", 0))
        if retries < 0:
            raise ValueError("rpc.retries must not be negative")

        return EngineConfig(
            policy_relevant_statuses=policy,
            blocking_intrinsic_statuses=blocking,
            batch_size=batch_size,
            lookup_timeout_seconds=timeout,
            rpc_function_name=str(rpc.get("function_name", "check_asset_conflict")),
            rpc_retries=retries,
            rpc_backoff_base_seconds=float(rpc.get("backoff_base_seconds", 0.5)),
        )

    def build_classifier(self) -> AvailabilityClassifier:
        return AvailabilityClassifier(
            policy_statuses=self.policy_relevant_statuses,
            blocking_intrinsic_statuses=self.blocking_intrinsic_statuses,
        )
