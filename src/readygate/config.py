"""Global configuration: env vars and defaults."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class GateConfig:
    """Application-wide configuration. CLI flags override these values."""

    policy_path: str | None = None
    workers: int | None = None  # None means os.cpu_count()
    scan_timeout: float | None = None  # seconds; None means unbounded
    output_path: str | None = None
    profile: str | None = None

    @classmethod
    def load(cls, env: Mapping[str, str] | None = None) -> GateConfig:
        """Load config from environment variables."""
        env = os.environ if env is None else env
        config = cls()

        config.policy_path = env.get("READYGATE_POLICY") or None
        config.output_path = env.get("READYGATE_OUTPUT") or None
        config.profile = env.get("RUNTIME_PROFILE") or None

        env_workers = env.get("READYGATE_WORKERS")
        if env_workers:
            config.workers = _parse_number(env_workers, int, "READYGATE_WORKERS")

        env_timeout = env.get("READYGATE_SCAN_TIMEOUT")
        if env_timeout:
            config.scan_timeout = _parse_number(
                env_timeout, float, "READYGATE_SCAN_TIMEOUT"
            )

        return config


def _parse_number(raw: str, kind: type, name: str):
    try:
        value = kind(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a valid %s", name, raw, kind.__name__)
        return None
    if value <= 0:
        logger.warning("Ignoring %s=%r: must be positive", name, raw)
        return None
    return value
