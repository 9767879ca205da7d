from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class EnvConfig:
    base_url: str
    use_prefixes: bool = True
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def load_env_config(*, use_dotenv: bool = True) -> EnvConfig:
    """Load client settings from environment (optional .env)."""
    if use_dotenv:
        load_dotenv()
    return EnvConfig(
        base_url=os.getenv("PAPI_BASE_URL", "").strip(),
        use_prefixes=_env_bool("PAPI_USE_PREFIXES", True),
        timeout_seconds=_env_float("PAPI_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
    )


def create_client_from_env(**kwargs):
    """Create a PapiClient from environment variables."""
    from .client import PapiClient

    return PapiClient.from_env(**kwargs)


__all__ = ["EnvConfig", "load_env_config", "create_client_from_env"]
