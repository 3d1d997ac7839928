# =============================================================================
# school_core/config/settings.py
# Runtime settings: Supabase credentials, cache location, log level
# =============================================================================
"""
Settings are read from ``.streamlit/secrets.toml`` and then overridden by
environment variables::

    [supabase]
    url = "https://your-project.supabase.co"
    key = "your-anon-key"

    [cache]
    path = "local_data/school.db"

Environment overrides: SUPABASE_URL, SUPABASE_KEY, SCHOOL_CACHE_PATH,
SCHOOL_LOG_LEVEL.

Missing credentials are allowed; the data service then runs offline.
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import toml

from school_core.errors.exceptions import ConfigurationError
from school_core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SECRETS_PATH = Path(".streamlit") / "secrets.toml"
DEFAULT_CACHE_PATH = Path("local_data") / "school.db"


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for the data layer."""
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    cache_path: Path = DEFAULT_CACHE_PATH
    cache_namespace: str = "escola"
    log_level: str = "INFO"

    @property
    def has_remote(self) -> bool:
        """True when both Supabase credentials are present."""
        return bool(self.supabase_url and self.supabase_key)


def _read_secrets(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.debug(f"No secrets file at {path}")
        return {}
    try:
        return toml.load(path)
    except (toml.TomlDecodeError, OSError) as e:
        raise ConfigurationError(
            f"Could not read secrets file: {e}",
            source=str(path),
        ) from e


def load_settings(
    secrets_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Build Settings from the secrets file and the environment.

    Args:
        secrets_path: Path to secrets.toml (default: .streamlit/secrets.toml)
        environ: Environment mapping (default: os.environ)

    Returns:
        Settings instance

    Raises:
        ConfigurationError: If the secrets file exists but cannot be parsed
    """
    environ = os.environ if environ is None else environ
    secrets = _read_secrets(secrets_path or DEFAULT_SECRETS_PATH)

    supabase = secrets.get("supabase", {})
    cache = secrets.get("cache", {})

    url = environ.get("SUPABASE_URL") or supabase.get("url")
    key = environ.get("SUPABASE_KEY") or supabase.get("key")
    cache_path = environ.get("SCHOOL_CACHE_PATH") or cache.get("path")
    log_level = environ.get("SCHOOL_LOG_LEVEL") or secrets.get("log_level", "INFO")

    settings = Settings(
        supabase_url=url or None,
        supabase_key=key or None,
        cache_path=Path(cache_path) if cache_path else DEFAULT_CACHE_PATH,
        cache_namespace=cache.get("namespace", "escola"),
        log_level=str(log_level).upper(),
    )

    if not settings.has_remote:
        logger.warning("Supabase credentials not configured; running offline")

    return settings
