# =============================================================================
# school_core/config/__init__.py
# =============================================================================

from .settings import Settings, load_settings, DEFAULT_SECRETS_PATH

__all__ = ["Settings", "load_settings", "DEFAULT_SECRETS_PATH"]
