# =============================================================================
# school_core/ui/__init__.py
# =============================================================================

from .sync_status import STATUS_BADGES, status_badge, render_sync_status

__all__ = ["STATUS_BADGES", "status_badge", "render_sync_status"]
