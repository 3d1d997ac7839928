# =============================================================================
# school_core/ui/sync_status.py
# Sync Status Badge
# =============================================================================
"""
Read-only display of the sync status for Streamlit pages.
"""
from __future__ import annotations
from typing import Dict, Union

import streamlit as st

from school_core.offline.sync_coordinator import SyncStatus

SUCCESS_COLOR = "#22c55e"
WARNING_COLOR = "#f59e0b"
DANGER_COLOR = "#ef4444"

STATUS_BADGES: Dict[SyncStatus, Dict[str, str]] = {
    SyncStatus.SYNCED: {"icon": "☁️", "label": "Synced", "color": SUCCESS_COLOR},
    SyncStatus.SYNCING: {"icon": "🔄", "label": "Syncing...", "color": WARNING_COLOR},
    SyncStatus.ERROR: {"icon": "⚠️", "label": "Offline - saved locally", "color": DANGER_COLOR},
}


def status_badge(status: Union[SyncStatus, str]) -> Dict[str, str]:
    """Icon, label and color for a sync status (accepts the enum or its value)."""
    return dict(STATUS_BADGES[SyncStatus(status)])


def render_sync_status(service) -> None:
    """Render the sync badge plus pending/failed counters."""
    badge = status_badge(service.sync_status)
    status = service.get_status()

    st.markdown(
        f"""
        <div style="display:inline-flex;gap:.5rem;align-items:center;
                    padding:.35rem .8rem;border-radius:999px;
                    border:1px solid {badge['color']};color:{badge['color']};">
            <span>{badge['icon']}</span><strong>{badge['label']}</strong>
        </div>
        """,
        unsafe_allow_html=True,
    )

    if status["pending_sync"]:
        st.caption(f"{status['pending_sync']} item(s) only saved on this device")
    if status["sync"]["last_error"]:
        st.caption(f"Last error: {status['sync']['last_error']}")
