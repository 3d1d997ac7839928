from __future__ import annotations
import streamlit as st

from school_core.config import load_settings
from school_core.errors import ErrorContext
from school_core.logging import setup_logging
from school_core.offline import get_data_service
from school_core.ui import render_sync_status

# ============================================================================
# PAGE CONFIGURATION
# ============================================================================
st.set_page_config(
    page_title="School Registry",
    page_icon="🏫",
    layout="wide",
)


@st.cache_resource
def _service():
    settings = load_settings()
    setup_logging(settings.log_level)
    return get_data_service(settings)


service = _service()
profile = service.profile

# ============================================================================
# HEADER
# ============================================================================
st.title(f"🏫 {profile.name or 'School Registry'}")
if profile.inep_code:
    st.caption(f"INEP {profile.inep_code} · {profile.address.city} {profile.address.state}")

col_status, col_reload = st.columns([4, 1])
with col_status:
    render_sync_status(service)
with col_reload:
    if st.button("Reload", use_container_width=True):
        with ErrorContext("Reloading school data"):
            service.reload()
        st.rerun()

# ============================================================================
# COLLECTIONS (read-only)
# ============================================================================
tab_projects, tab_groups, tab_assignments = st.tabs(
    ["Projects", "Class groups", "Assignments"]
)

with tab_projects:
    st.dataframe(service.to_dataframe("projects"), use_container_width=True, hide_index=True)

with tab_groups:
    st.dataframe(service.to_dataframe("class_groups"), use_container_width=True, hide_index=True)

with tab_assignments:
    st.dataframe(service.to_dataframe("assignments"), use_container_width=True, hide_index=True)
