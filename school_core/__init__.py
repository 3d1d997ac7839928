# =============================================================================
# school_core/__init__.py
# School Registry - offline-first data layer
# =============================================================================
"""
School Registry core package.

Keeps one school profile plus its projects, class groups and teacher
assignments usable while Supabase is unreachable. See
``school_core.offline`` for the synchronization engine.
"""

__version__ = "0.3.0"
