"""
LLM Check Database Layer

Usage:
    from llmcheck.database import init_db, get_db_context, VisibilityStore

    # Initialize database
    init_db()

    with get_db_context() as db:
        store = VisibilityStore(db)
        store.save_scan(url, industry, found, total, results)
        history = store.get_scan_history(url)
"""

# Models
from .models import (
    Base,
    VisibilityScan,
    VisibilityResultRow,
)

# Session management
from .session import (
    get_database_url,
    create_db_engine,
    get_engine,
    get_db,
    get_db_context,
    init_db,
    check_db_connection,
)

# Repository
from .repository import (
    VISIBILITY_CACHE_MAX_AGE_HOURS,
    VisibilityStore,
)

__all__ = [
    # Models
    "Base",
    "VisibilityScan",
    "VisibilityResultRow",
    # Session
    "get_database_url",
    "create_db_engine",
    "get_engine",
    "get_db",
    "get_db_context",
    "init_db",
    "check_db_connection",
    # Repository
    "VISIBILITY_CACHE_MAX_AGE_HOURS",
    "VisibilityStore",
]
