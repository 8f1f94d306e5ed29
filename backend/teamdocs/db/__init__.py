from teamdocs.db.base import Base, CreatedAtMixin, IDMixin, TimestampMixin, ensure_aware, utcnow
from teamdocs.db.session import SessionLocal, engine, get_db, session_scope

__all__ = [
    "Base",
    "CreatedAtMixin",
    "IDMixin",
    "TimestampMixin",
    "ensure_aware",
    "utcnow",
    "engine",
    "SessionLocal",
    "get_db",
    "session_scope",
]
