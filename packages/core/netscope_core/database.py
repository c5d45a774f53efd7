"""Database configuration with SQLAlchemy 2.x.

One engine is created per process and shared by every graph store built
from settings; pass an explicit engine to the store in tests.
"""

from netscope_core.settings import Settings, get_settings
from sqlalchemy import Engine, create_engine

# Global engine
_engine: Engine | None = None


def get_engine(settings: Settings | None = None) -> Engine:
    """Get or create the database engine."""
    global _engine
    if _engine is None:
        settings = settings or get_settings()
        if not settings.database_url:
            raise RuntimeError("DATABASE_URL environment variable is not set")
        _engine = create_engine(
            settings.database_url,
            echo=settings.debug,
            pool_pre_ping=True,
        )
    return _engine


def close_engine() -> None:
    """Close the database engine."""
    global _engine
    if _engine is not None:
        _engine.dispose()
        _engine = None
