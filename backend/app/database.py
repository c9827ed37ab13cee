from contextlib import contextmanager
import logging
import time
from typing import Any, Dict, Generator

from sqlalchemy import create_engine, event, func, select, text
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from .config import settings

logging.basicConfig()
logger = logging.getLogger(__name__)
logger.setLevel(settings.LOG_LEVEL.upper())

DB_URL = getattr(settings, "db_url", None) or getattr(settings, "DATABASE_URL", None)
if not DB_URL:
    raise RuntimeError("DATABASE_URL is not configured")


def _engine_kwargs(url: str) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        return {"future": True, "connect_args": {"check_same_thread": False}}
    return {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "future": True,
        "connect_args": {"connect_timeout": 10, "options": "-c timezone=utc"},
    }


engine = create_engine(DB_URL, **_engine_kwargs(DB_URL))
if getattr(settings, "DEBUG", False):
    engine.echo = True

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)

Base = declarative_base()
Base.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


if engine.dialect.name == "postgresql":
    @event.listens_for(engine, "connect")
    def on_connect(dbapi_conn, _):
        cur = dbapi_conn.cursor()
        cur.execute("SET statement_timeout = '30s'")
        cur.close()

elif engine.dialect.name == "sqlite":
    @event.listens_for(engine, "connect")
    def enable_sqlite_fks(dbapi_conn, _):
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()


# --- the one request-scoped dependency, commits on success ---
def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_database():
    """Create the tables registered on Base.metadata (for local runs; prod uses Alembic)."""
    try:
        # models must be imported so they register on Base.metadata
        from backend.app import models  # noqa: F401

        logger.info("Creating tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("Database initialized")
        check_database_connection()
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise


def check_database_connection(attempts: int = 3, delay: float = 2.0) -> bool:
    for attempt in range(attempts):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1")).fetchone()
                logger.info("Database connection OK")
                return True
        except Exception as e:
            logger.warning(f"Database connection attempt {attempt+1}/{attempts} failed: {e}")
            if attempt + 1 < attempts:
                time.sleep(delay)
    logger.error("Could not connect to the database")
    return False


def get_database_stats(db: Session) -> Dict[str, int]:
    """Row counts per model table for the configured site."""
    from backend.app.models import Applicant, FinalSelection, Review, ReviewAssignment, Reviewer

    stats: Dict[str, int] = {}
    for model in (Applicant, Reviewer, Review, FinalSelection, ReviewAssignment):
        stats[model.__tablename__] = db.scalar(
            select(func.count()).select_from(model).where(model.site_name == settings.SITE_NAME)
        ) or 0
    return stats


__all__ = ["engine", "SessionLocal", "Base", "get_db", "get_db_session",
           "init_database", "check_database_connection", "get_database_stats"]
