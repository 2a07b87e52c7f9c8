# aidoctor/database.py
import logging

from fastapi import HTTPException
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from . import config

logger = logging.getLogger(__name__)

engine = create_engine(config.DATABASE_URL, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()

SCHEMA_MISMATCH_MESSAGE = (
    "Database schema needs to be updated. Please run the pending migration."
)
# driver messages for a column the running code expects but the table lacks
SCHEMA_MISMATCH_MARKERS = ("unknown column", "no such column", "schema cache")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> None:
    """Create any missing tables. Existing tables are never altered."""
    from . import models  # noqa: F401  registers the mappers on Base

    Base.metadata.create_all(bind=bind or engine)


def is_schema_mismatch(exc: Exception) -> bool:
    msg = str(getattr(exc, "orig", None) or exc).lower()
    return any(marker in msg for marker in SCHEMA_MISMATCH_MARKERS)


def commit_or_raise(db: Session, action: str) -> None:
    """Commit the session; on failure roll back and turn the error into a 500."""
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to %s: %s", action, exc)
        if is_schema_mismatch(exc):
            raise HTTPException(status_code=500, detail=SCHEMA_MISMATCH_MESSAGE) from exc
        raise HTTPException(status_code=500, detail=f"Failed to {action}: {exc}") from exc
