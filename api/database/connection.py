"""
Execution store engine and sessions
"""
from pathlib import Path
from typing import Optional
import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import settings
from .models import Base

logger = logging.getLogger(__name__)

IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def get_engine(db_url: Optional[str] = None) -> Engine:
    """
    Engine for the execution store.

    In-memory SQLite keeps a single connection (StaticPool) so every worker
    thread sees the same tables.
    """
    db_url = db_url or settings.DATABASE_URL

    if db_url in IN_MEMORY_URLS:
        return create_engine(db_url, connect_args={"check_same_thread": False}, poolclass=StaticPool)

    if db_url.startswith("sqlite:///"):
        Path(db_url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(db_url, connect_args={"check_same_thread": False})

    return create_engine(db_url)


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


engine = get_engine()
SessionLocal = make_session_factory(engine)


def init_db(bind: Optional[Engine] = None) -> None:
    """Create the executions table if it doesn't exist"""
    bind = bind or engine
    logger.info(f"Initializing execution store: {bind.url}")
    Base.metadata.create_all(bind=bind)
    logger.info("✅ Execution store ready")

