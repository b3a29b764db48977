# database/connection.py
import logging
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from config.settings import settings
from database.base import Base

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or url.endswith(":memory:")


def make_engine(url: str):
    """create engine; sqlite needs check_same_thread off because handlers run in a threadpool"""
    kwargs = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_memory_sqlite(url):
            # one shared connection, otherwise every checkout sees an empty database
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# ---------- session ----------
def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ---------- bootstrap ----------
def import_models() -> None:
    # models must be imported before create_all
    from modules.security import model as _security_models  # noqa: F401
    from modules.employees import models as _employee_models  # noqa: F401
    from modules.goals import models as _goal_models  # noqa: F401
    from modules.performance import models as _performance_models  # noqa: F401
    from modules.competencies import models as _competency_models  # noqa: F401


def create_all_tables(bind=None) -> None:
    import_models()
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ensured")
