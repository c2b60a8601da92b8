import os
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from sis_records.models import Base
from sis_records.utils.logging_config import get_logger

load_dotenv()

logger = get_logger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///local.db"
TIMEOUT_SECONDS = 120


def _register_error_logging(engine: Engine) -> None:
    """Log database errors before SQLAlchemy re-raises them."""

    @event.listens_for(engine, "handle_error")
    def _log_error(exc_ctx):
        err = getattr(exc_ctx, "original_exception", None)
        logger.error(f"Database error: {err}")


def get_engine(url: Optional[str] = None) -> Engine:
    url = url or os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
    kwargs = {"echo": False, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": TIMEOUT_SECONDS,
        }
        if ":memory:" not in url and url not in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = NullPool
    engine = create_engine(url, **kwargs)
    _register_error_logging(engine)
    logger.debug(f"Using database {engine.url.render_as_string(hide_password=True)}")
    return engine


def get_session_factory(engine: Optional[Engine] = None) -> sessionmaker:
    return sessionmaker(
        autocommit=False, autoflush=False, bind=engine or get_engine()
    )


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(engine)
    logger.info(f"Created {len(Base.metadata.tables)} tables")
