"""Database connection and initialization."""

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, Session, create_engine

from capsule.config import settings

# Import all models so SQLModel registers them
import capsule.models  # noqa: F401


def create_db_engine(url: str | None = None, echo: bool = False) -> Engine:
    """Build an engine for the given URL (defaults to the configured store)."""
    url = url or settings.sqlalchemy_url
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": settings.db_busy_timeout}
    return create_engine(url, echo=echo, connect_args=connect_args)


engine = create_db_engine(echo=settings.debug)


def init_db(bind: Engine | None = None) -> None:
    """Create all tables and enable WAL mode on SQLite."""
    bind = bind or engine
    SQLModel.metadata.create_all(bind)

    if bind.dialect.name == "sqlite":
        # WAL keeps readers from blocking the single writer
        with bind.connect() as conn:
            conn.exec_driver_sql("PRAGMA journal_mode=WAL")
            conn.exec_driver_sql("PRAGMA synchronous=NORMAL")
            conn.commit()


def get_session():
    """Request-scoped session; closed when the response is sent."""
    with Session(engine) as session:
        yield session
