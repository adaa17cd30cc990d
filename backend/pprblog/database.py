"""Database engine and session management."""
from collections.abc import Generator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def utcnow() -> datetime:
    """Current time as a naive UTC datetime (what SQLite hands back)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for ``database_url``.

    In-memory SQLite gets a StaticPool so every session shares one database.
    File-backed SQLite gets its parent directory created.
    """
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(database_url, echo=echo, pool_pre_ping=True)

    # SQLite requires check_same_thread=False for FastAPI
    connect_args = {"check_same_thread": False}
    if url.database in (None, "", ":memory:"):
        return create_engine(
            database_url,
            connect_args=connect_args,
            poolclass=StaticPool,
            echo=echo,
        )

    Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(database_url, connect_args=connect_args, echo=echo)


def build_session_factory(engine: Engine) -> sessionmaker:
    # expire_on_commit=False keeps loaded attributes readable after the scope closes
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    """Transactional scope: commit on success, rollback and re-raise on error."""
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
