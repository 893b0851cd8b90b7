import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from fintrack.core.config import settings
from fintrack.core.errors import InternalError

log = logging.getLogger(__name__)


def make_engine(url: str, **kw) -> Engine:
    if url.startswith("sqlite"):
        kw.setdefault("connect_args", {"check_same_thread": False, "timeout": 30})
        eng = create_engine(url, future=True, **kw)
        _take_write_lock_on_begin(eng)
        return eng
    return create_engine(url, future=True, pool_pre_ping=True, **kw)


def _take_write_lock_on_begin(eng: Engine) -> None:
    # SQLite has no row locks. BEGIN IMMEDIATE takes the database write lock
    # up front so concurrent units of work queue behind each other instead of
    # failing on a deferred lock upgrade.
    @event.listens_for(eng, "connect")
    def _on_connect(dbapi_conn, _record):
        dbapi_conn.isolation_level = None
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()

    @event.listens_for(eng, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def make_sessionmaker(eng: Engine) -> sessionmaker:
    return sessionmaker(bind=eng, autoflush=False, expire_on_commit=False, future=True)


engine = make_engine(settings.database_url)
SessionLocal = make_sessionmaker(engine)


@contextmanager
def unit_of_work(s: Session) -> Iterator[Session]:
    """Run the enclosed reads and writes as one all-or-nothing transaction.

    Commits when the block exits cleanly. Any exception rolls everything back;
    store errors are re-raised as an opaque ``InternalError``.
    """
    try:
        if s.get_bind().dialect.name == "postgresql":
            s.execute(text(f"SET LOCAL lock_timeout = {int(settings.lock_timeout_ms)}"))
        yield s
        s.commit()
    except SQLAlchemyError as e:
        s.rollback()
        log.exception("unit of work rolled back")
        raise InternalError() from e
    except Exception:
        s.rollback()
        raise
