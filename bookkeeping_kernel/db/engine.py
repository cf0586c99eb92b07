"""
Module: bookkeeping_kernel.db.engine
Responsibility: One SQLAlchemy engine and session factory per ledger
    database, plus the transactional scope SqlAlchemyGateway writes through.
Architecture position: Kernel > DB.  May import from db/base.py and
    db/models.py.  MUST NOT import from store/, services/ or outer layers.

Invariants enforced:
    - Every write runs inside ``LedgerDatabase.session_scope()``: commit on
      normal exit, rollback on any exception.  A collection save is
      therefore atomic.
    - Each ``LedgerDatabase`` owns its engine; two ledgers on two URLs in
      one process never share a connection pool.
    - Works against SQLite (the default) and any other SQLAlchemy dialect;
      only the URL changes.

Failure modes:
    - RuntimeError from ``session_scope`` after ``close()``.
    - SQLAlchemyError propagates from ``session_scope`` after rollback;
      the gateway wraps it in PersistenceError.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from bookkeeping_kernel.db import models  # noqa: F401  (registers tables)
from bookkeeping_kernel.db.base import LedgerTable
from bookkeeping_kernel.logging_config import get_logger

logger = get_logger("db.engine")


class LedgerDatabase:
    """Engine, session factory and schema for one database URL."""

    def __init__(self, database_url: str, echo: bool = False):
        self.url = database_url
        self._engine: Engine | None = create_engine(database_url, echo=echo, pool_pre_ping=True)
        self._sessions = sessionmaker(bind=self._engine, expire_on_commit=False)
        logger.info(
            "engine_initialized",
            extra={"dialect": self._engine.dialect.name, "echo": echo},
        )

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError(f"Database {self.url} has been closed")
        return self._engine

    def create_tables(self) -> None:
        """Create the ledger tables if they do not exist."""
        LedgerTable.metadata.create_all(self.engine)
        logger.info("tables_created", extra={"tables": sorted(LedgerTable.metadata.tables)})

    def drop_tables(self) -> None:
        LedgerTable.metadata.drop_all(self.engine)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Commit on success, roll back and re-raise on any exception."""
        session = self._sessions(bind=self.engine)
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            logger.warning("transaction_rolled_back", extra={"url": self.url}, exc_info=True)
            raise
        finally:
            session.close()

    def close(self) -> None:
        """Dispose the connection pool.  Idempotent."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            logger.debug("engine_disposed", extra={"url": self.url})
