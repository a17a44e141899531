import logging
import os
import threading
from collections import defaultdict
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

# Base class for all models
Base = declarative_base()


class Database:
    """
    Owns the engine and the session factory for one database.

    Created once when the application starts (see the lifespan in app.main),
    stored on ``app.state.database`` and disposed at shutdown. Services never
    reach for a global engine: they receive a Session produced by this object.
    """

    def __init__(self, url: str, **engine_kwargs):
        if url.startswith("sqlite"):
            engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
        else:
            engine_kwargs.setdefault("pool_pre_ping", True)
        self.url = url
        self.engine: Engine = create_engine(url, **engine_kwargs)
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def session(self) -> Session:
        return self.session_factory()

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        logger.info("Disposing database engine")
        self.engine.dispose()


@contextmanager
def transactional(db: Session) -> Iterator[Session]:
    """
    A context manager for handling database transactions that is aware of the testing environment.

    In production, it commits or rolls back the transaction.
    In testing (TESTING=true), it only flushes the session, leaving the final
    commit/rollback to the test runner's transactional fixture.
    """
    is_test_mode = os.getenv("TESTING", "false").lower() == "true"

    if not is_test_mode:
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
    else:
        try:
            yield db
            db.flush()
        except Exception:
            db.rollback()
            raise


class SlotLockRegistry:
    """
    Process-wide locks keyed by schedule slot id.

    Every read-then-write on a slot's occupancy (booking, slot cancellation)
    holds the slot's lock for the whole transaction, commit included. Across
    processes the same sequences also take a ``SELECT ... FOR UPDATE`` row lock
    on the slot, which PostgreSQL honours and SQLite ignores.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = defaultdict(threading.Lock)

    def _lock_for(self, slot_id: int) -> threading.Lock:
        with self._guard:
            return self._locks[slot_id]

    @contextmanager
    def hold(self, slot_id: int) -> Iterator[None]:
        lock = self._lock_for(slot_id)
        with lock:
            yield


slot_locks = SlotLockRegistry()
