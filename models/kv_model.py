import logging
import threading
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from errors import PersistenceFailure
from models import db

logger = logging.getLogger(__name__)

LOCK_STRIPES = 64


class KeyValue(db.Model):
    __tablename__ = "kv_store"

    key = db.Column(db.String(255), primary_key=True)
    value = db.Column(db.JSON, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<KeyValue {self.key}>"


class KeyValueStore:
    """Generic get / set / get-by-prefix storage on top of the kv_store table.

    Values are JSON-able dicts. Every ``set`` is committed on its own, so a
    write either lands completely or not at all. ``locked(key)`` serialises
    read-modify-write cycles on one key inside this process.
    """

    def __init__(self, lock_timeout=5.0):
        self.lock_timeout = lock_timeout
        self._stripes = [threading.Lock() for _ in range(LOCK_STRIPES)]

    def get(self, key):
        try:
            row = db.session.get(KeyValue, key)
        except SQLAlchemyError as e:
            self._fail("get", key, e)
        return dict(row.value) if row is not None else None

    def exists(self, key):
        return self.get(key) is not None

    def set(self, key, value):
        try:
            row = db.session.get(KeyValue, key)
            if row is None:
                db.session.add(KeyValue(key=key, value=value))
            else:
                row.value = value
            db.session.commit()
        except SQLAlchemyError as e:
            self._fail("set", key, e)

    def get_by_prefix(self, prefix):
        try:
            rows = (
                KeyValue.query
                .filter(KeyValue.key.startswith(prefix, autoescape=True))
                .order_by(KeyValue.key)
                .all()
            )
        except SQLAlchemyError as e:
            self._fail("get_by_prefix", prefix, e)
        return [dict(r.value) for r in rows]

    @contextmanager
    def locked(self, key, timeout=None):
        lock = self._stripes[hash(key) % LOCK_STRIPES]
        timeout = self.lock_timeout if timeout is None else timeout
        if not lock.acquire(timeout=timeout):
            logger.error("Timed out after %ss waiting for lock on %s", timeout, key)
            raise PersistenceFailure(f"Timed out waiting for {key}")
        try:
            yield
        finally:
            lock.release()

    def _fail(self, op, key, error):
        logger.exception("kv %s failed for %s", op, key)
        db.session.rollback()
        raise PersistenceFailure() from error
