"""String-keyed blob backends behind the record store.

Every backend exposes ``get(key) -> str | None``, ``set(key, value)`` and
``delete(key)``. Failures from the underlying library are re-raised as
``StoreBackendError`` so the store only has one error type to handle.
"""
import logging

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class StoreBackendError(Exception):
    pass


class MemoryBackend:
    def __init__(self):
        self._data = {}

    def get(self, key):
        return self._data.get(key)

    def set(self, key, value):
        self._data[key] = value

    def delete(self, key):
        self._data.pop(key, None)


class NullBackend:
    """No persistence available: reads are empty, writes are dropped."""

    def get(self, key):
        return None

    def set(self, key, value):
        logger.debug("no store backend configured; dropping write to %s", key)

    def delete(self, key):
        pass


class RedisBackend:
    def __init__(self, client, prefix=""):
        self.client = client
        self.prefix = prefix or ""

    def _k(self, key):
        return f"{self.prefix}{key}"

    def get(self, key):
        try:
            raw = self.client.get(self._k(key))
        except RedisError as e:
            raise StoreBackendError(f"redis get {key} failed: {e}") from e
        if raw is None:
            return None
        return raw.decode("utf-8") if isinstance(raw, bytes) else raw

    def set(self, key, value):
        try:
            self.client.set(self._k(key), value)
        except RedisError as e:
            raise StoreBackendError(f"redis set {key} failed: {e}") from e

    def delete(self, key):
        try:
            self.client.delete(self._k(key))
        except RedisError as e:
            raise StoreBackendError(f"redis delete {key} failed: {e}") from e


class SqlBackend:
    """Keeps each blob in the ``store_entries`` table. Needs an app context."""

    def __init__(self, db, prefix=""):
        self.db = db
        self.prefix = prefix or ""

    def _k(self, key):
        return f"{self.prefix}{key}"

    def get(self, key):
        from ..models.store_entry import StoreEntry
        try:
            row = self.db.session.get(StoreEntry, self._k(key))
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise StoreBackendError(f"sql get {key} failed: {e}") from e
        return row.value if row else None

    def set(self, key, value):
        from ..models.store_entry import StoreEntry
        try:
            row = self.db.session.get(StoreEntry, self._k(key))
            if row is None:
                row = StoreEntry(key=self._k(key), value=value)
            else:
                row.value = value
            self.db.session.add(row)
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise StoreBackendError(f"sql set {key} failed: {e}") from e

    def delete(self, key):
        from ..models.store_entry import StoreEntry
        try:
            row = self.db.session.get(StoreEntry, self._k(key))
            if row is not None:
                self.db.session.delete(row)
                self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise StoreBackendError(f"sql delete {key} failed: {e}") from e
