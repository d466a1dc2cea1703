from flask_sqlalchemy import SQLAlchemy
from flask_wtf import CSRFProtect
from redis import Redis
from redis.exceptions import RedisError
from flask import current_app


class RecordStoreWrapper:
    """Builds the app's RecordStore from ``STORE_BACKEND`` and keeps it on
    ``app.extensions['record_store']``."""

    def init_app(self, app):
        from .services.backends import MemoryBackend, NullBackend, RedisBackend, SqlBackend
        from .services.record_store import RecordStore

        kind = (app.config.get("STORE_BACKEND") or "sql").lower()
        prefix = app.config.get("STORE_KEY_PREFIX") or ""
        if kind == "redis":
            try:
                client = Redis.from_url(app.config.get("REDIS_URL"))
                client.ping()
                backend = RedisBackend(client, prefix=prefix)
            except RedisError:
                # no redis on this machine: keep the app usable with a process-local store
                app.logger.exception('Redis store init failed, falling back to in-memory store')
                backend = MemoryBackend()
        elif kind == "sql":
            backend = SqlBackend(db, prefix=prefix)
        elif kind == "memory":
            backend = MemoryBackend()
        elif kind == "none":
            backend = NullBackend()
        else:
            raise ValueError(f"Unknown STORE_BACKEND: {kind}")
        app.extensions["record_store"] = RecordStore(backend)

    @property
    def store(self):
        return current_app.extensions["record_store"]


db = SQLAlchemy()
csrf = CSRFProtect()
records = RecordStoreWrapper()
