from flask import current_app

from kvnotes.store.base import KeyValueStore, ListedKey


def init_store(app) -> KeyValueStore:
    """Instancie le backend choisi par KV_BACKEND et l'attache à l'app."""
    backend = app.config.get("KV_BACKEND", "sql")
    if backend == "redis":
        from kvnotes.store.redis_store import RedisStore
        store = RedisStore.from_url(
            app.config["KV_REDIS_URL"],
            namespace=app.config.get("KV_KEY_PREFIX", ""),
            socket_timeout=app.config.get("KV_SOCKET_TIMEOUT", 2.0),
        )
    elif backend == "sql":
        from kvnotes.store.sql_store import SqlStore
        store = SqlStore()
    else:
        raise RuntimeError(f"Unknown KV_BACKEND: {backend!r}")

    app.extensions["kv_store"] = store
    return store


def get_store() -> KeyValueStore:
    return current_app.extensions["kv_store"]


__all__ = ["KeyValueStore", "ListedKey", "init_store", "get_store"]
