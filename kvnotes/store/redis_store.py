import json

import redis

from kvnotes.common.errors import StoreUnavailable
from kvnotes.store.base import KeyValueStore, ListedKey


class RedisStore(KeyValueStore):
    """Backend Redis: un hash par clé (champs ``value`` et ``meta``), TTL natif."""

    def __init__(self, client: redis.Redis, namespace: str = ""):
        self.client = client
        self.namespace = namespace

    @classmethod
    def from_url(cls, url: str, namespace: str = "", socket_timeout: float = 2.0):
        client = redis.Redis.from_url(url, socket_timeout=socket_timeout)
        return cls(client, namespace=namespace)

    def _k(self, key: str) -> str:
        return f"{self.namespace}{key}"

    def get(self, key):
        try:
            return self.client.hget(self._k(key), "value")
        except redis.RedisError as e:
            raise StoreUnavailable() from e

    def put(self, key, value, metadata=None, ttl=None):
        name = self._k(key)
        mapping = {"value": value, "meta": json.dumps(metadata or {})}
        try:
            pipe = self.client.pipeline()
            pipe.delete(name)
            pipe.hset(name, mapping=mapping)
            if ttl:
                pipe.expire(name, int(ttl))
            pipe.execute()
        except redis.RedisError as e:
            raise StoreUnavailable() from e

    def delete(self, key):
        try:
            self.client.delete(self._k(key))
        except redis.RedisError as e:
            raise StoreUnavailable() from e

    def list(self, prefix):
        # Les métas sont lues dans un seul pipeline après le SCAN
        try:
            names = list(self.client.scan_iter(match=f"{self._k(prefix)}*"))
            pipe = self.client.pipeline()
            for name in names:
                pipe.hget(name, "meta")
            metas = pipe.execute()
        except redis.RedisError as e:
            raise StoreUnavailable() from e

        listed = []
        offset = len(self.namespace)
        for name, raw in zip(names, metas):
            if raw is None:
                # clé expirée entre le SCAN et le HGET
                continue
            if isinstance(name, bytes):
                name = name.decode("utf-8")
            listed.append(ListedKey(key=name[offset:], metadata=json.loads(raw)))
        return listed

    def ping(self):
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False
