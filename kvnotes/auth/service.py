import hashlib
import hmac
import uuid
from dataclasses import dataclass
from typing import Optional

from kvnotes.store.base import KeyValueStore

SESSION_PREFIX = "session:"
SESSION_TTL = 60 * 60 * 24  # 24 h
SESSION_MARKER = b"valid"
LOGIN_URL = "/admin/login"


def compare_secret(provided: str, expected: str) -> bool:
    """Comparaison en temps constant du secret admin.

    Les deux entrées sont hachées (SHA-256) avant compare_digest: le travail
    ne dépend ni de la position de la première différence ni des longueurs.
    """
    a = (provided or "").encode("utf-8")
    b = (expected or "").encode("utf-8")
    digests_match = hmac.compare_digest(hashlib.sha256(a).digest(), hashlib.sha256(b).digest())
    same_length = len(a) == len(b)
    return digests_match and same_length


@dataclass(frozen=True)
class AuthDecision:
    allowed: bool
    login_url: Optional[str] = None


class SessionManager:
    def __init__(self, store: KeyValueStore, ttl: int = SESSION_TTL):
        self.store = store
        self.ttl = ttl

    @staticmethod
    def _key(token: str) -> str:
        return f"{SESSION_PREFIX}{token}"

    def issue(self) -> str:
        token = str(uuid.uuid4())
        # l'expiration est portée par le TTL du store
        self.store.put(self._key(token), SESSION_MARKER, ttl=self.ttl)
        return token

    def validate(self, token: Optional[str]) -> bool:
        if not token:
            return False
        return self.store.get(self._key(token)) == SESSION_MARKER

    def revoke(self, token: Optional[str]) -> None:
        # idempotent
        if token:
            self.store.delete(self._key(token))

    def authorize(self, token: Optional[str]) -> AuthDecision:
        if not self.validate(token):
            return AuthDecision(allowed=False, login_url=LOGIN_URL)
        return AuthDecision(allowed=True)
