from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class ListedKey:
    key: str
    metadata: dict = field(default_factory=dict)


class KeyValueStore(ABC):
    """Contrat minimal du store: bytes + métadonnées optionnelles + TTL.

    Toute panne du backend remonte en StoreUnavailable; une clé absente
    n'est jamais une erreur (None / no-op).
    """

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        ...

    @abstractmethod
    def put(self, key: str, value: bytes, metadata: Optional[dict] = None, ttl: Optional[int] = None) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def list(self, prefix: str) -> list[ListedKey]:
        ...

    @abstractmethod
    def ping(self) -> bool:
        ...
