"""
Stockage clé/valeur durable côté client (équivalent du stockage navigateur).
Contrat minimal: get / set / delete sur des chaînes. Permet de tester la
réconciliation sans vrai navigateur ni vrai Redis.
"""
from typing import Dict, Optional, Protocol

import redis

from storefront.config import STORAGE_BACKEND, STORAGE_REDIS_URL, STORAGE_KEY_PREFIX


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStorage:
    """Stockage en mémoire du processus (dev, tests)."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data.keys())


class RedisStorage:
    """
    Stockage Redis (survit au redémarrage du processus hôte).
    Le client doit être créé avec decode_responses=True.
    """

    def __init__(self, client: "redis.Redis"):
        self._client = client

    def get(self, key: str) -> Optional[str]:
        return self._client.get(key)

    def set(self, key: str, value: str) -> None:
        self._client.set(key, str(value))

    def delete(self, key: str) -> None:
        self._client.delete(key)


class NamespacedStorage:
    """Préfixe les clés par client (un navigateur = un espace de noms)."""

    def __init__(self, backend: KeyValueStore, namespace: str):
        self._backend = backend
        self._prefix = f"{namespace}:"

    def get(self, key: str) -> Optional[str]:
        return self._backend.get(self._prefix + key)

    def set(self, key: str, value: str) -> None:
        self._backend.set(self._prefix + key, value)

    def delete(self, key: str) -> None:
        self._backend.delete(self._prefix + key)


def create_storage_backend(kind: str = STORAGE_BACKEND, redis_url: str = STORAGE_REDIS_URL, redis_client=None) -> KeyValueStore:
    """
    Fabrique du backend de stockage selon la configuration.
    - "memory": MemoryStorage
    - "redis": RedisStorage (redis_client injectable, ex: fakeredis en tests)
    """
    if kind == "memory":
        return MemoryStorage()
    if kind == "redis":
        client = redis_client or redis.from_url(redis_url, encoding="utf-8", decode_responses=True)
        return RedisStorage(client)
    raise ValueError(f"STOREFRONT_STORAGE inconnu: {kind!r}")


def client_storage(backend: KeyValueStore, client_id: str) -> NamespacedStorage:
    return NamespacedStorage(backend, f"{STORAGE_KEY_PREFIX}:{client_id}")
