"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Client httpx vers l'API commerce (fermé à l'arrêt s'il a été créé ici).
- Backend de stockage durable (mémoire ou Redis) avec options de test (fakeredis).
- FastAPILimiter (Redis) pour le checkout, sinon fenêtre locale en mémoire.
- Variables d'environnement supportées:
  - STOREFRONT_STORAGE=memory|redis
  - RATE_LIMIT_REDIS_URL: Redis du rate limiting (par défaut celui du stockage si redis)
  - USE_FAKE_REDIS_FOR_TESTS=1: utilise fakeredis au lieu d'un vrai serveur
"""
import os
import logging
from contextlib import asynccontextmanager

import redis
import redis.asyncio as aioredis
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from storefront.config import RATE_LIMIT_REDIS_URL, STORAGE_BACKEND, STORAGE_REDIS_URL
from storefront.infra.http_client import create_http_client
from storefront.infra.storage import MemoryStorage, create_storage_backend

try:
    from fakeredis import FakeRedis  # tests only
    from fakeredis.aioredis import FakeRedis as AsyncFakeRedis
except ImportError:
    FakeRedis = None
    AsyncFakeRedis = None


def _use_fake_redis() -> bool:
    use_fake = os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1"
    if use_fake and not FakeRedis:
        raise RuntimeError("USE_FAKE_REDIS_FOR_TESTS=1 mais fakeredis n'est pas installé.")
    return use_fake


def _init_storage(logger: logging.Logger):
    if STORAGE_BACKEND != "redis":
        return create_storage_backend(STORAGE_BACKEND)

    if _use_fake_redis():
        return create_storage_backend("redis", redis_client=FakeRedis(decode_responses=True))

    client = redis.from_url(STORAGE_REDIS_URL, encoding="utf-8", decode_responses=True)
    try:
        client.ping()
    except redis.RedisError as e:
        # Sans Redis, les checkouts en attente ne survivent pas au redémarrage de l'hôte
        logger.warning(f"Storage falling back to in-memory due to Redis error: {e}")
        return MemoryStorage()
    return create_storage_backend("redis", redis_client=client)


async def _init_rate_limiter(app: FastAPI, logger: logging.Logger) -> None:
    """
    app.state.rate_limit_backend = "redis" si FastAPILimiter est prêt, sinon "memory".
    Un échec d'init Redis ne bloque pas le démarrage: repli local journalisé.
    """
    app.state.rate_limit_backend = "memory"
    use_fake = _use_fake_redis()
    if not (use_fake or RATE_LIMIT_REDIS_URL):
        logger.info("Rate limiting local (in-memory)")
        return

    if use_fake:
        r = AsyncFakeRedis(decode_responses=True)
    else:
        r = aioredis.from_url(RATE_LIMIT_REDIS_URL, encoding="utf-8", decode_responses=True)
    try:
        await FastAPILimiter.init(r)
    except redis.RedisError as e:
        logger.warning(f"Rate limiting falling back to local in-memory due to init error: {e}")
        return
    app.state.rate_limit_backend = "redis"
    logger.info("Rate limiting enabled backend=redis")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Prépare app.state.http_client, app.state.storage et le rate limiting.
    Un client/stockage déjà posé sur app.state (tests) est réutilisé tel quel.
    """
    logger = logging.getLogger("uvicorn.error")

    owns_client = getattr(app.state, "http_client", None) is None
    if owns_client:
        app.state.http_client = create_http_client()
    if getattr(app.state, "storage", None) is None:
        app.state.storage = _init_storage(logger)
    await _init_rate_limiter(app, logger)
    logger.info("Storefront ready api=%s storage=%s", app.state.http_client.base_url, type(app.state.storage).__name__)

    yield

    if app.state.rate_limit_backend == "redis":
        await FastAPILimiter.close()
        FastAPILimiter.redis = None
        app.state.rate_limit_backend = "memory"
    if owns_client:
        await app.state.http_client.aclose()
        app.state.http_client = None
