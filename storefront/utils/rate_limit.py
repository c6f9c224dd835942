from typing import Any, Dict
from fastapi import Request, Response, HTTPException
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
import hashlib
import logging
import os
import time

import redis

from storefront.web.dependencies import CLIENT_ID_SESSION_KEY

logger = logging.getLogger(__name__)


def _client_key_from_request(req: Request) -> str:
    # Priorité: identifiant client de session (hashé) puis IP
    client_id = req.session.get(CLIENT_ID_SESSION_KEY) if "session" in req.scope else None
    path = req.url.path
    if client_id:
        h = hashlib.sha256(client_id.encode("utf-8")).hexdigest()[:16]
        return f"client:{h}:{path}"
    ip = req.client.host if req.client else "local"
    return f"ip:{ip}:{path}"


def _redis_ready(request: Request) -> bool:
    return (
        getattr(request.app.state, "rate_limit_backend", "memory") == "redis"
        and getattr(FastAPILimiter, "redis", None) is not None
    )


def _local_hit(request: Request, times: int, seconds: int) -> None:
    """
    Fenêtre glissante en mémoire.
    Chaque entrée garde sa propre fenêtre; les clés sans hit récent sont évincées à chaque passage.
    """
    now = time.time()
    key = _client_key_from_request(request)
    store = getattr(request.app.state, "_rl_store", None)
    if store is None:
        store = request.app.state._rl_store = {}

    for k in [k for k, (window, hits) in store.items() if not hits or now - hits[-1] >= window]:
        del store[k]

    _, previous = store.get(key, (seconds, []))
    hits = [t for t in previous if now - t < seconds]
    if len(hits) >= times:
        raise HTTPException(status_code=429, detail="Too Many Requests")
    hits.append(now)
    store[key] = (seconds, hits)


def optional_rate_limit(times: int, seconds: int):
    """
    Limiteur du checkout.
    - Redis prêt (lifespan): fastapi-limiter, partagé entre workers.
    - Sinon, ou si Redis échoue en cours de route: fenêtre glissante locale en mémoire.
    Désactivable via LOCAL_RATE_LIMIT_DISABLED=1 ou app.state.rate_limit_enabled = False.
    """
    async def _identifier(req: Request) -> str:
        return _client_key_from_request(req)

    limiter = RateLimiter(times=times, seconds=seconds, identifier=_identifier)

    async def _dep(request: Request, response: Response):
        if os.getenv("LOCAL_RATE_LIMIT_DISABLED") == "1":
            return
        if getattr(request.app.state, "rate_limit_enabled", None) is False:
            return

        if _redis_ready(request):
            try:
                return await limiter(request, response)
            except redis.RedisError as e:
                logger.warning("rate_limit.redis failed, local fallback path=%s error=%s", request.url.path, e)
        _local_hit(request, times, seconds)
    return _dep


def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    enabled = getattr(request.app.state, "rate_limit_enabled", None)
    store = getattr(request.app.state, "_rl_store", None) or {}
    return {
        "enabled": os.getenv("LOCAL_RATE_LIMIT_DISABLED") != "1" and enabled is not False,
        "backend": "redis" if _redis_ready(request) else "memory",
        "tracked_keys": len(store),
    }
