"""
Gestionnaires d'exceptions de l'hôte storefront.
- Les vues convertissent déjà les erreurs attendues en HTTPException (message utilisateur).
- Filet de sécurité: toute StorefrontError non traitée devient un JSON 502
  (la dépendance en échec est l'API commerce, pas cet hôte).
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_502_BAD_GATEWAY

from storefront.errors import ApiError, StorefrontError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError):
        logger.warning("storefront.error path=%s error=%s", request.url.path, exc)
        content = {"detail": str(exc)}
        if isinstance(exc, ApiError):
            content["kind"] = exc.kind.value
        return JSONResponse(status_code=HTTP_502_BAD_GATEWAY, content=content)
