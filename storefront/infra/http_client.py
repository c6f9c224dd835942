"""
Transport HTTP vers l'API commerce (httpx asynchrone).
- create_http_client: client partagé, base_url = API_URL, timeout configurable.
- request_json: exécute une requête et normalise les échecs en ApiError.
- require_success: vérifie l'indicateur explicite `success` des enveloppes de réponse.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from storefront.config import API_URL, API_TIMEOUT
from storefront.errors import ApiError, ApiErrorKind

logger = logging.getLogger(__name__)


def create_http_client(
    base_url: str = API_URL,
    timeout: Optional[float] = API_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Construit le client httpx.AsyncClient utilisé par toutes les passerelles.
    - timeout=None: aucune limite (une requête bloquée laisse l'UI dans son état courant).
    - transport: injectable (ex: httpx.MockTransport en tests).
    """
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=httpx.Timeout(timeout),
        headers={"Accept": "application/json"},
        transport=transport,
    )


async def request_json(client: httpx.AsyncClient, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
    """
    Envoie la requête et retourne le corps JSON (dict).
    - Erreur de requête (connexion, timeout, décodage, redirections) => ApiError(NETWORK_FAILURE).
    - Statut non 2xx, corps non JSON ou non objet => ApiError(UNEXPECTED_RESPONSE).
    """
    endpoint = f"{method.upper()} {path}"
    try:
        response = await client.request(method, path, **kwargs)
    except httpx.RequestError as e:
        logger.warning("http.transport_error endpoint=%s error=%s", endpoint, e)
        raise ApiError(ApiErrorKind.NETWORK_FAILURE, str(e) or type(e).__name__, endpoint=endpoint) from e

    if not response.is_success:
        raise ApiError(
            ApiErrorKind.UNEXPECTED_RESPONSE,
            f"HTTP {response.status_code}",
            status_code=response.status_code,
            endpoint=endpoint,
        )
    try:
        body = response.json()
    except ValueError as e:
        raise ApiError(
            ApiErrorKind.UNEXPECTED_RESPONSE,
            "Corps de réponse non JSON",
            status_code=response.status_code,
            endpoint=endpoint,
        ) from e
    if not isinstance(body, dict):
        raise ApiError(
            ApiErrorKind.UNEXPECTED_RESPONSE,
            "Corps de réponse inattendu",
            status_code=response.status_code,
            endpoint=endpoint,
        )
    return body


def require_success(body: Dict[str, Any], endpoint: str) -> Dict[str, Any]:
    """`success` absent ou false => échec « doux », distinct d'une erreur de transport."""
    if body.get("success") is not True:
        raise ApiError(ApiErrorKind.UNEXPECTED_RESPONSE, "success absent ou false", endpoint=endpoint)
    return body
