"""
Dépendances FastAPI: un StorefrontShell par requête (= un chargement de page),
partageant le client httpx de l'application et le stockage durable du client.
"""
import secrets

import httpx
from fastapi import Depends, Request

from storefront.infra.storage import KeyValueStore, client_storage
from storefront.payments import RedirectNavigator
from storefront.shell import StorefrontShell

CLIENT_ID_SESSION_KEY = "storefront_client_id"


def get_client_id(request: Request) -> str:
    client_id = request.session.get(CLIENT_ID_SESSION_KEY)
    if not client_id:
        client_id = secrets.token_urlsafe(16)
        request.session[CLIENT_ID_SESSION_KEY] = client_id
    return client_id


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_storage(request: Request, client_id: str = Depends(get_client_id)) -> KeyValueStore:
    return client_storage(request.app.state.storage, client_id)


def get_shell(
    http: httpx.AsyncClient = Depends(get_http_client),
    storage: KeyValueStore = Depends(get_storage),
) -> StorefrontShell:
    return StorefrontShell(http, storage, RedirectNavigator())
