"""
Lecture du catalogue (GET /api/products).
Collaborateur externe du panier: ni filtre, ni recherche, ni tri ici.
Un échec est terminal pour la vue catalogue (l'appelant affiche un état d'erreur).
"""
import logging
from typing import List

import httpx
from pydantic import ValidationError

from storefront.errors import ApiError, ApiErrorKind
from storefront.infra.http_client import request_json, require_success
from .models import ProductView, ProductsResponse

logger = logging.getLogger(__name__)

PRODUCTS_PATH = "/api/products"


class CatalogClient:
    def __init__(self, http: httpx.AsyncClient):
        self._http = http

    async def fetch_products(self) -> List[ProductView]:
        endpoint = f"GET {PRODUCTS_PATH}"
        body = await request_json(self._http, "GET", PRODUCTS_PATH)
        require_success(body, endpoint)
        try:
            products = ProductsResponse.model_validate(body).products
        except ValidationError as e:
            raise ApiError(ApiErrorKind.UNEXPECTED_RESPONSE, "Catalogue invalide", endpoint=endpoint) from e
        logger.info("catalog.fetch count=%s", len(products))
        return products
