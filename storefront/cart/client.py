"""
Passerelle typée panier <-> API commerce.
Traduit les intentions (lire, ajouter, retirer, vider) en appels HTTP et
normalise les réponses. Seules les réponses confirmées mettent à jour le CartStore.
"""
import logging

import httpx
from pydantic import ValidationError

from storefront.errors import ApiError, ApiErrorKind
from storefront.infra.http_client import request_json, require_success
from .models import Cart, CartResponse, ProductId
from .store import CartStore

logger = logging.getLogger(__name__)

CART_PATH = "/api/cart"
CLEAR_CART_PATH = "/api/clear-cart"


def _parse_cart(body: dict, endpoint: str) -> Cart:
    require_success(body, endpoint)
    try:
        return CartResponse.model_validate(body).cart
    except ValidationError as e:
        raise ApiError(ApiErrorKind.UNEXPECTED_RESPONSE, "Panier invalide", endpoint=endpoint) from e


class CartClient:
    def __init__(self, http: httpx.AsyncClient, store: CartStore):
        self._http = http
        self._store = store

    async def fetch_cart(self) -> Cart:
        """
        GET /api/cart.
        - Succès: remplace l'instantané du store et retourne le Cart serveur.
        - Échec: ApiError; l'appelant choisit le repli (badge inchangé, panneau en erreur).
        """
        endpoint = f"GET {CART_PATH}"
        body = await request_json(self._http, "GET", CART_PATH)
        cart = _parse_cart(body, endpoint)
        self._store.replace(cart)
        return cart

    async def add_item(self, product_id: ProductId, quantity: int = 1) -> Cart:
        """
        POST /api/cart {productId, quantity}.
        Jamais d'incrément local avant confirmation: le serveur peut appliquer des limites de stock.
        """
        if quantity < 1:
            raise ValueError("quantity doit être >= 1")
        endpoint = f"POST {CART_PATH}"
        body = await request_json(
            self._http, "POST", CART_PATH, json={"productId": product_id, "quantity": quantity}
        )
        cart = _parse_cart(body, endpoint)
        self._store.replace(cart)
        logger.info("cart.add product_id=%s quantity=%s total_items=%s", product_id, quantity, cart.total_items)
        return cart

    async def remove_item(self, product_id: ProductId) -> Cart:
        """
        DELETE /api/cart/{productId}.
        Idempotent: un 404 (article absent) renvoie le panier courant inchangé au lieu d'échouer.
        """
        path = f"{CART_PATH}/{product_id}"
        endpoint = f"DELETE {path}"
        try:
            body = await request_json(self._http, "DELETE", path)
        except ApiError as e:
            if e.status_code == 404:
                logger.info("cart.remove absent product_id=%s", product_id)
                return await self.fetch_cart()
            raise
        cart = _parse_cart(body, endpoint)
        self._store.replace(cart)
        logger.info("cart.remove product_id=%s total_items=%s", product_id, cart.total_items)
        return cart

    async def clear_cart(self) -> bool:
        """
        POST /api/clear-cart, au plus une fois par paiement confirmé.
        Échec « doux »: journalisé, jamais remonté (l'achat a déjà abouti).
        Retourne True si le serveur a confirmé le vidage.
        """
        endpoint = f"POST {CLEAR_CART_PATH}"
        try:
            body = await request_json(self._http, "POST", CLEAR_CART_PATH)
            require_success(body, endpoint)
        except ApiError as e:
            logger.warning("cart.clear failed kind=%s error=%s", e.kind.value, e.message)
            return False
        logger.info("cart.clear ok")
        return True
