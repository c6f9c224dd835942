"""
Hôte du storefront pour un client (un navigateur, un chargement de page).

Point d'entrée explicite on_application_start(): l'hôte l'appelle une fois au
montage et reçoit un résultat au lieu de muter l'UI directement. Les intentions
utilisateur (ajout, retrait, ouverture/fermeture du panier, checkout) appliquent
la politique d'erreurs:
- catalogue: échec terminal pour la vue (ApiError propagée)
- badge: échec silencieux, valeur précédente conservée
- ajout/retrait: message visible par l'utilisateur (CartActionError)
- réconciliation: jamais bloquante
"""
import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, List, Optional

import httpx

from storefront.cart import CartClient, CartPanel, CartStore
from storefront.cart.models import ProductId
from storefront.catalog import CatalogClient, ProductView
from storefront.config import BADGE_COUNT_KEY, CHECKOUT_SURCHARGE, CURRENCY
from storefront.errors import ApiError, CartActionError
from storefront.infra.storage import KeyValueStore
from storefront.payments import (
    CheckoutSessionInitiator,
    Navigator,
    PaymentReconciler,
    PaymentsGateway,
    PendingPaymentTracker,
    ReconciliationState,
)
from storefront.payments.pending import now_ms

logger = logging.getLogger(__name__)

ADD_TO_CART_ERROR = "Erreur lors de l'ajout du produit au panier"
REMOVE_FROM_CART_ERROR = "Erreur lors du retrait du produit du panier"
CATALOG_ERROR = "Erreur lors du chargement des produits !"
CHECKOUT_ERROR = "Impossible de démarrer le paiement, veuillez réessayer"


@dataclass
class StartupResult:
    reconciliation: ReconciliationState
    badge_count: int

    def to_dict(self) -> dict:
        return {"reconciliation": self.reconciliation.value, "badgeCount": self.badge_count}


class StorefrontShell:
    def __init__(
        self,
        http: httpx.AsyncClient,
        storage: KeyValueStore,
        navigator: Navigator,
        *,
        clock: Callable[[], int] = now_ms,
        surcharge: Decimal = CHECKOUT_SURCHARGE,
        currency: str = CURRENCY,
    ):
        self.navigator = navigator
        self._storage = storage
        self.surcharge = surcharge
        self.currency = currency
        self.store = CartStore()
        self.cart_client = CartClient(http, self.store)
        self.catalog = CatalogClient(http)
        self.gateway = PaymentsGateway(http)
        self.tracker = PendingPaymentTracker(storage, clock=clock)
        self.checkout_initiator = CheckoutSessionInitiator(self.gateway, self.tracker, navigator)
        self.reconciler = PaymentReconciler(self.tracker, self.gateway, self.cart_client, self.store)

    async def on_application_start(self) -> StartupResult:
        """
        Réconciliation et rafraîchissement du badge lancés en parallèle, sans ordre imposé.
        Après un règlement, le badge est relu une fois (panier vidé côté serveur).
        """
        state, _ = await asyncio.gather(self.reconciler.run(), self.refresh_badge())
        if state is ReconciliationState.SETTLED:
            await self.refresh_badge()
        return StartupResult(reconciliation=state, badge_count=self.badge_count())

    def badge_count(self) -> int:
        """
        Badge du panier pour ce client.
        - Instantané chargé pendant ce chargement: fait foi et devient le dernier badge confirmé.
        - Sinon (relecture en échec): dernier badge confirmé, conservé dans le stockage du client.
        """
        if self.store.loaded:
            count = self.store.badge_count()
            self._storage.set(BADGE_COUNT_KEY, str(count))
            return count
        raw = self._storage.get(BADGE_COUNT_KEY)
        try:
            return int(raw) if raw is not None else 0
        except ValueError:
            return 0

    async def refresh_badge(self) -> int:
        try:
            await self.cart_client.fetch_cart()
        except ApiError as e:
            logger.warning("shell.badge refresh failed kind=%s error=%s", e.kind.value, e.message)
        return self.badge_count()

    async def list_products(self) -> List[ProductView]:
        return await self.catalog.fetch_products()

    async def add_to_cart(self, product_id: ProductId, quantity: int = 1) -> int:
        try:
            await self.cart_client.add_item(product_id, quantity)
        except ApiError as e:
            logger.error("shell.add_to_cart failed product_id=%s kind=%s", product_id, e.kind.value)
            raise CartActionError(ADD_TO_CART_ERROR) from e
        return self.badge_count()

    async def remove_from_cart(self, product_id: ProductId) -> CartPanel:
        try:
            cart = await self.cart_client.remove_item(product_id)
        except ApiError as e:
            logger.error("shell.remove_from_cart failed product_id=%s kind=%s", product_id, e.kind.value)
            raise CartActionError(REMOVE_FROM_CART_ERROR) from e
        return CartPanel.from_cart(cart, self.surcharge, self.currency)

    async def open_cart(self) -> CartPanel:
        try:
            cart = await self.cart_client.fetch_cart()
        except ApiError as e:
            logger.warning("shell.open_cart failed kind=%s error=%s", e.kind.value, e.message)
            return CartPanel.failed(surcharge=self.surcharge, currency=self.currency)
        return CartPanel.from_cart(cart, self.surcharge, self.currency)

    async def close_cart(self) -> int:
        return await self.refresh_badge()

    async def checkout(self, expected_total: Optional[Decimal] = None) -> None:
        """CheckoutError si la session n'a pas pu être créée (aucune navigation)."""
        if expected_total is None and self.store.snapshot is not None:
            expected_total = self.store.snapshot.total_amount + self.surcharge
        await self.checkout_initiator.begin_checkout(expected_total)

    def cancel_pending_checkout(self) -> bool:
        had_record = self.tracker.peek() is not None
        self.tracker.clear()
        return had_record
