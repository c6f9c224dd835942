"""
Réconciliation au retour du processeur de paiement (une fois par chargement).

Idle -> Checking -> {Settled, Expired, NotPaid, Error}, tous terminaux pour ce chargement.
- Aucun enregistrement: reste Idle (cas courant).
- Enregistrement expiré: effacé, aucun appel réseau.
- Statut "paid": tracker effacé AVANT le vidage (pas de nouvelle tentative d'un vidage
  possiblement non idempotent), vidage serveur (échec doux), store remis à zéro.
- Autre statut: enregistrement conservé pour un contrôle ultérieur dans la fenêtre.
- Échec de la requête de statut: journalisé, enregistrement conservé, jamais bloquant.
"""
import asyncio
import logging
from enum import Enum
from typing import Optional

from storefront.cart.client import CartClient
from storefront.cart.store import CartStore
from storefront.errors import ApiError
from .gateway import PaymentsGateway
from .models import PaymentStatus
from .pending import PendingPaymentTracker

logger = logging.getLogger(__name__)


class ReconciliationState(str, Enum):
    IDLE = "idle"
    CHECKING = "checking"
    SETTLED = "settled"
    EXPIRED = "expired"
    NOT_PAID = "not_paid"
    ERROR = "error"


class PaymentReconciler:
    def __init__(
        self,
        tracker: PendingPaymentTracker,
        gateway: PaymentsGateway,
        cart_client: CartClient,
        store: CartStore,
    ):
        self._tracker = tracker
        self._gateway = gateway
        self._cart_client = cart_client
        self._store = store
        self.state = ReconciliationState.IDLE
        self._run: Optional["asyncio.Future[ReconciliationState]"] = None

    async def run(self) -> ReconciliationState:
        # Une seule exécution par chargement: la tâche est posée avant le premier await,
        # les appels concurrents ou suivants attendent le même résultat terminal
        if self._run is None:
            self._run = asyncio.ensure_future(self._reconcile())
        result = await asyncio.shield(self._run)
        self.state = result
        return result

    async def _reconcile(self) -> ReconciliationState:
        record = self._tracker.peek()
        if record is None:
            return ReconciliationState.IDLE

        self.state = ReconciliationState.CHECKING
        if not self._tracker.is_valid(record):
            self._tracker.clear()
            logger.info("payments.reconcile expired session_id=%s", record.session_id)
            return ReconciliationState.EXPIRED

        try:
            status = await self._gateway.check_payment_status(record.session_id)
        except ApiError as e:
            logger.warning(
                "payments.reconcile status check failed session_id=%s kind=%s error=%s",
                record.session_id,
                e.kind.value,
                e.message,
            )
            return ReconciliationState.ERROR

        if status is not PaymentStatus.PAID:
            logger.info("payments.reconcile not paid session_id=%s status=%s", record.session_id, status.value)
            return ReconciliationState.NOT_PAID

        self._tracker.clear()
        cleared = await self._cart_client.clear_cart()
        self._store.reset()
        logger.info("payments.reconcile settled session_id=%s cart_cleared=%s", record.session_id, cleared)
        return ReconciliationState.SETTLED
