"""
Passage de relais vers le processeur de paiement.
1) Demande une session au serveur (aucun article envoyé).
2) Enregistre le checkout en attente puis navigue vers l'URL du processeur.
3) En cas d'échec: CheckoutError, aucune navigation, aucun enregistrement.
"""
import logging
from decimal import Decimal
from typing import Optional, Protocol

from storefront.errors import ApiError, CheckoutError, CheckoutErrorKind
from .gateway import PaymentsGateway
from .pending import PendingPaymentTracker

logger = logging.getLogger(__name__)


class Navigator(Protocol):
    def navigate(self, url: str) -> None: ...


class RedirectNavigator:
    """
    Navigation côté hôte web: retient la cible, la vue la convertit en redirection 303.
    """

    def __init__(self):
        self.location: Optional[str] = None

    def navigate(self, url: str) -> None:
        self.location = url


class CheckoutSessionInitiator:
    def __init__(self, gateway: PaymentsGateway, tracker: PendingPaymentTracker, navigator: Navigator):
        self._gateway = gateway
        self._tracker = tracker
        self._navigator = navigator

    async def begin_checkout(self, expected_total: Optional[Decimal] = None) -> None:
        """
        expected_total: total affiché (panier + frais), journalisé uniquement;
        il ne fait pas partie du contrat de checkout.
        """
        try:
            session = await self._gateway.create_checkout_session()
        except ApiError as e:
            logger.warning("payments.checkout failed kind=%s error=%s", e.kind.value, e.message)
            raise CheckoutError(CheckoutErrorKind.SESSION_CREATION_FAILED, e.message) from e

        self._tracker.record(session.session_id)
        logger.info(
            "payments.checkout session_id=%s expected_total=%s",
            session.session_id,
            expected_total,
        )
        self._navigator.navigate(session.session_url)
