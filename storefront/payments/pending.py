"""
Suivi durable d'un checkout en cours à travers la redirection vers le processeur.
Le stockage contient au plus un enregistrement (les deux clés vont toujours ensemble).
La validité est évaluée à la lecture, pas par minuterie: un onglet resté inactif
expire correctement l'enregistrement au prochain contrôle.
"""
import logging
import time
from typing import Callable, Optional

from storefront.config import PENDING_CHECKOUT_TTL_MS, PENDING_SESSION_KEY, PENDING_TIMESTAMP_KEY
from storefront.infra.storage import KeyValueStore
from .models import PendingCheckout

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class PendingPaymentTracker:
    def __init__(
        self,
        storage: KeyValueStore,
        clock: Callable[[], int] = now_ms,
        ttl_ms: int = PENDING_CHECKOUT_TTL_MS,
    ):
        self._storage = storage
        self._clock = clock
        self._ttl_ms = ttl_ms

    def record(self, session_id: str) -> PendingCheckout:
        """Écrit sessionId + horodatage courant, en écrasant tout enregistrement précédent."""
        pending = PendingCheckout(session_id=session_id, created_at=self._clock())
        self._storage.set(PENDING_SESSION_KEY, pending.session_id)
        self._storage.set(PENDING_TIMESTAMP_KEY, str(pending.created_at))
        logger.info("payments.pending recorded session_id=%s", session_id)
        return pending

    def peek(self) -> Optional[PendingCheckout]:
        """
        Lit l'enregistrement sans l'effacer.
        Une paire incomplète ou un horodatage illisible est traité comme absent,
        et les clés restantes sont retirées pour rétablir l'invariant « deux clés ou aucune ».
        """
        session_id = self._storage.get(PENDING_SESSION_KEY)
        raw_ts = self._storage.get(PENDING_TIMESTAMP_KEY)
        if session_id is None and raw_ts is None:
            return None
        try:
            if not session_id:
                raise ValueError("sessionId manquant")
            created_at = int(raw_ts)
        except (TypeError, ValueError):
            logger.warning("payments.pending corrupted session_id=%s timestamp=%s", session_id, raw_ts)
            self.clear()
            return None
        return PendingCheckout(session_id=session_id, created_at=created_at)

    def is_valid(self, record: PendingCheckout) -> bool:
        # Borne exclusive: exactement ttl_ms après la création => expiré
        return self._clock() - record.created_at < self._ttl_ms

    def clear(self) -> None:
        self._storage.delete(PENDING_SESSION_KEY)
        self._storage.delete(PENDING_TIMESTAMP_KEY)
