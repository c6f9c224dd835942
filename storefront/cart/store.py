"""
État panier en mémoire: source unique du total affiché et du badge.
"""
from typing import Optional

from .models import Cart


class CartStore:
    """
    Conteneur d'état pur (aucune erreur possible).
    - replace: remplace l'instantané d'un bloc (Cart est immuable, pas de mise à jour partielle visible).
    - reset: panier vide, totaux à zéro (après vidage confirmé).
    - badge_count: total_items, ou 0 si rien n'a encore été chargé.
    """

    def __init__(self):
        self._snapshot: Optional[Cart] = None

    @property
    def snapshot(self) -> Optional[Cart]:
        return self._snapshot

    @property
    def loaded(self) -> bool:
        return self._snapshot is not None

    def replace(self, cart: Cart) -> None:
        self._snapshot = cart

    def reset(self) -> None:
        self._snapshot = Cart.empty()

    def badge_count(self) -> int:
        if self._snapshot is None:
            return 0
        return self._snapshot.total_items
