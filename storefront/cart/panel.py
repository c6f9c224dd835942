"""
Modèle de vue du panneau panier (aucun rendu HTML ici).
Le total affiché = total serveur + frais fixes; les frais restent une
préoccupation d'affichage et ne sont jamais envoyés au serveur.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from storefront.config import CHECKOUT_SURCHARGE, CURRENCY
from .models import Cart, CartItem

CART_LOAD_ERROR = "Impossible de charger le panier"
EMPTY_CART_MESSAGE = "Votre panier est vide"


def format_amount(amount: Decimal, currency: str = CURRENCY) -> str:
    value = Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{value} {currency}"


def display_total(cart_total: Decimal, surcharge: Decimal = CHECKOUT_SURCHARGE) -> Decimal:
    return Decimal(cart_total) + Decimal(surcharge)


@dataclass
class CartPanel:
    items: List[CartItem] = field(default_factory=list)
    total_items: int = 0
    total_amount: Decimal = Decimal("0")
    surcharge: Decimal = CHECKOUT_SURCHARGE
    currency: str = CURRENCY
    error: Optional[str] = None

    @classmethod
    def from_cart(cls, cart: Cart, surcharge: Decimal = CHECKOUT_SURCHARGE, currency: str = CURRENCY) -> "CartPanel":
        return cls(
            items=list(cart.items),
            total_items=cart.total_items,
            total_amount=cart.total_amount,
            surcharge=surcharge,
            currency=currency,
        )

    @classmethod
    def failed(cls, message: str = CART_LOAD_ERROR, surcharge: Decimal = CHECKOUT_SURCHARGE, currency: str = CURRENCY) -> "CartPanel":
        # Jamais de rendu partiel périmé: état vide + message d'erreur
        return cls(surcharge=surcharge, currency=currency, error=message)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def display_total(self) -> Decimal:
        return display_total(self.total_amount, self.surcharge)

    @property
    def total_items_label(self) -> str:
        return f"Total articles : {self.total_items}"

    @property
    def total_amount_label(self) -> str:
        return format_amount(self.total_amount, self.currency)

    @property
    def checkout_label(self) -> str:
        return f"Finaliser la commande – {format_amount(self.display_total, self.currency)}"

    def to_dict(self) -> dict:
        return {
            "items": [
                {
                    "productId": it.product_id,
                    "title": it.title,
                    "author": it.author,
                    "unitPrice": format_amount(it.unit_price, self.currency),
                    "quantity": it.quantity,
                    "quantityLabel": f"x {it.quantity}",
                    "imageUrl": it.image_url,
                }
                for it in self.items
            ],
            "totalItems": self.total_items,
            "totalItemsLabel": self.total_items_label,
            "totalAmount": self.total_amount_label,
            "displayTotal": format_amount(self.display_total, self.currency),
            "checkoutLabel": self.checkout_label,
            "empty": self.is_empty,
            "message": EMPTY_CART_MESSAGE if self.is_empty and not self.error else None,
            "error": self.error,
        }
