"""
Module 'cart' (feature-first): point d'entrée public.
Réunit schémas, état local (CartStore), passerelle HTTP (CartClient) et modèle de vue.
"""

from .models import Cart, CartItem, CartResponse
from .store import CartStore
from .client import CartClient
from .panel import CartPanel, format_amount, display_total

__all__ = [
    # models
    "Cart",
    "CartItem",
    "CartResponse",
    # state
    "CartStore",
    # gateway
    "CartClient",
    # view
    "CartPanel",
    "format_amount",
    "display_total",
]
