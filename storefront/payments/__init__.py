"""
Module 'payments' (feature-first): point d'entrée public.
Réunit passerelle API, suivi du checkout en attente, initiation de la session et réconciliation.
"""

from .models import PaymentStatus, PendingCheckout, CheckoutSessionResponse, PaymentStatusResponse
from .gateway import PaymentsGateway
from .pending import PendingPaymentTracker
from .checkout import CheckoutSessionInitiator, Navigator, RedirectNavigator
from .reconciler import PaymentReconciler, ReconciliationState

__all__ = [
    # models
    "PaymentStatus",
    "PendingCheckout",
    "CheckoutSessionResponse",
    "PaymentStatusResponse",
    # gateway
    "PaymentsGateway",
    # pending
    "PendingPaymentTracker",
    # checkout
    "CheckoutSessionInitiator",
    "Navigator",
    "RedirectNavigator",
    # reconciliation
    "PaymentReconciler",
    "ReconciliationState",
]
