"""
Adaptateur 'payments' côté API commerce: centralise les appels liés au processeur.
Le client ne parle jamais au processeur de paiement directement: le serveur crée
la session et rapporte son statut.
"""
import logging
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from storefront.errors import ApiError, ApiErrorKind
from storefront.infra.http_client import request_json, require_success
from .models import CheckoutSessionResponse, PaymentStatus, PaymentStatusResponse

logger = logging.getLogger(__name__)

CHECKOUT_SESSION_PATH = "/create-checkout-session"
PAYMENT_STATUS_PATH = "/api/check-payment-status"


class PaymentsGateway:
    def __init__(self, http: httpx.AsyncClient):
        self._http = http

    async def create_checkout_session(self) -> CheckoutSessionResponse:
        """
        POST /create-checkout-session sans détail d'articles:
        le serveur résout le panier courant (aucun prix/quantité contrôlé par le client).
        Retour: {session_id, session_url}; ApiError si réponse incomplète.
        """
        endpoint = f"POST {CHECKOUT_SESSION_PATH}"
        body = await request_json(self._http, "POST", CHECKOUT_SESSION_PATH, json={})
        require_success(body, endpoint)
        try:
            return CheckoutSessionResponse.model_validate(body)
        except ValidationError as e:
            raise ApiError(ApiErrorKind.UNEXPECTED_RESPONSE, "Session de paiement incomplète", endpoint=endpoint) from e

    async def check_payment_status(self, session_id: str) -> PaymentStatus:
        """
        GET /api/check-payment-status/{sessionId}.
        - paymentStatus inconnu => PaymentStatus.UNKNOWN
        - paymentStatus absent / corps invalide => ApiError(UNEXPECTED_RESPONSE)
        """
        path = f"{PAYMENT_STATUS_PATH}/{quote(session_id, safe='')}"
        endpoint = f"GET {PAYMENT_STATUS_PATH}"
        body = await request_json(self._http, "GET", path)
        try:
            status = PaymentStatusResponse.model_validate(body).status
        except ValidationError as e:
            raise ApiError(ApiErrorKind.UNEXPECTED_RESPONSE, "paymentStatus absent", endpoint=endpoint) from e
        logger.info("payments.status session_id=%s status=%s", session_id, status.value)
        return status
