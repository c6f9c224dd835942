"""
Schémas 'payments': session de checkout, statut de paiement, checkout en attente.
"""
from dataclasses import dataclass
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value) -> "PaymentStatus":
        """Toute valeur non reconnue => UNKNOWN (jamais d'exception)."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN


class CheckoutSessionResponse(BaseModel):
    """Réponse de POST /create-checkout-session."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    session_url: str = Field(min_length=1, validation_alias=AliasChoices("sessionUrl", "session_url", "url"))
    session_id: str = Field(min_length=1, validation_alias=AliasChoices("sessionId", "session_id", "id"))


class PaymentStatusResponse(BaseModel):
    """Réponse de GET /api/check-payment-status/{sessionId} (pas d'indicateur success)."""

    model_config = ConfigDict(populate_by_name=True)

    payment_status: str = Field(validation_alias=AliasChoices("paymentStatus", "payment_status"))

    @property
    def status(self) -> PaymentStatus:
        return PaymentStatus.parse(self.payment_status)


@dataclass(frozen=True)
class PendingCheckout:
    session_id: str
    created_at: int  # epoch ms
