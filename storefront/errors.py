"""
Taxonomie d'erreurs du storefront.
- ApiError: échec réseau (pas de réponse) ou réponse inattendue (success absent/false, corps invalide).
- CheckoutError: la session de paiement n'a pas pu être créée (aucune redirection, aucun enregistrement).
- CartActionError: action panier sans effet, avec un message destiné à l'utilisateur.
L'expiration d'un checkout en attente et l'abandon côté processeur ne sont pas des exceptions:
ce sont des issues de la réconciliation (voir payments.reconciler).
"""
from enum import Enum
from typing import Optional


class ApiErrorKind(str, Enum):
    NETWORK_FAILURE = "network_failure"
    UNEXPECTED_RESPONSE = "unexpected_response"


class CheckoutErrorKind(str, Enum):
    SESSION_CREATION_FAILED = "session_creation_failed"


class StorefrontError(Exception):
    """Base commune des erreurs du storefront."""


class ApiError(StorefrontError):
    def __init__(
        self,
        kind: ApiErrorKind,
        message: str = "",
        *,
        status_code: Optional[int] = None,
        endpoint: Optional[str] = None,
    ):
        self.kind = kind
        self.message = message or kind.value
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(f"{kind.value}: {self.message}")

    @property
    def is_network_failure(self) -> bool:
        return self.kind is ApiErrorKind.NETWORK_FAILURE


class CheckoutError(StorefrontError):
    def __init__(self, kind: CheckoutErrorKind, message: str = ""):
        self.kind = kind
        self.message = message or kind.value
        super().__init__(f"{kind.value}: {self.message}")


class CartActionError(StorefrontError):
    """L'action de l'utilisateur n'a eu aucun effet; `notice` doit lui être affiché."""

    def __init__(self, notice: str):
        self.notice = notice
        super().__init__(notice)
