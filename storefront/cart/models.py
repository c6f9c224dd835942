"""
Schémas de réponse de l'API panier (validation stricte, échec rapide).
Le panier appartient au serveur: le client n'en garde qu'une copie en lecture.
"""
from decimal import Decimal
from typing import Any, List, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

ProductId = Union[int, str]


def _to_decimal(v: Any) -> Any:
    # float JSON -> Decimal via str pour éviter 79.98 -> 79.9800000000000039...
    if isinstance(v, float):
        return Decimal(str(v))
    return v


class CartItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    product_id: ProductId = Field(validation_alias=AliasChoices("productId", "product_id", "id"))
    title: str = ""
    author: str = ""
    unit_price: Decimal = Field(ge=0, validation_alias=AliasChoices("unitPrice", "unit_price", "price"))
    quantity: int = Field(ge=1)
    image_url: str = Field(default="", validation_alias=AliasChoices("imageUrl", "image_url"))

    @field_validator("unit_price", mode="before")
    @classmethod
    def _price_as_decimal(cls, v):
        return _to_decimal(v)


class Cart(BaseModel):
    """Totaux fournis par le serveur, jamais recalculés côté client."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    items: List[CartItem] = Field(default_factory=list)
    total_items: int = Field(default=0, ge=0, validation_alias=AliasChoices("totalItems", "total_items"))
    total_amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        validation_alias=AliasChoices("totalAmount", "total_amount", "total"),
    )

    @field_validator("total_amount", mode="before")
    @classmethod
    def _amount_as_decimal(cls, v):
        return _to_decimal(v)

    @classmethod
    def empty(cls) -> "Cart":
        return cls(items=[], total_items=0, total_amount=Decimal("0"))


class CartResponse(BaseModel):
    """Enveloppe de GET/POST/DELETE /api/cart."""

    success: bool
    cart: Cart
