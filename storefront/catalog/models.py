from decimal import Decimal
from typing import List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class ProductView(BaseModel):
    # Champs d'affichage libres (isbn, specifications, rating...) conservés tels quels
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Union[int, str]
    title: str
    author: str = ""
    price: Decimal = Field(ge=0)
    discount_price: Optional[Decimal] = Field(default=None, validation_alias=AliasChoices("discountPrice", "discount_price"))
    stock: int = 0
    image_url: str = Field(default="", validation_alias=AliasChoices("imageUrl", "image_url"))
    description: str = ""

    @field_validator("price", "discount_price", mode="before")
    @classmethod
    def _as_decimal(cls, v):
        if isinstance(v, float):
            return Decimal(str(v))
        return v

    @property
    def current_price(self) -> Decimal:
        return self.discount_price if self.discount_price is not None else self.price


class ProductsResponse(BaseModel):
    success: bool
    products: List[ProductView] = Field(default_factory=list)
