from .models import ProductView, ProductsResponse
from .client import CatalogClient

__all__ = ["ProductView", "ProductsResponse", "CatalogClient"]
