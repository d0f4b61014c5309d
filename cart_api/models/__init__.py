# Models module - Import all models here so metadata.create_all sees them
from cart_api.models.product import Product
from cart_api.models.cart_session import CartSession

__all__ = [
    "Product",
    "CartSession",
]
