from typing import Optional
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cart_api.models.base import CartBase


class Product(CartBase):
    """Product that can be added to a cart."""
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Price in currency minor units (cents)
    price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # None means stock is not managed
    stock_quantity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    @property
    def max_purchase(self) -> int:
        return self.stock_quantity if self.stock_quantity is not None else -1
