from typing import Any, Dict, List
from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from cart_api.models.base import CartBase


class CartSession(CartBase):
    """Cart contents and pending notices for one cart key."""
    __tablename__ = "cart_sessions"

    cart_key: Mapped[str] = mapped_column(String(64), primary_key=True)

    # [{"item_key": str, "id": int, "quantity": int}, ...]
    items: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    # {"success": ["..."], "error": [...]}; flushed into the next response
    notices: Mapped[Dict[str, List[str]]] = mapped_column(JSON, nullable=False, default=dict)
