"""
Cart session service.

Persists cart contents per cart key and queues notices raised while a
request changes the cart. Notices are flushed into the response of the
request that produced them.
"""
import hashlib
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cart_api.config import Settings, settings as default_settings
from cart_api.core.exceptions import InvalidInputError, NotFoundError
from cart_api.core.logging import get_logger
from cart_api.models import CartSession, Product
from cart_api.utils.monetary import convert_money_response, convert_totals_response, currency_response


logger = get_logger(__name__)


def generate_item_key(product_id: int) -> str:
    """Item key for a product line; the same product always maps to the same line."""
    return hashlib.md5(str(product_id).encode("utf-8")).hexdigest()


class CartSessionService:
    """Cart operations for one request, backed by the database session."""

    def __init__(self, db: AsyncSession, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or default_settings

    # Products

    async def register_product(
        self,
        name: str,
        price: int,
        stock_quantity: Optional[int] = None,
        product_id: Optional[int] = None,
    ) -> Product:
        product = Product(name=name, price=price, stock_quantity=stock_quantity)
        if product_id is not None:
            product.id = product_id
        self.db.add(product)
        await self.db.commit()
        await self.db.refresh(product)
        return product

    async def seed_products(self, products: List[Dict[str, Any]]) -> int:
        """Register products that do not exist yet. Returns how many were added."""
        added = 0
        for data in products:
            product_id = data.get("id")
            if product_id is not None and await self.db.get(Product, product_id) is not None:
                continue
            self.db.add(Product(
                id=product_id,
                name=data["name"],
                price=int(data.get("price", 0)),
                stock_quantity=data.get("stock_quantity"),
            ))
            added += 1
        await self.db.commit()
        return added

    async def get_product(self, product_id: int) -> Product:
        result = await self.db.execute(select(Product).where(Product.id == product_id))
        product = result.scalar_one_or_none()

        if not product:
            raise NotFoundError(
                "cocart_product_does_not_exist",
                "This product cannot be added to the cart as it does not exist.",
            )
        return product

    # Sessions

    async def load(self, cart_key: str) -> CartSession:
        """Load the cart for a key, starting an empty one if none exists."""
        cart = await self.db.get(CartSession, cart_key)
        if cart is None:
            cart = CartSession(cart_key=cart_key, items=[], notices={})
            self.db.add(cart)
            await self.db.flush()
        return cart

    async def save(self, cart: CartSession) -> None:
        await self.db.commit()

    # Items

    def find_item(self, cart: CartSession, item_key: str) -> Optional[Dict[str, Any]]:
        for item in cart.items:
            if item["item_key"] == item_key:
                return item
        return None

    def _check_stock(self, product: Product, quantity: int) -> None:
        if product.stock_quantity is not None and quantity > product.stock_quantity:
            raise InvalidInputError(
                "cocart_not_enough_in_stock",
                f"You cannot add that amount of “{product.name}” to the cart because there is not enough stock "
                f"({product.stock_quantity} remaining).",
            )

    @staticmethod
    def _validate_quantity(quantity: Any) -> int:
        try:
            quantity = int(quantity)
        except (TypeError, ValueError):
            quantity = 0
        if quantity < 1:
            raise InvalidInputError(
                "cocart_quantity_not_valid",
                "Quantity must be a positive number.",
            )
        return quantity

    async def add_item(self, cart: CartSession, product_id: int, quantity: Any = 1) -> Dict[str, Any]:
        quantity = self._validate_quantity(quantity)
        product = await self.get_product(product_id)
        item_key = generate_item_key(product.id)

        items = [dict(item) for item in cart.items]
        existing = next((item for item in items if item["item_key"] == item_key), None)
        new_quantity = quantity + (existing["quantity"] if existing else 0)
        self._check_stock(product, new_quantity)

        if existing:
            existing["quantity"] = new_quantity
            line = existing
        else:
            line = {"item_key": item_key, "id": product.id, "quantity": quantity}
            items.append(line)

        cart.items = items
        self.add_notice(cart, f"“{product.name}” has been added to your cart.")
        logger.debug("cart_item_added", cart_key=cart.cart_key, product_id=product.id, quantity=quantity)
        return line

    async def update_item(self, cart: CartSession, item_key: str, quantity: Any) -> None:
        item = self.find_item(cart, item_key)
        if item is None:
            raise NotFoundError(
                "cocart_item_not_in_cart",
                "Unable to find item in cart.",
            )

        if quantity in (0, "0"):
            await self.remove_item(cart, item_key)
            return

        quantity = self._validate_quantity(quantity)
        product = await self.get_product(item["id"])
        self._check_stock(product, quantity)

        cart.items = [
            dict(line, quantity=quantity) if line["item_key"] == item_key else dict(line)
            for line in cart.items
        ]
        self.add_notice(cart, f"Quantity for “{product.name}” has been updated.")

    async def remove_item(self, cart: CartSession, item_key: str) -> None:
        item = self.find_item(cart, item_key)
        if item is None:
            raise NotFoundError(
                "cocart_item_not_in_cart",
                "Unable to find item in cart.",
            )

        product = await self.db.get(Product, item["id"])
        name = product.name if product else "Item"

        cart.items = [dict(line) for line in cart.items if line["item_key"] != item_key]
        self.add_notice(cart, f"{name} has been removed from your cart.")

    def clear(self, cart: CartSession) -> None:
        cart.items = []
        self.add_notice(cart, "Cart is cleared.")

    # Notices

    def add_notice(self, cart: CartSession, message: str, notice_type: str = "success") -> None:
        notices = {key: list(value) for key, value in (cart.notices or {}).items()}
        notices.setdefault(notice_type, []).append(message)
        cart.notices = notices

    def pop_notices(self, cart: CartSession) -> Dict[str, List[str]]:
        """Return queued notices in configured type order and clear them."""
        queued = cart.notices or {}
        notices = {
            notice_type: list(queued[notice_type])
            for notice_type in self.settings.NOTICE_TYPES
            if queued.get(notice_type)
        }
        cart.notices = {}
        return notices

    # Responses

    async def get_items(self, cart: CartSession, prices: Optional[str] = None) -> List[Dict[str, Any]]:
        items = []
        for line in cart.items:
            product = await self.db.get(Product, line["id"])
            if product is None:
                continue
            subtotal = product.price * line["quantity"]
            items.append({
                "item_key": line["item_key"],
                "id": product.id,
                "name": product.name,
                "title": product.name,
                "price": convert_money_response(product.price, prices, self.settings),
                "quantity": {
                    "value": line["quantity"],
                    "min_purchase": 1,
                    "max_purchase": product.max_purchase,
                },
                "totals": convert_totals_response(
                    {"subtotal": subtotal, "total": subtotal}, prices, self.settings
                ),
            })
        return items

    async def get_totals(self, cart: CartSession, prices: Optional[str] = None) -> Dict[str, Any]:
        subtotal = 0
        for line in cart.items:
            product = await self.db.get(Product, line["id"])
            if product is not None:
                subtotal += product.price * line["quantity"]
        return convert_totals_response({"subtotal": subtotal, "total": subtotal}, prices, self.settings)

    def get_item_count(self, cart: CartSession) -> int:
        return sum(line["quantity"] for line in cart.items)

    async def to_response(self, cart: CartSession, prices: Optional[str] = None) -> Dict[str, Any]:
        """Convert the cart to API response format, flushing queued notices."""
        return {
            "cart_key": cart.cart_key,
            "currency": currency_response(self.settings),
            "items": await self.get_items(cart, prices),
            "item_count": self.get_item_count(cart),
            "totals": await self.get_totals(cart, prices),
            "notices": self.pop_notices(cart),
        }
