from typing import Any, Dict

from fastapi import APIRouter, Depends

from cart_api.config import Settings, get_settings


router = APIRouter()

CART_ROUTES = {
    "cart": "cart",
    "cart-add-item": "cart/add-item",
    "cart-add-items": "cart/add-items",
    "cart-item": "cart/item",
    "cart-items": "cart/items",
    "cart-items-count": "cart/items/count",
    "cart-clear": "cart/clear",
    "cart-totals": "cart/totals",
}


def get_routes(settings: Settings) -> Dict[str, str]:
    """Full URLs of the API routes."""
    home = settings.HOME_URL.rstrip("/")
    prefix = f"{home}{settings.api_prefix}/"

    routes = {"batch": f"{home}/{settings.API_NAMESPACE}/batch"}
    routes.update({name: prefix + path for name, path in CART_ROUTES.items()})
    routes["store"] = prefix + "store"
    return routes


def get_store_address(settings: Settings) -> Dict[str, str]:
    return {
        "address": settings.STORE_ADDRESS,
        "address_2": settings.STORE_ADDRESS_2,
        "city": settings.STORE_CITY,
        "country": settings.STORE_COUNTRY,
        "postcode": settings.STORE_POSTCODE,
    }


@router.get("")
async def get_store(settings: Settings = Depends(get_settings)) -> Any:
    """
    Get general store information.

    In debug mode the API version and its routes are included.
    """
    store: Dict[str, Any] = {}

    if settings.DEBUG:
        store["version"] = settings.VERSION
        store["routes"] = get_routes(settings)

    store.update({
        "title": settings.STORE_TITLE,
        "description": settings.STORE_DESCRIPTION,
        "home_url": settings.HOME_URL,
        "language": settings.STORE_LANGUAGE,
        "gmt_offset": settings.STORE_GMT_OFFSET,
        "timezone_string": settings.STORE_TIMEZONE,
        "store_address": get_store_address(settings),
    })

    return store
