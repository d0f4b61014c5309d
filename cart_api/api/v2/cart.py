from typing import Any

from fastapi import APIRouter, Body, Depends

from cart_api.api.deps import CartQueryParams, get_cart_key, get_cart_service
from cart_api.models import CartSession
from cart_api.schemas.cart import AddItem, AddItems, UpdateItem
from cart_api.services.cart_session import CartSessionService


router = APIRouter()


async def render_cart(
    service: CartSessionService,
    cart: CartSession,
    params: CartQueryParams,
) -> Any:
    """Build the cart response, then persist the cart with its notices flushed."""
    body = await service.to_response(cart, params.prices)
    await service.save(cart)
    return params.filter.filter(body)


@router.get("")
async def get_cart(
    params: CartQueryParams = Depends(),
    cart_key: str = Depends(get_cart_key),
    service: CartSessionService = Depends(get_cart_service),
) -> Any:
    """
    Get the cart.
    """
    cart = await service.load(cart_key)
    return await render_cart(service, cart, params)


@router.post("/add-item")
async def add_item(
    data: dict = Body(default={}),
    params: CartQueryParams = Depends(),
    cart_key: str = Depends(get_cart_key),
    service: CartSessionService = Depends(get_cart_service),
) -> Any:
    """
    Add a product to the cart.

    Adding a product that is already in the cart increases its quantity.
    """
    item_data = AddItem(**data)

    cart = await service.load(cart_key)
    await service.add_item(cart, item_data.id, item_data.quantity)
    return await render_cart(service, cart, params)


@router.post("/add-items")
async def add_items(
    data: dict = Body(default={}),
    params: CartQueryParams = Depends(),
    cart_key: str = Depends(get_cart_key),
    service: CartSessionService = Depends(get_cart_service),
) -> Any:
    """
    Add several products to the cart in one request.
    """
    items_data = AddItems(**data)

    cart = await service.load(cart_key)
    for item in items_data.items:
        await service.add_item(cart, item.id, item.quantity)
    return await render_cart(service, cart, params)


@router.post("/item/{item_key}")
async def update_item(
    item_key: str,
    data: dict = Body(default={}),
    params: CartQueryParams = Depends(),
    cart_key: str = Depends(get_cart_key),
    service: CartSessionService = Depends(get_cart_service),
) -> Any:
    """
    Update the quantity of an item. A quantity of 0 removes it.
    """
    update_data = UpdateItem(**data)

    cart = await service.load(cart_key)
    await service.update_item(cart, item_key, update_data.quantity)
    return await render_cart(service, cart, params)


@router.delete("/item/{item_key}")
async def remove_item(
    item_key: str,
    params: CartQueryParams = Depends(),
    cart_key: str = Depends(get_cart_key),
    service: CartSessionService = Depends(get_cart_service),
) -> Any:
    """
    Remove an item from the cart.
    """
    cart = await service.load(cart_key)
    await service.remove_item(cart, item_key)
    return await render_cart(service, cart, params)


@router.post("/clear")
async def clear_cart(
    params: CartQueryParams = Depends(),
    cart_key: str = Depends(get_cart_key),
    service: CartSessionService = Depends(get_cart_service),
) -> Any:
    """
    Remove every item from the cart.
    """
    cart = await service.load(cart_key)
    service.clear(cart)
    return await render_cart(service, cart, params)


@router.get("/items")
async def get_items(
    params: CartQueryParams = Depends(),
    cart_key: str = Depends(get_cart_key),
    service: CartSessionService = Depends(get_cart_service),
) -> Any:
    """
    Get the items in the cart.
    """
    cart = await service.load(cart_key)
    return params.filter.filter(await service.get_items(cart, params.prices))


@router.get("/items/count")
async def count_items(
    cart_key: str = Depends(get_cart_key),
    service: CartSessionService = Depends(get_cart_service),
) -> Any:
    """
    Get the number of items in the cart.
    """
    cart = await service.load(cart_key)
    return service.get_item_count(cart)


@router.get("/totals")
async def get_totals(
    params: CartQueryParams = Depends(),
    cart_key: str = Depends(get_cart_key),
    service: CartSessionService = Depends(get_cart_service),
) -> Any:
    """
    Get the cart totals.
    """
    cart = await service.load(cart_key)
    return params.filter.filter(await service.get_totals(cart, params.prices))
