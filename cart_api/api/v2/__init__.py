from fastapi import APIRouter, Depends

from cart_api.api.deps import has_api_permission
from cart_api.api.v2 import cart, store

router = APIRouter(dependencies=[Depends(has_api_permission)])

router.include_router(cart.router, prefix="/cart", tags=["Cart"])
router.include_router(store.router, prefix="/store", tags=["Store"])
