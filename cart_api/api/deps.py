from typing import Optional
from fastapi import Depends, Header, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from cart_api.config import Settings, get_settings
from cart_api.core.security import AccessContext, check_api_permission, generate_cart_key
from cart_api.database import get_db
from cart_api.services.cart_session import CartSessionService
from cart_api.services.dispatcher import CART_KEY_RESPONSE_HEADER
from cart_api.utils.filters import FieldsFilter


def get_access_context(
    x_cocart_access_token: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> AccessContext:
    """Access-token state for this request."""
    return AccessContext(
        require_access_token=settings.REQUIRE_ACCESS_TOKEN,
        access_token=settings.ACCESS_TOKEN,
        requested_token=x_cocart_access_token,
    )


def has_api_permission(context: AccessContext = Depends(get_access_context)) -> AccessContext:
    """Route dependency rejecting requests without a valid access token."""
    check_api_permission(context)
    return context


def get_cart_key(
    response: Response,
    cart_key_header: Optional[str] = Header(default=None, alias="Cart-Key"),
    cart_key: Optional[str] = Query(default=None),
) -> str:
    """Cart key from header or query, issuing a new one when absent."""
    key = cart_key_header or cart_key or generate_cart_key()
    response.headers[CART_KEY_RESPONSE_HEADER] = key
    return key


def get_cart_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> CartSessionService:
    return CartSessionService(db, settings)


class CartQueryParams:
    """Response shaping parameters shared by cart endpoints."""

    def __init__(
        self,
        fields: Optional[str] = Query(default=None, description="Comma-separated list of fields to include"),
        exclude_fields: Optional[str] = Query(default=None, description="Comma-separated list of fields to exclude"),
        response: Optional[str] = Query(default=None, description="Named field preset, e.g. mini"),
        prices: Optional[str] = Query(default=None, description="'formatted' returns prices as display strings"),
    ):
        self.fields = fields
        self.exclude_fields = exclude_fields
        self.response = response
        self.prices = prices

    @property
    def filter(self) -> FieldsFilter:
        return FieldsFilter(self.fields, self.exclude_fields, self.response)
