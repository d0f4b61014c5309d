from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from cart_api.api.deps import get_cart_key, has_api_permission
from cart_api.config import Settings, get_settings
from cart_api.core.security import AccessContext
from cart_api.schemas.batch import BatchEnvelope
from cart_api.services.batch import BatchOrchestrator
from cart_api.services.dispatcher import CART_KEY_RESPONSE_HEADER, AsgiDispatcher, RequestContext


router = APIRouter()


def get_batch_orchestrator(settings: Settings = Depends(get_settings)) -> BatchOrchestrator:
    return BatchOrchestrator(settings)


@router.post("")
async def batch_request(
    request: Request,
    data: dict = Body(...),
    access: AccessContext = Depends(has_api_permission),
    cart_key: str = Depends(get_cart_key),
    orchestrator: BatchOrchestrator = Depends(get_batch_orchestrator),
) -> Any:
    """
    Execute multiple API requests in a single HTTP request.

    Requests run one after another in the order given, each exactly as if
    it had been sent on its own. Every path must be inside the API
    namespace or the whole batch is rejected before anything runs.

    If every request targets the cart, the response is the cart returned
    by the last request, with the notices of all requests merged into it.
    Otherwise each request's status and body are returned in order.
    """
    envelope = BatchEnvelope(**data)

    # Shared by every sub-request so they act on the same cart
    context = RequestContext(access_token=access.requested_token, cart_key=cart_key)

    async with AsgiDispatcher(request.app, context) as dispatch:
        outcome = await orchestrator.handle_batch(envelope, dispatch)

    return JSONResponse(
        status_code=outcome.status_code,
        content=outcome.to_response(),
        headers={CART_KEY_RESPONSE_HEADER: cart_key},
    )
