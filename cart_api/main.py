from contextlib import asynccontextmanager
import json
import time
import uuid

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from cart_api.config import settings
from cart_api.database import AsyncSessionLocal, init_db
from cart_api.core.exceptions import CartAPIException
from cart_api.core.logging import configure_logging, get_logger
from cart_api.api import batch
from cart_api.api.v2 import router as api_v2_router
from cart_api.services.cart_session import CartSessionService
from cart_api.utils.response import error_response


configure_logging()
logger = get_logger(__name__)


async def load_products(path: str) -> None:
    """Load products from a JSON file into the catalog."""
    with open(path, encoding="utf-8") as f:
        products = json.load(f)

    async with AsyncSessionLocal() as session:
        added = await CartSessionService(session, settings).seed_products(products)
    logger.info("products_loaded", path=path, added=added)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    await init_db()
    if settings.PRODUCTS_FILE:
        await load_products(settings.PRODUCTS_FILE)
    logger.info("startup", namespace=settings.api_prefix, debug=settings.DEBUG)
    yield
    # Shutdown
    logger.info("shutdown")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="REST API for cart sessions with batch requests",
    version=settings.VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["CoCart-API-Cart-Key", "X-Request-ID"],
)


@app.middleware("http")
async def add_request_context(request: Request, call_next):
    """Bind a request ID for logging and add X-Request-ID / X-Process-Time headers."""
    request_id = str(uuid.uuid4())
    start_time = time.time()
    with structlog.contextvars.bound_contextvars(request_id=request_id):
        response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Request-ID"] = request_id
    response.headers["X-Process-Time"] = str(process_time)
    return response


@app.exception_handler(CartAPIException)
async def cart_api_exception_handler(request: Request, exc: CartAPIException):
    """Handle CoCart-style API exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle routing errors (404, 405, ...) in CoCart format."""
    code = "rest_no_route" if exc.status_code in (404, 405) else "rest_http_error"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(code, str(exc.detail), exc.status_code),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle FastAPI/Pydantic validation errors in CoCart format."""
    errors = exc.errors()

    error_messages = []
    for error in errors:
        loc = error.get("loc", [])
        msg = error.get("msg", "Validation error")
        field = ".".join(str(l) for l in loc if l != "body")

        if field:
            error_messages.append(f"{field}: {msg}")
        else:
            error_messages.append(msg)

    return JSONResponse(
        status_code=400,
        content=error_response(
            "rest_invalid_param",
            "; ".join(error_messages) if error_messages else "Invalid request",
            400,
        ),
    )


@app.exception_handler(PydanticValidationError)
async def pydantic_validation_exception_handler(request: Request, exc: PydanticValidationError):
    """Handle Pydantic validation errors (from manual model instantiation) in CoCart format."""
    errors = exc.errors()

    error_messages = []
    for error in errors:
        loc = ".".join(str(l) for l in error.get("loc", []))
        msg = error.get("msg", "Validation error")
        # Clean up the message - remove "Value error, " prefix if present
        if msg.startswith("Value error, "):
            msg = msg[13:]
        error_messages.append(f"{loc}: {msg}" if loc else msg)

    return JSONResponse(
        status_code=400,
        content=error_response(
            "rest_invalid_param",
            "; ".join(error_messages) if error_messages else "Invalid request",
            400,
        ),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.exception("unhandled_exception", path=request.url.path)
    return JSONResponse(
        status_code=500,
        content=error_response("cocart_rest_unknown_server_error", str(exc) or "Server Error", 500),
    )


# Include API routers
app.include_router(api_v2_router, prefix=settings.api_prefix)
app.include_router(batch.router, prefix=f"/{settings.API_NAMESPACE}/batch", tags=["Batch"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "docs": "/docs",
        "namespace": settings.api_prefix,
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
