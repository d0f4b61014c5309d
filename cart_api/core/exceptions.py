"""
CoCart API Exception Classes

Standard error response format:
{
    "code": "cocart_rest_...",
    "message": "...",
    "data": {"status": 400}
}
"""
from typing import Any, Dict, Optional

from cart_api.utils.response import error_response


class CartAPIException(Exception):
    """Base exception for cart API errors."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        data: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.data = data or {}
        super().__init__(self.message)

    def to_response(self) -> Dict[str, Any]:
        """Convert to the API error body."""
        return error_response(self.code, self.message, self.status_code, self.data)


class InvalidInputError(CartAPIException):
    """400 - Request failed validation."""

    def __init__(self, code: str, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(code=code, message=message, status_code=400, data=data)


class InvalidPathError(InvalidInputError):
    """400 - Batch sub-request targets a path outside the API namespace."""

    def __init__(self, path: Optional[str] = None):
        super().__init__(
            code="cocart_rest_invalid_path",
            message="Invalid path provided.",
            data={"path": path} if path is not None else None,
        )


class InvalidTokenError(CartAPIException):
    """401 - Access token header is not a valid token."""

    def __init__(self):
        super().__init__(
            code="cocart_rest_invalid_token",
            message="Invalid token provided.",
            status_code=401,
        )


class PermissionDeniedError(CartAPIException):
    """401 - Access token missing or does not match."""

    def __init__(self):
        super().__init__(
            code="cocart_rest_permission_denied",
            message="Permission Denied.",
            status_code=401,
        )


class NotFoundError(CartAPIException):
    """404 - Resource not found."""

    def __init__(self, code: str, message: str):
        super().__init__(code=code, message=message, status_code=404)


class UnknownServerError(CartAPIException):
    """500 - Anything not handled elsewhere."""

    def __init__(self, message: str = "Server Error"):
        super().__init__(
            code="cocart_rest_unknown_server_error",
            message=message,
            status_code=500,
        )
