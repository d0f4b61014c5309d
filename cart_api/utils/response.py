from typing import Any, Dict, Optional


def error_response(
    code: str,
    message: str,
    status: int = 400,
    data: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Create an error response body in CoCart format."""
    return {
        "code": code,
        "message": message,
        "data": {"status": status, **(data or {})},
    }
