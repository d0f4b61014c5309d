import pytest

from cart_api.core.exceptions import InvalidTokenError, PermissionDeniedError
from cart_api.core.security import AccessContext, check_api_permission, generate_cart_key, is_uuid


TOKEN = "6f1c2a4e-3b5d-4c7e-8f90-1a2b3c4d5e6f"


def test_permission_not_required():
    """Test requests pass when no token is required."""
    context = AccessContext(require_access_token=False, access_token=TOKEN, requested_token=None)
    assert check_api_permission(context) is True


def test_permission_required_but_no_token_configured():
    """Test requests pass when a token is required but none is configured."""
    context = AccessContext(require_access_token=True, access_token="", requested_token=None)
    assert check_api_permission(context) is True


def test_permission_matching_token():
    """Test a matching token is accepted."""
    context = AccessContext(require_access_token=True, access_token=TOKEN, requested_token=TOKEN)
    assert check_api_permission(context) is True


def test_permission_missing_token():
    """Test a missing token is denied."""
    context = AccessContext(require_access_token=True, access_token=TOKEN, requested_token=None)
    with pytest.raises(PermissionDeniedError) as exc_info:
        check_api_permission(context)
    assert exc_info.value.code == "cocart_rest_permission_denied"
    assert exc_info.value.status_code == 401


def test_permission_malformed_token():
    """Test a token that is not a UUID is rejected as invalid."""
    context = AccessContext(require_access_token=True, access_token=TOKEN, requested_token="not-a-uuid")
    with pytest.raises(InvalidTokenError) as exc_info:
        check_api_permission(context)
    assert exc_info.value.code == "cocart_rest_invalid_token"


def test_permission_wrong_token():
    """Test a well-formed but different token is denied."""
    other = "00000000-0000-4000-8000-000000000000"
    context = AccessContext(require_access_token=True, access_token=TOKEN, requested_token=other)
    with pytest.raises(PermissionDeniedError):
        check_api_permission(context)


def test_is_uuid():
    assert is_uuid(TOKEN)
    assert is_uuid(TOKEN.upper())
    assert not is_uuid("6f1c2a4e3b5d4c7e8f901a2b3c4d5e6f")
    assert not is_uuid("")


def test_generate_cart_key():
    """Test generated cart keys are unique hex strings."""
    keys = {generate_cart_key() for _ in range(50)}
    assert len(keys) == 50
    assert all(len(key) == 32 for key in keys)
