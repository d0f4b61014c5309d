import pytest
from httpx import AsyncClient


BATCH_HEADERS = {"Cart-Key": "batch-cart"}


def add_item(product_id, quantity=1, **extra):
    request = {"method": "POST", "path": "/cocart/v2/cart/add-item", "body": {"id": product_id, "quantity": quantity}}
    request.update(extra)
    return request


@pytest.mark.asyncio
async def test_batch_cart_requests_collapse(client: AsyncClient, products):
    """Test a batch of cart requests returns one cart with every notice."""
    response = await client.post(
        "/cocart/batch",
        headers=BATCH_HEADERS,
        json={"requests": [add_item(1), add_item(2, 2)]},
    )
    assert response.status_code == 200
    assert response.headers["CoCart-API-Cart-Key"] == "batch-cart"
    data = response.json()
    assert data["cart_key"] == "batch-cart"
    assert data["item_count"] == 3
    assert [item["name"] for item in data["items"]] == ["Hoodie", "Beanie"]
    assert data["notices"]["success"] == [
        "“Hoodie” has been added to your cart.",
        "“Beanie” has been added to your cart.",
    ]


@pytest.mark.asyncio
async def test_batch_shares_one_cart_without_cart_key(client: AsyncClient, products):
    """Test sub-requests share a cart even when the batch sent no cart key."""
    response = await client.post(
        "/cocart/batch",
        json={"requests": [add_item(1), add_item(1)]},
    )
    data = response.json()
    assert data["cart_key"] == response.headers["CoCart-API-Cart-Key"]
    assert data["items"][0]["quantity"]["value"] == 2


@pytest.mark.asyncio
async def test_batch_mixed_paths_return_every_response(client: AsyncClient, products):
    """Test a batch touching other resources returns the responses in order."""
    response = await client.post(
        "/cocart/batch",
        headers=BATCH_HEADERS,
        json={
            "requests": [
                add_item(1),
                {"method": "POST", "path": "/cocart/v2/store"},
            ]
        },
    )
    assert response.status_code == 207
    responses = response.json()["responses"]
    assert [r["status"] for r in responses] == [200, 405]
    assert responses[0]["body"]["items"][0]["name"] == "Hoodie"
    assert responses[1]["body"] == {
        "code": "rest_no_route",
        "message": "Method Not Allowed",
        "data": {"status": 405},
    }
    assert "failed" not in response.json()


@pytest.mark.asyncio
async def test_batch_invalid_path_dispatches_nothing(client: AsyncClient, products):
    """Test a path with the wrong API version rejects the batch."""
    response = await client.post(
        "/cocart/batch",
        headers=BATCH_HEADERS,
        json={"requests": [add_item(1), {"method": "POST", "path": "/cocart/v1/something"}]},
    )
    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "cocart_rest_invalid_path"
    assert data["message"] == "Invalid path provided."
    assert data["data"]["status"] == 400

    cart = await client.get("/cocart/v2/cart", headers=BATCH_HEADERS)
    assert cart.json()["items"] == []


@pytest.mark.asyncio
@pytest.mark.parametrize("count", [0, 26])
async def test_batch_size_limits(client: AsyncClient, products, count):
    response = await client.post(
        "/cocart/batch",
        headers=BATCH_HEADERS,
        json={"requests": [add_item(1)] * count},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "cocart_rest_invalid_batch_size"


@pytest.mark.asyncio
async def test_batch_rejects_read_methods(client: AsyncClient):
    """Test only write methods are accepted in a batch."""
    response = await client.post(
        "/cocart/batch",
        json={"requests": [{"method": "GET", "path": "/cocart/v2/cart"}]},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "rest_invalid_param"


@pytest.mark.asyncio
async def test_batch_normal_mode_keeps_going_after_failure(client: AsyncClient, products):
    """Test a failed cart request still collapses in normal mode."""
    response = await client.post(
        "/cocart/batch",
        headers=BATCH_HEADERS,
        json={"requests": [add_item(999), add_item(1)]},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["item_count"] == 1
    assert data["notices"]["success"] == ["“Hoodie” has been added to your cart."]


@pytest.mark.asyncio
async def test_batch_require_all_validate_reports_failures(client: AsyncClient, products):
    """Test require-all-validate flags failures without rolling back earlier requests."""
    response = await client.post(
        "/cocart/batch",
        headers=BATCH_HEADERS,
        json={
            "validation": "require-all-validate",
            "requests": [add_item(1), add_item(999), add_item(2)],
        },
    )
    assert response.status_code == 207
    data = response.json()
    assert data["failed"] == "validation"
    assert data["failed_indices"] == [1]
    assert [r["status"] for r in data["responses"]] == [200, 404, 200]
    assert data["responses"][1]["body"]["code"] == "cocart_product_does_not_exist"

    cart = await client.get("/cocart/v2/cart", headers=BATCH_HEADERS)
    assert cart.json()["item_count"] == 2


@pytest.mark.asyncio
async def test_batch_passes_access_token_to_sub_requests(
    client: AsyncClient, products, use_settings, secured_settings, access_token
):
    """Test the batch's access token authorizes every sub-request."""
    use_settings(secured_settings)

    response = await client.post(
        "/cocart/batch",
        headers={**BATCH_HEADERS, "x-cocart-access-token": access_token},
        json={"requests": [add_item(1), add_item(2)]},
    )
    assert response.status_code == 200
    assert response.json()["item_count"] == 2


@pytest.mark.asyncio
async def test_batch_requires_access_token(client: AsyncClient, products, use_settings, secured_settings):
    use_settings(secured_settings)

    response = await client.post(
        "/cocart/batch",
        headers=BATCH_HEADERS,
        json={"requests": [add_item(1)]},
    )
    assert response.status_code == 401
    assert response.json()["code"] == "cocart_rest_permission_denied"


@pytest.mark.asyncio
async def test_sub_request_token_is_still_checked(
    client: AsyncClient, products, use_settings, secured_settings, access_token
):
    """Test a sub-request sending its own wrong token is denied in its slot."""
    use_settings(secured_settings)
    wrong_token = {"x-cocart-access-token": "00000000-0000-4000-8000-000000000000"}

    response = await client.post(
        "/cocart/batch",
        headers={**BATCH_HEADERS, "x-cocart-access-token": access_token},
        json={
            "validation": "require-all-validate",
            "requests": [add_item(1, headers=wrong_token), add_item(2)],
        },
    )
    assert response.status_code == 207
    data = response.json()
    assert data["failed_indices"] == [0]
    assert data["responses"][0]["status"] == 401
    assert data["responses"][0]["body"]["code"] == "cocart_rest_permission_denied"
    assert data["responses"][1]["status"] == 200


@pytest.mark.asyncio
async def test_batch_sub_request_query_string(client: AsyncClient, products):
    """Test query parameters in sub-request paths reach the cart route."""
    response = await client.post(
        "/cocart/batch",
        headers=BATCH_HEADERS,
        json={
            "requests": [
                add_item(1),
                {"method": "POST", "path": "/cocart/v2/cart/add-item?prices=formatted", "body": {"id": 2}},
            ]
        },
    )
    data = response.json()
    assert data["totals"]["total"] == "$63.00"


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/cocart/v2/../batch", "/cocart/v2/../v1/anything", "/cocart/v2/%2e%2e/batch"])
async def test_batch_rejects_paths_escaping_namespace(client: AsyncClient, products, path):
    """Test dot segments cannot reach routes outside the API namespace."""
    inner = {"requests": [add_item(1)]}
    response = await client.post(
        "/cocart/batch",
        headers=BATCH_HEADERS,
        json={"requests": [add_item(1), {"method": "POST", "path": path, "body": inner}]},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "cocart_rest_invalid_path"

    cart = await client.get("/cocart/v2/cart", headers=BATCH_HEADERS)
    assert cart.json()["items"] == []


@pytest.mark.asyncio
async def test_batch_dispatches_resolved_path(client: AsyncClient, products):
    """Test a path leaving the cart resource is not collapsed as a cart request."""
    response = await client.post(
        "/cocart/batch",
        headers=BATCH_HEADERS,
        json={"requests": [add_item(1), {"method": "POST", "path": "/cocart/v2/cart/../../v2/store"}]},
    )
    assert response.status_code == 207
    responses = response.json()["responses"]
    assert [r["status"] for r in responses] == [200, 405]
    assert responses[1]["body"]["code"] == "rest_no_route"


@pytest.mark.asyncio
async def test_unknown_route_uses_error_body(client: AsyncClient):
    response = await client.get("/cocart/v2/nothing-here")
    assert response.status_code == 404
    assert response.json() == {"code": "rest_no_route", "message": "Not Found", "data": {"status": 404}}
