"""Tests for the httpx API client."""

import asyncio
from uuid import uuid4

import httpx
import pytest

from image_vault.client.api_client import ApiError, HttpxApiClient
from tests.conftest import InMemoryTokenStorage, make_file, make_image_payload


def _client(handler, token: str | None = None) -> HttpxApiClient:
    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport, base_url="https://api.test")
    return HttpxApiClient(
        http_client=async_client, token_storage=InMemoryTokenStorage(token)
    )


def _user_json() -> dict[str, object]:
    return {
        "id": str(uuid4()),
        "email": "user@example.com",
        "createdAt": "2024-01-15T15:45:00Z",
        "updatedAt": None,
    }


def test_login_posts_credentials_and_parses_user() -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = request.content
        return httpx.Response(
            200,
            json={
                "success": True,
                "message": "Login successful.",
                "user": _user_json(),
                "token": "jwt",
            },
        )

    client = _client(handler)
    response = asyncio.run(client.login("user@example.com", "pw"))

    assert seen["path"] == "/api/auth/login"
    assert b"user@example.com" in seen["body"]  # type: ignore[operator]
    assert response.user.email == "user@example.com"
    assert response.token == "jwt"
    assert response.message == "Login successful."


def test_requests_carry_stored_bearer_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer stored-token"
        return httpx.Response(200, json={"success": True, "user": _user_json()})

    client = _client(handler, token="stored-token")
    user = asyncio.run(client.get_current_user())

    assert user.email == "user@example.com"


def test_upload_sends_multipart_image_field() -> None:
    image = make_image_payload("cat.png")

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/images/upload"
        assert request.headers["content-type"].startswith("multipart/form-data")
        assert b'name="image"; filename="cat.png"' in request.content
        return httpx.Response(
            201,
            json={
                "message": "Image uploaded successfully",
                "image": image.to_json_dict(),
            },
        )

    client = _client(handler)
    uploaded = asyncio.run(client.upload_image(make_file("cat.png")))

    assert uploaded == image


def test_list_and_delete_images() -> None:
    images = [make_image_payload("a.png"), make_image_payload("b.png")]
    deleted: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "DELETE":
            deleted.append(request.url.path)
            return httpx.Response(200, json={"message": "Image deleted successfully"})
        return httpx.Response(
            200, json={"images": [image.to_json_dict() for image in images]}
        )

    client = _client(handler)
    listed = asyncio.run(client.list_images())
    asyncio.run(client.delete_image(images[0].id))

    assert [image.filename for image in listed] == ["a.png", "b.png"]
    assert deleted == [f"/api/images/{images[0].id}"]


def test_error_response_uses_server_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            401, json={"success": False, "error": "Not authenticated."}
        )

    client = _client(handler)

    with pytest.raises(ApiError) as exc_info:
        asyncio.run(client.get_current_user())

    assert exc_info.value.message == "Not authenticated."
    assert exc_info.value.status_code == 401
    assert exc_info.value.is_unauthenticated


def test_error_response_without_json_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="Bad gateway")

    client = _client(handler)

    with pytest.raises(ApiError) as exc_info:
        asyncio.run(client.list_images())

    assert exc_info.value.message == "Request failed with status code 502"
    assert not exc_info.value.is_unauthenticated


def test_unsuccessful_reply_is_rejected() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": False})

    client = _client(handler)

    with pytest.raises(ApiError) as exc_info:
        asyncio.run(client.get_current_user())

    assert exc_info.value.status_code == 200
    assert exc_info.value.rejected
    assert exc_info.value.ends_session
    assert exc_info.value.message == "Request was not successful."


@pytest.mark.parametrize(
    "body",
    [
        {"message": "ok"},
        {"user": {"email": "user@example.com"}},
        {"images": None},
        {"images": [{"id": "not-a-uuid"}]},
    ],
)
def test_malformed_reply_raises_api_error(body: dict[str, object]) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=body)

    client = _client(handler)

    async def scenario() -> None:
        if "images" in body:
            await client.list_images()
        else:
            await client.get_current_user()

    with pytest.raises(ApiError) as exc_info:
        asyncio.run(scenario())

    assert exc_info.value.message == "Unexpected response from server."
    assert not exc_info.value.ends_session


def test_transport_failure_has_no_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)

    with pytest.raises(ApiError) as exc_info:
        asyncio.run(client.list_images())

    assert exc_info.value.status_code is None
    assert exc_info.value.message == "connection refused"
