"""Tests for the PicStyle HTTP API."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING
from unittest.mock import patch

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable
    from pathlib import Path

import httpx
import pytest
from fastapi import FastAPI, status

from picstyle.config import get_settings
from picstyle.imaging.codec import decode
from picstyle.main import create_app, init_state
from picstyle.pool import ConversionPool


def _init_app_state(app: FastAPI, output_dir: Path, **env_overrides: str) -> None:
    """Manually initialize app state (ASGITransport does not trigger lifespan)."""
    with patch.dict(os.environ, {"PICSTYLE_OUTPUT_DIR": str(output_dir), **env_overrides}):
        settings = get_settings()
    init_state(app, settings)


async def _make_client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    ) as ac:
        yield ac
    pool: ConversionPool = app.state.conversion_pool
    pool.shutdown()


def _image_files(photo_bytes: Callable[..., bytes], count: int) -> list[tuple[str, tuple[str, bytes, str]]]:
    return [("images", (f"ref{i}.png", photo_bytes(60, 40), "image/png")) for i in range(count)]


@pytest.fixture()
def app(tmp_path: Path) -> FastAPI:
    """Create a fresh app instance with default settings."""
    application = create_app()
    _init_app_state(application, tmp_path)
    return application


@pytest.fixture()
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    """Async HTTP client for testing the app."""
    async for ac in _make_client(app):
        yield ac


async def _create_template(client: httpx.AsyncClient, photo_bytes: Callable[..., bytes]) -> dict[str, object]:
    response = await client.post(
        "/api/v1/templates",
        data={"name": "comic"},
        files=_image_files(photo_bytes, 5),
    )
    assert response.status_code == status.HTTP_201_CREATED
    template: dict[str, object] = response.json()
    return template


class TestHealthEndpoint:
    async def test_health_returns_ok(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/v1/health")
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "ok"
        assert data["templates"] == 0
        assert data["concurrent_requests"] == 0
        assert data["queue_depth"] == 0


class TestTemplateEndpoints:
    async def test_list_starts_empty(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/v1/templates")
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == []

    async def test_create_template(self, client: httpx.AsyncClient, photo_bytes: Callable[..., bytes]) -> None:
        template = await _create_template(client, photo_bytes)
        assert template["name"] == "comic"
        assert template["image_count"] == 5
        assert template["thumbnail_url"] == f"/api/v1/outputs/thumbnail-{template['id']}.jpg"
        assert str(template["model"]).startswith("heuristic:")
        assert template["style_parameters"] == {
            "saturation_factor": 0.5,
            "quantization_step": 32,
            "edge_threshold": 100,
        }

        listed = (await client.get("/api/v1/templates")).json()
        assert [t["id"] for t in listed] == [template["id"]]

    async def test_thumbnail_is_served(self, client: httpx.AsyncClient, photo_bytes: Callable[..., bytes]) -> None:
        template = await _create_template(client, photo_bytes)
        response = await client.get(str(template["thumbnail_url"]))
        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"] == "image/jpeg"
        assert decode(response.content).size == (200, 200)

    async def test_too_few_images(self, client: httpx.AsyncClient, photo_bytes: Callable[..., bytes]) -> None:
        response = await client.post(
            "/api/v1/templates",
            data={"name": "comic"},
            files=_image_files(photo_bytes, 4),
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "between 5 and 10" in response.json()["detail"]

    async def test_missing_name(self, client: httpx.AsyncClient, photo_bytes: Callable[..., bytes]) -> None:
        response = await client.post("/api/v1/templates", files=_image_files(photo_bytes, 5))
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "name" in response.json()["detail"]

    async def test_no_images(self, client: httpx.AsyncClient) -> None:
        response = await client.post("/api/v1/templates", data={"name": "comic"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "between 5 and 10" in response.json()["detail"]

    async def test_unsupported_image(self, client: httpx.AsyncClient, photo_bytes: Callable[..., bytes]) -> None:
        files = [("images", ("bad.txt", b"hello", "text/plain"))] + _image_files(photo_bytes, 4)
        response = await client.post("/api/v1/templates", data={"name": "comic"}, files=files)
        assert response.status_code == status.HTTP_415_UNSUPPORTED_MEDIA_TYPE

    async def test_delete_template(self, client: httpx.AsyncClient, photo_bytes: Callable[..., bytes]) -> None:
        template = await _create_template(client, photo_bytes)
        response = await client.delete(f"/api/v1/templates/{template['id']}")
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"success": True}

        again = await client.delete(f"/api/v1/templates/{template['id']}")
        assert again.status_code == status.HTTP_404_NOT_FOUND


class TestConvertEndpoint:
    async def test_convert_both(self, client: httpx.AsyncClient, photo_bytes: Callable[..., bytes]) -> None:
        template = await _create_template(client, photo_bytes)
        response = await client.post(
            "/api/v1/convert",
            data={"template_id": str(template["id"]), "generate_outline": "true", "generate_colored": "true"},
            files={"photo": ("photo.png", photo_bytes(400, 300), "image/png")},
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert set(data) == {"outline", "colored"}

        for url in data.values():
            artifact = await client.get(url)
            assert artifact.status_code == status.HTTP_200_OK
            assert decode(artifact.content).size == (800, 600)

    async def test_convert_outline_only(self, client: httpx.AsyncClient, photo_bytes: Callable[..., bytes]) -> None:
        template = await _create_template(client, photo_bytes)
        response = await client.post(
            "/api/v1/convert",
            data={"template_id": str(template["id"]), "generate_outline": "true"},
            files={"photo": ("photo.png", photo_bytes(400, 300), "image/png")},
        )
        assert response.status_code == status.HTTP_200_OK
        assert list(response.json()) == ["outline"]

    async def test_unknown_template(self, client: httpx.AsyncClient, photo_bytes: Callable[..., bytes]) -> None:
        response = await client.post(
            "/api/v1/convert",
            data={"template_id": "missing", "generate_outline": "true"},
            files={"photo": ("photo.png", photo_bytes(10, 10), "image/png")},
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_bad_photo(self, client: httpx.AsyncClient, photo_bytes: Callable[..., bytes]) -> None:
        template = await _create_template(client, photo_bytes)
        response = await client.post(
            "/api/v1/convert",
            data={"template_id": str(template["id"]), "generate_colored": "true"},
            files={"photo": ("photo.png", b"garbage", "image/png")},
        )
        assert response.status_code == status.HTTP_415_UNSUPPORTED_MEDIA_TYPE

    async def test_missing_photo(self, client: httpx.AsyncClient) -> None:
        response = await client.post("/api/v1/convert", data={"template_id": "x"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "required" in response.json()["detail"]

    async def test_missing_template_id(self, client: httpx.AsyncClient, photo_bytes: Callable[..., bytes]) -> None:
        response = await client.post(
            "/api/v1/convert",
            files={"photo": ("photo.png", photo_bytes(10, 10), "image/png")},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_upload_size_limit(self, tmp_path: Path, photo_bytes: Callable[..., bytes]) -> None:
        app = create_app()
        _init_app_state(app, tmp_path, PICSTYLE_MAX_FILE_SIZE="64")
        async for ac in _make_client(app):
            response = await ac.post(
                "/api/v1/convert",
                data={"template_id": "x", "generate_outline": "true"},
                files={"photo": ("photo.png", photo_bytes(400, 300), "image/png")},
            )
            assert response.status_code == status.HTTP_413_REQUEST_ENTITY_TOO_LARGE


class TestOutputsEndpoint:
    async def test_missing_artifact(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/v1/outputs/nothing.jpg")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_invalid_name(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/v1/outputs/.hidden")
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestAuthentication:
    async def test_no_auth_required_by_default(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/v1/health")
        assert response.status_code == status.HTTP_200_OK

    async def test_auth_required_when_api_key_set(self, tmp_path: Path) -> None:
        app = create_app()
        _init_app_state(app, tmp_path, PICSTYLE_API_KEY="test-secret-key")
        async for ac in _make_client(app):
            response = await ac.get("/api/v1/templates")
            assert response.status_code in (
                status.HTTP_401_UNAUTHORIZED,
                status.HTTP_403_FORBIDDEN,
            )

    async def test_auth_passes_with_correct_key(self, tmp_path: Path) -> None:
        app = create_app()
        _init_app_state(app, tmp_path, PICSTYLE_API_KEY="test-secret-key")
        async for ac in _make_client(app):
            response = await ac.get(
                "/api/v1/templates",
                headers={"Authorization": "Bearer test-secret-key"},
            )
            assert response.status_code == status.HTTP_200_OK

    async def test_auth_fails_with_wrong_key(self, tmp_path: Path) -> None:
        app = create_app()
        _init_app_state(app, tmp_path, PICSTYLE_API_KEY="test-secret-key")
        async for ac in _make_client(app):
            response = await ac.get(
                "/api/v1/health",
                headers={"Authorization": "Bearer wrong-key"},
            )
            assert response.status_code in (
                status.HTTP_401_UNAUTHORIZED,
                status.HTTP_403_FORBIDDEN,
            )


class TestBusyPool:
    async def test_saturated_pool_returns_503(
        self, app: FastAPI, client: httpx.AsyncClient, photo_bytes: Callable[..., bytes]
    ) -> None:
        app.state.conversion_pool.shutdown()
        pool = ConversionPool(app.state.settings, timeout=0.05)
        app.state.conversion_pool = pool
        await pool._semaphore.acquire()
        try:
            response = await client.post(
                "/api/v1/templates",
                data={"name": "comic"},
                files=_image_files(photo_bytes, 5),
            )
        finally:
            pool._semaphore.release()

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json() == {"detail": "Server busy, try again later"}
        assert pool.queue_depth == 0
        assert (await client.get("/api/v1/templates")).json() == []
