import base64

import pytest

from app.dependencies.images import get_image_service
from app.services.image_service import ImageService
from app.utils.auth import create_access_token


@pytest.fixture
def authed_client(client):
    client.cookies.set("accessToken", create_access_token(1))
    return client


def test_health(client):
    response = client.get("/api/")

    assert response.status_code == 200
    assert response.json() == {"message": "Image Gallery API is running!"}


class TestGenerate:
    def test_requires_access_cookie(self, client, image_db_handler):
        response = client.post("/api/generate-image", json={"prompt": "a red fox"})

        assert response.status_code == 401
        assert response.json()["code"] == "NO_ACCESS_TOKEN"
        assert image_db_handler.images == []

    def test_generate_image(self, authed_client, upload_root):
        response = authed_client.post("/api/generate-image", json={"prompt": "a red fox"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["imageUrl"].startswith("/api/uploads/images/1/")
        assert (upload_root / "images" / "1" / body["imageUrl"].rsplit("/", 1)[-1]).is_file()

    def test_empty_prompt(self, authed_client):
        response = authed_client.post("/api/generate-image", json={"prompt": "  "})

        assert response.status_code == 400

    def test_provider_failure(self, app, authed_client, image_db_handler, failing_provider):
        app.dependency_overrides[get_image_service] = lambda: ImageService(
            image_db_handler=image_db_handler,
            provider_getter=lambda provider_name: failing_provider,
        )

        response = authed_client.post("/api/generate-image", json={"prompt": "a red fox"})

        assert response.status_code == 500
        assert response.json()["message"] == "Image generation failed."

    def test_preview(self, authed_client, image_db_handler, png_b64):
        response = authed_client.post("/api/generate-image-preview", json={"prompt": "a red fox"})

        assert response.status_code == 200
        assert response.json()["dataUrl"] == f"data:image/png;base64,{png_b64}"
        assert image_db_handler.images == []


class TestGallery:
    def test_list_and_detail(self, authed_client):
        for prompt in ("first", "second"):
            authed_client.post("/api/generate-image", json={"prompt": prompt})

        listing = authed_client.get("/api/images", params={"page": 1, "limit": 1})

        assert listing.status_code == 200
        body = listing.json()
        assert body["totalCount"] == 2
        assert body["totalPages"] == 2
        assert body["currentPage"] == 1
        assert body["hasNextPage"] is True
        assert body["hasPrevPage"] is False
        newest = body["images"][0]
        assert newest["prompt"] == "second"
        assert newest["user"] == {"id": 1, "nickname": "Al"}

        detail = authed_client.get(f"/api/images/{newest['id']}")

        assert detail.status_code == 200
        assert detail.json()["image"]["imageUrl"] == newest["imageUrl"]

    def test_limit_is_clamped(self, client):
        response = client.get("/api/images", params={"page": 0, "limit": 1000})

        assert response.status_code == 200
        assert response.json()["currentPage"] == 1

    def test_user_images(self, authed_client):
        authed_client.post("/api/generate-image", json={"prompt": "mine"})

        response = authed_client.get("/api/images/user", params={"userId": 1})

        assert response.status_code == 200
        assert [image["prompt"] for image in response.json()["images"]] == ["mine"]

    def test_user_images_requires_user_id(self, client):
        response = client.get("/api/images/user")

        assert response.status_code == 400

    def test_unknown_image(self, client):
        response = client.get("/api/images/99")

        assert response.status_code == 404
        assert response.json()["message"] == "Image not found."

    def test_non_numeric_image_id(self, client):
        response = client.get("/api/images/abc")

        assert response.status_code == 400


class TestUploads:
    def test_serves_generated_image(self, authed_client, png_b64):
        image_url = authed_client.post(
            "/api/generate-image", json={"prompt": "a red fox"}
        ).json()["imageUrl"]

        response = authed_client.get(image_url)

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.headers["cache-control"] == "public, max-age=31536000, immutable"
        assert response.content == base64.b64decode(png_b64)

    def test_content_type_from_extension(self, client, upload_root):
        target = upload_root / "images" / "3" / "photo.jpg"
        target.parent.mkdir(parents=True)
        target.write_bytes(b"jpeg-bytes")

        response = client.get("/api/uploads/images/3/photo.jpg")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/jpeg"
        assert response.content == b"jpeg-bytes"

    def test_missing_file(self, client, upload_root):
        response = client.get("/api/uploads/images/1/missing.png")

        assert response.status_code == 404
        assert response.text == "File not found"

    def test_directory_is_not_served(self, client, upload_root):
        (upload_root / "images" / "1").mkdir(parents=True)

        response = client.get("/api/uploads/images/1")

        assert response.status_code == 404
