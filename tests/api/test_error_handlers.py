import errno
from unittest.mock import AsyncMock

from sqlalchemy.exc import OperationalError

from app.config import settings

LOGIN_BODY = {"email": "a@b.co", "password": "secret1"}


def test_database_error_is_masked(client, user_db_handler):
    user_db_handler.get_user_by_email = AsyncMock(
        side_effect=OperationalError("SELECT", {}, Exception("password authentication failed"))
    )

    response = client.post("/api/auth/login", json=LOGIN_BODY)

    assert response.status_code == 500
    assert response.json() == {"message": "A database error occurred."}


def test_unreachable_database_maps_to_503(client, user_db_handler):
    user_db_handler.get_user_by_email = AsyncMock(
        side_effect=OSError(errno.ECONNREFUSED, "Connection refused")
    )

    response = client.post("/api/auth/login", json=LOGIN_BODY)

    assert response.status_code == 503
    assert response.json() == {"message": settings.db_unavailable_hint}


def test_other_os_error_maps_to_500(client, user_db_handler):
    user_db_handler.get_user_by_email = AsyncMock(
        side_effect=OSError(errno.EACCES, "Permission denied")
    )

    response = client.post("/api/auth/login", json=LOGIN_BODY)

    assert response.status_code == 500
    assert response.json() == {"message": "A server error occurred."}


def test_app_error_body_carries_code(client):
    response = client.get("/api/auth/me")

    assert response.json() == {"message": "No access token.", "code": "NO_ACCESS_TOKEN"}


def test_invalid_query_parameter_maps_to_400(client):
    response = client.get("/api/images", params={"page": "first"})

    assert response.status_code == 400
    assert set(response.json()) == {"message"}
