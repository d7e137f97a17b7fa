from fastapi import status
from sqlalchemy.exc import DataError, IntegrityError, OperationalError

from app.core.error_handlers import classify_database_error


def test_integrity_errors_without_driver_detail():
    error = IntegrityError("INSERT INTO people ...", {}, Exception("constraint failed"))
    assert classify_database_error(error) == (
        status.HTTP_400_BAD_REQUEST, "INTEGRITY_ERROR", "Data integrity constraint violated"
    )


def test_data_errors_are_client_errors():
    status_code, error_code, _ = classify_database_error(DataError("SELECT", {}, Exception("bad")))
    assert (status_code, error_code) == (400, "DATA_ERROR")


def test_unknown_database_errors_are_server_errors():
    status_code, error_code, _ = classify_database_error(OperationalError("SELECT", {}, Exception("locked")))
    assert (status_code, error_code) == (500, "DATABASE_ERROR")


def test_caller_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_oversized_body_is_rejected(client):
    response = client.post(
        "/api/v1/auth/login",
        content=b"x" * (1024 * 1024 + 1),
        headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 413
    body = response.json()
    assert body["error_code"] == "REQUEST_TOO_LARGE"
    assert body["request_id"] == response.headers["X-Request-ID"]


def test_error_envelope_shape(client):
    response = client.get("/api/v1/vaccines/", headers={"Authorization": "Bearer broken"})
    body = response.json()
    assert body["error"] is True
    assert body["status_code"] == 401
    assert "timestamp" in body
    assert response.headers["WWW-Authenticate"] == "Bearer"
