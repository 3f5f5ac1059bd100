# mypy: ignore-errors
"""Tests for photo uploads."""

from fastapi import status


def test_upload_image(client, auth_token, blob_store, test_user) -> None:
    response = client.post(
        "/api/v1/uploads/",
        files={"file": ("pothole.jpg", b"\xff\xd8\xff", "image/jpeg")},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_201_CREATED
    url = response.json()["url"]
    assert url.startswith(f"/static/uploads/{test_user.id}/")
    assert blob_store.path_for(url).read_bytes() == b"\xff\xd8\xff"


def test_upload_rejects_other_files(client, auth_token, blob_store) -> None:
    response = client.post(
        "/api/v1/uploads/",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_upload_requires_auth(client, blob_store) -> None:
    response = client.post("/api/v1/uploads/", files={"file": ("a.png", b"x", "image/png")})
    assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)
