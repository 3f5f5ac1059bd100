# mypy: ignore-errors
"""Tests for profile endpoints."""

from fastapi import status

from fixmyhood.models import BadgeType, UserBadge
from tests.conftest import auth_headers


def test_bootstrap_creates_profile_from_claims(client) -> None:
    headers = auth_headers("new-user", email="jane.doe@example.com")

    first = client.post("/api/v1/profiles/me", headers=headers)
    second = client.post("/api/v1/profiles/me", headers=headers)

    assert first.status_code == status.HTTP_201_CREATED
    assert first.json()["display_name"] == "jane.doe"
    assert first.json()["unlocked_frames"] == ["default"]
    assert second.status_code == status.HTTP_200_OK
    assert second.json()["id"] == "new-user"


def test_bootstrap_prefers_full_name(client) -> None:
    headers = auth_headers("named", user_metadata={"full_name": "Sam Rivera"}, email="sam@example.com")

    assert client.post("/api/v1/profiles/me", headers=headers).json()["display_name"] == "Sam Rivera"


def test_me_requires_existing_profile(client) -> None:
    response = client.get("/api/v1/profiles/me", headers=auth_headers("ghost"))
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_invalid_token_is_rejected(client) -> None:
    response = client.get("/api/v1/profiles/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_me_lists_badges_and_frames(client, db_session, test_user, auth_token) -> None:
    db_session.add(UserBadge(user_id=test_user.id, badge_type=BadgeType.HELPER.value))
    db_session.commit()

    body = client.get("/api/v1/profiles/me", headers=auth_token).json()

    assert [b["badge_type"] for b in body["badges"]] == ["helper"]
    assert body["unlocked_frames"] == ["default", "helper"]


def test_locked_frame_cannot_be_selected(client, auth_token) -> None:
    response = client.patch("/api/v1/profiles/me/frame", json={"frame": "resolver"}, headers=auth_token)
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_unlocked_frame_can_be_selected(client, db_session, test_user, auth_token) -> None:
    db_session.add(UserBadge(user_id=test_user.id, badge_type=BadgeType.FIRST_REPORT.value))
    db_session.commit()

    response = client.patch("/api/v1/profiles/me/frame", json={"frame": "first_report"}, headers=auth_token)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["active_frame"] == "first_report"


def test_leaderboard_orders_by_points_and_skips_banned(client, make_profile) -> None:
    low = make_profile(points=5)
    high = make_profile(points=50)
    make_profile(points=500, is_banned=True)

    ids = [p["id"] for p in client.get("/api/v1/profiles/leaderboard").json()]

    assert ids.index(high.id) < ids.index(low.id)
    assert len(ids) == 2


def test_public_profile(client, make_report, test_user) -> None:
    make_report(test_user)

    body = client.get(f"/api/v1/profiles/{test_user.id}").json()

    assert body["report_count"] == 1
    assert "is_admin" not in body
    assert client.get("/api/v1/profiles/nobody").status_code == status.HTTP_404_NOT_FOUND
