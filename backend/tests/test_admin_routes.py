"""
Tests for the admin routes.

Validates:
1. Only administrators may read analytics or change roles
2. Analytics counts users by role, ideas by phase, accepted collaborations and likes
3. Role changes apply immediately to the affected user's next request
"""

from backend.models_db import Collaboration
from conftest import auth_headers, create_idea, make_admin, register


def _admin(client, session_factory):
    token, user = register(client, name="Root")
    make_admin(session_factory, user["id"])
    return token, user


class TestAnalytics:
    """Test GET /api/admin/analytics."""

    def test_requires_authentication(self, client):
        assert client.get("/api/admin/analytics").status_code == 401

    def test_requires_admin(self, client):
        token, _ = register(client, role="mentor")
        response = client.get("/api/admin/analytics", headers=auth_headers(token))
        assert response.status_code == 403
        assert response.json() == {"error": "Forbidden", "message": "Admin access required"}

    def test_counts(self, client, session_factory, db):
        admin_token, _ = _admin(client, session_factory)
        token_a, user_a = register(client, name="Ada")
        token_b, user_b = register(client, name="Bob", role="mentor")
        token_c, user_c = register(client, name="Cy")

        spark = create_idea(client, token_a, title="Spark")
        create_idea(client, token_a, title="Plan", phase="Plan & Strategy")
        create_idea(client, token_b, title="Launch", phaseIndex=4)

        client.post(f"/api/ideas/{spark['id']}/like", headers=auth_headers(token_b))
        client.post(f"/api/ideas/{spark['id']}/like", headers=auth_headers(token_c))
        db.add_all([
            Collaboration(idea_id=spark["id"], user_id=user_b["id"], status="accepted"),
            Collaboration(idea_id=spark["id"], user_id=user_c["id"], status="pending"),
        ])
        db.commit()

        response = client.get("/api/admin/analytics", headers=auth_headers(admin_token))
        assert response.status_code == 200
        data = response.json()
        assert {r["role"]: r["count"] for r in data["users"]} == {"admin": 1, "employee": 2, "mentor": 1}
        assert data["ideas"] == [
            {"phase": "Idea Spark", "count": 1},
            {"phase": "Plan & Strategy", "count": 1},
            {"phase": "Launch Ready", "count": 1},
        ]
        assert data["collaborations"] == 1
        assert data["totalLikes"] == 2

    def test_empty_platform(self, client, session_factory):
        admin_token, _ = _admin(client, session_factory)
        data = client.get("/api/admin/analytics", headers=auth_headers(admin_token)).json()
        assert data["users"] == [{"role": "admin", "count": 1}]
        assert data["ideas"] == []
        assert data["collaborations"] == 0
        assert data["totalLikes"] == 0


class TestRoleUpdate:
    """Test PUT /api/admin/users/{id}/role."""

    def test_admin_grants_role(self, client, session_factory):
        admin_token, _ = _admin(client, session_factory)
        token, user = register(client, name="Ada")
        response = client.put(
            f"/api/admin/users/{user['id']}/role", json={"role": "mentor"}, headers=auth_headers(admin_token)
        )
        assert response.status_code == 200
        assert response.json()["role"] == "mentor"

        verified = client.get("/api/auth/verify", headers=auth_headers(token)).json()
        assert verified["user"]["role"] == "mentor"

    def test_promotion_takes_effect_without_new_token(self, client, session_factory):
        admin_token, _ = _admin(client, session_factory)
        token, user = register(client, name="Ada")
        assert client.get("/api/admin/analytics", headers=auth_headers(token)).status_code == 403
        client.put(
            f"/api/admin/users/{user['id']}/role", json={"role": "admin"}, headers=auth_headers(admin_token)
        )
        assert client.get("/api/admin/analytics", headers=auth_headers(token)).status_code == 200

    def test_non_admin_forbidden(self, client):
        token, user = register(client, name="Ada")
        response = client.put(
            f"/api/admin/users/{user['id']}/role", json={"role": "admin"}, headers=auth_headers(token)
        )
        assert response.status_code == 403

    def test_unknown_user(self, client, session_factory):
        admin_token, _ = _admin(client, session_factory)
        response = client.put(
            "/api/admin/users/nobody/role", json={"role": "mentor"}, headers=auth_headers(admin_token)
        )
        assert response.status_code == 404

    def test_unknown_role(self, client, session_factory):
        admin_token, user = _admin(client, session_factory)
        response = client.put(
            f"/api/admin/users/{user['id']}/role", json={"role": "owner"}, headers=auth_headers(admin_token)
        )
        assert response.status_code == 400
