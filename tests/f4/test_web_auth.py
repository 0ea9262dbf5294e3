"""Tests for health, auth and user administration endpoints (F4)."""


class TestHealth:
    """Tests for GET /health."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["database"] == "ok"
        assert data["version"] == "0.1.0"
        assert data["timestamp"]

    def test_health_reports_unreachable_database(self, client, tmp_path, monkeypatch):
        from quizdesk.db import database

        # A directory can't be opened as a database file
        monkeypatch.setattr(database, "_db_path", tmp_path)
        response = client.get("/health")
        assert response.status_code == 503
        assert response.json()["status"] == "degraded"
        assert response.json()["database"] == "unavailable"


class TestAuthFlow:
    """Sign-up, sign-in, /me and sign-out."""

    def test_signup_is_pending(self, client):
        response = client.post(
            "/api/auth/signup",
            json={
                "email": "new@example.com",
                "password": "secret1",
                "full_name": "New Person",
                "role": "instructor",
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["verified"] is False
        assert data["roles"] == ["instructor"]

    def test_signup_validation_error(self, client):
        response = client.post(
            "/api/auth/signup",
            json={"email": "bad", "password": "secret1", "full_name": "X", "role": "student"},
        )
        assert response.status_code == 422
        assert response.json()["detail"][0]["loc"] == ["body", "email"]

    def test_signup_short_password(self, client):
        response = client.post(
            "/api/auth/signup",
            json={"email": "new@example.com", "password": "abc", "full_name": "X", "role": "student"},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Password must be at least 6 characters"

    def test_signup_duplicate(self, client, student):
        response = client.post(
            "/api/auth/signup",
            json={"email": student.email, "password": "secret1", "full_name": "X", "role": "student"},
        )
        assert response.status_code == 409

    def test_signin_and_me(self, client, student):
        response = client.post(
            "/api/auth/signin", json={"email": student.email, "password": "secret123"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["user"]["email"] == student.email

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
        assert me.status_code == 200
        assert me.json()["full_name"] == "Sam Student"

    def test_signin_wrong_password(self, client, student):
        response = client.post(
            "/api/auth/signin", json={"email": student.email, "password": "nope-nope"}
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_me_requires_token(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    def test_me_with_unknown_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid session"

    def test_signout(self, client, student, login):
        headers = login(student)
        assert client.post("/api/auth/signout", headers=headers).json() == {"success": True}
        assert client.get("/api/auth/me", headers=headers).status_code == 401


class TestGuards:
    """Role and approval checks."""

    def test_pending_user_sees_me_but_nothing_else(self, client, make_user, login):
        pending = make_user("instructor", verified=False)
        headers = login(pending)

        assert client.get("/api/auth/me", headers=headers).json()["verified"] is False
        response = client.get("/api/assignments", headers=headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Your account is pending approval"

    def test_student_cannot_use_instructor_routes(self, client, student_headers):
        response = client.get("/api/assignments", headers=student_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Instructor access required"

    def test_instructor_cannot_use_admin_routes(self, client, instructor_headers):
        response = client.get("/api/admin/users", headers=instructor_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"

    def test_admin_passes_instructor_routes(self, client, admin_headers):
        response = client.get("/api/assignments", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"assignments": [], "count": 0}


class TestAdminUsers:
    """Tests for /api/admin/users."""

    def test_list_and_approve(self, client, admin_headers, make_user):
        pending = make_user("student", verified=False, name="Pat Pending")

        data = client.get("/api/admin/users", headers=admin_headers).json()
        assert [u["id"] for u in data["pending"]] == [pending.id]
        assert data["pending"][0]["role"] == "student"

        response = client.post(f"/api/admin/users/{pending.id}/approve", headers=admin_headers)
        assert response.status_code == 200

        data = client.get("/api/admin/users", headers=admin_headers).json()
        assert data["pending"] == []
        assert pending.id in [u["id"] for u in data["verified"]]

    def test_revoke(self, client, admin_headers, student):
        client.post(f"/api/admin/users/{student.id}/revoke", headers=admin_headers)
        data = client.get("/api/admin/users", headers=admin_headers).json()
        assert [u["id"] for u in data["pending"]] == [student.id]

    def test_reject(self, client, admin_headers, make_user):
        pending = make_user("student", verified=False)
        response = client.post(f"/api/admin/users/{pending.id}/reject", headers=admin_headers)
        assert response.status_code == 200
        data = client.get("/api/admin/users", headers=admin_headers).json()
        assert data["pending"] == []

    def test_unknown_user(self, client, admin_headers):
        response = client.post("/api/admin/users/missing/approve", headers=admin_headers)
        assert response.status_code == 404

    def test_delete(self, client, admin_headers, student):
        response = client.delete(f"/api/admin/users/{student.id}", headers=admin_headers)
        assert response.json() == {"success": True}
        data = client.get("/api/admin/users", headers=admin_headers).json()
        assert student.id not in [u["id"] for u in data["verified"]]
