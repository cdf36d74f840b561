from app.models.user import UserRole


class TestUserRoutes:

    def test_read_me(self, client, login_as, attendee):
        login_as(attendee)
        response = client.get("/api/users/me")

        assert response.status_code == 200
        data = response.json()
        assert data["email"] == "attendee@example.com"
        assert data["role"] == "user"
        assert data["isTestUser"] is False

    def test_first_user_becomes_admin(self, client, login_as, attendee):
        login_as(attendee)
        response = client.post("/api/update-user-role")

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "User role updated to admin successfully",
            "role": "admin",
        }

    def test_promotion_refused_once_admin_exists(self, client, login_as, make_user, attendee):
        make_user(role=UserRole.ADMIN)
        login_as(attendee)

        response = client.post("/api/update-user-role")

        assert response.status_code == 403
        assert response.json()["detail"] == "Not authorized to grant admin role"
