class TestProfileEndpoints:
    def test_get_profile(self, client, auth_headers, user):
        resp = client.get("/profile", headers=auth_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["id"] == str(user.id)
        assert data["full_name"] == "Test User"

    def test_update_profile(self, client, auth_headers):
        resp = client.patch(
            "/profile",
            json={"full_name": "Layla Hassan", "email": "layla@example.com"},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["full_name"] == "Layla Hassan"
        assert resp.json()["email"] == "layla@example.com"

    def test_update_profile_invalid_email(self, client, auth_headers):
        resp = client.patch("/profile", json={"email": "nope"}, headers=auth_headers)
        assert resp.status_code == 422

    def test_mobile_number_not_updatable(self, client, auth_headers):
        resp = client.patch(
            "/profile", json={"mobile_number": "+971500000000"}, headers=auth_headers
        )
        assert resp.status_code == 200
        assert resp.json()["mobile_number"] == "+971501234567"

    def test_profile_is_per_user(self, client, auth_headers, other_auth_headers, other_user):
        resp = client.get("/profile", headers=other_auth_headers)
        assert resp.json()["id"] == str(other_user.id)
