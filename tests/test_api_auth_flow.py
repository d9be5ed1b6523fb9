from fastapi.testclient import TestClient

from app.main import create_app
from app.services.otp_provider import OTPProvider


def _sign_in(client, mobile="050 123 4567"):
    resp = client.post("/auth/verify", json={"mobile_number": mobile, "code": "123456"})
    assert resp.status_code == 200
    return resp.json()


class TestRequestCode:
    def test_request_code(self, client, otp_provider):
        resp = client.post("/auth/otp", json={"mobile_number": "0501234567"})
        assert resp.status_code == 200
        assert resp.json() == {"mobile_number": "+9710501234567"}
        assert otp_provider.sent == ["+9710501234567"]

    def test_invalid_number(self, client):
        resp = client.post("/auth/otp", json={"mobile_number": "12"})
        assert resp.status_code == 400
        assert resp.json()["code"] == "invalid_number"

    def test_unconfigured_provider(self, session_factory):
        app = create_app(
            session_factory=session_factory,
            otp_provider=OTPProvider(base_url="", api_key=""),
        )
        with TestClient(app) as client:
            resp = client.post("/auth/otp", json={"mobile_number": "0501234567"})
        assert resp.status_code == 503
        body = resp.json()
        assert body["code"] == "provider_not_configured"
        assert "set up your Supabase credentials" in body["message"]


class TestVerifyCode:
    def test_verify_returns_session(self, client):
        data = _sign_in(client)
        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert data["user"]["mobile_number"] == "+9710501234567"

    def test_code_must_be_six_digits(self, client):
        resp = client.post("/auth/verify", json={"mobile_number": "0501234567", "code": "12ab"})
        assert resp.status_code == 422

    def test_code_must_be_ascii_digits(self, client, otp_provider):
        resp = client.post(
            "/auth/verify",
            json={"mobile_number": "0501234567", "code": "\u0661\u0662\u0663\u0664\u0665\u0666"},
        )
        assert resp.status_code == 422
        assert otp_provider.user_ids == {}

    def test_wrong_code(self, client):
        resp = client.post("/auth/verify", json={"mobile_number": "0501234567", "code": "654321"})
        assert resp.status_code == 400
        assert resp.json()["code"] == "invalid_code"

    def test_expired_code(self, client):
        resp = client.post("/auth/verify", json={"mobile_number": "0501234567", "code": "000000"})
        assert resp.status_code == 400
        assert resp.json()["code"] == "code_expired"

    def test_session_grants_access(self, client):
        token = _sign_in(client)["access_token"]
        resp = client.get("/profile", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json()["mobile_number"] == "+9710501234567"


class TestSignOut:
    def test_sign_out(self, client, otp_provider):
        token = _sign_in(client)["access_token"]
        headers = {"Authorization": f"Bearer {token}"}
        resp = client.post("/auth/sign-out", headers=headers)
        assert resp.status_code == 204
        assert len(otp_provider.signed_out) == 1
        assert client.get("/profile", headers=headers).status_code == 401

    def test_sign_out_when_provider_fails(self, client, otp_provider):
        otp_provider.fail_sign_out = True
        token = _sign_in(client)["access_token"]
        headers = {"Authorization": f"Bearer {token}"}
        assert client.post("/auth/sign-out", headers=headers).status_code == 204
        assert client.get("/profile", headers=headers).status_code == 401

    def test_sign_out_requires_session(self, client):
        assert client.post("/auth/sign-out").status_code == 401
