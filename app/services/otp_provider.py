import logging
import re
from dataclasses import dataclass

import httpx

from app.config import settings

logger = logging.getLogger(__name__)

COUNTRY_PREFIX = "971"
SETUP_REQUIRED_MARKER = "configure your Supabase credentials"

_NON_DIGITS = re.compile(r"[^0-9]")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class AuthError(Exception):
    code = "auth_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidNumber(AuthError):
    code = "invalid_number"


class InvalidCode(AuthError):
    code = "invalid_code"


class CodeExpired(AuthError):
    code = "code_expired"


class ProviderError(AuthError):
    code = "provider_error"
    status_code = 502


class ProviderNotConfigured(ProviderError):
    code = "provider_not_configured"
    status_code = 503


def normalize_mobile_number(value: str) -> str:
    """Strip non-digits and make sure the number carries the +971 prefix.

    Idempotent: normalizing an already normalized number is a no-op.
    """
    digits = _NON_DIGITS.sub("", value or "")
    if not digits:
        return ""
    if digits.startswith(COUNTRY_PREFIX):
        return "+" + digits
    return "+" + COUNTRY_PREFIX + digits


# ---------------------------------------------------------------------------
# Provider client
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProviderSession:
    user_id: str
    phone: str
    access_token: str
    expires_in: int | None = None


def _error_text(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("msg", "error_description", "message", "error"):
            if body.get(key):
                return str(body[key])
    return f"HTTP {response.status_code}"


class OTPProvider:
    """Client for the hosted auth provider's phone OTP endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = (
            base_url if base_url is not None else settings.auth_provider_url
        ).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.auth_provider_key
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    def _client(self) -> httpx.Client:
        if not self.is_configured():
            raise ProviderNotConfigured(
                "Auth provider is not configured. Please "
                f"{SETUP_REQUIRED_MARKER} (SUPABASE_URL, SUPABASE_ANON_KEY)."
            )
        return httpx.Client(
            base_url=self.base_url,
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
            },
            transport=self._transport,
        )

    def _post(
        self, path: str, payload: dict | None, headers: dict | None = None
    ) -> httpx.Response:
        with self._client() as client:
            try:
                return client.post(path, json=payload, headers=headers)
            except httpx.HTTPError as exc:
                logger.error("Auth provider request %s failed: %s", path, exc)
                raise ProviderError(
                    "Failed to reach the auth provider. Please check your connection."
                ) from exc

    def send_otp(self, phone: str) -> None:
        response = self._post("/auth/v1/otp", {"phone": phone, "create_user": True})
        if response.status_code < 400:
            return
        text = _error_text(response)
        logger.warning("OTP send rejected (%s): %s", response.status_code, text)
        if response.status_code < 500 and "phone" in text.lower():
            raise InvalidNumber(text)
        raise ProviderError(text or "Failed to send OTP.")

    def verify_otp(self, phone: str, code: str) -> ProviderSession:
        response = self._post(
            "/auth/v1/verify", {"type": "sms", "phone": phone, "token": code}
        )
        if response.status_code >= 400:
            text = _error_text(response)
            logger.warning("OTP verify rejected (%s): %s", response.status_code, text)
            if response.status_code >= 500 or SETUP_REQUIRED_MARKER in text:
                raise ProviderError(text)
            if "expired" in text.lower():
                raise CodeExpired(text)
            raise InvalidCode(text or "Invalid OTP. Please try again.")

        body = response.json()
        user = body.get("user") or {}
        if not body.get("access_token") or not user.get("id"):
            raise ProviderError("Auth provider returned an incomplete session.")
        return ProviderSession(
            user_id=str(user["id"]),
            phone=str(user.get("phone") or phone),
            access_token=body["access_token"],
            expires_in=body.get("expires_in"),
        )

    def sign_out(self, access_token: str) -> None:
        response = self._post(
            "/auth/v1/logout",
            None,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        if response.status_code >= 400:
            raise ProviderError(_error_text(response))


def describe_auth_error(exc: AuthError) -> str:
    """User-facing message; provider misconfiguration gets a setup hint."""
    if SETUP_REQUIRED_MARKER in str(exc):
        return (
            "Please set up your Supabase credentials. "
            "Check the server logs for instructions."
        )
    return exc.message
