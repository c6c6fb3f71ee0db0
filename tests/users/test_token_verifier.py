import httpx
import pytest

from src.attendance_badges.attendance_badges.auth.identity import (
    ChainedTokenVerifier,
    GoogleTokenVerifier,
    StaticTokenVerifier,
)
from src.attendance_badges.attendance_badges.core.exceptions import AuthenticationError, EmailDomainError

DOMAIN = "carobotics.org"


def _google(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return GoogleTokenVerifier(allowed_domain=DOMAIN, tokeninfo_url="https://tokens.example/info", client=client)


def test_google_verifier_returns_email():
    def handler(request):
        assert request.url.params["id_token"] == "abc"
        return httpx.Response(200, json={"email": f"kim@{DOMAIN}", "email_verified": "true"})

    assert _google(handler).verify_token("abc") == f"kim@{DOMAIN}"


def test_google_verifier_rejects_error_payload():
    def handler(request):
        return httpx.Response(400, json={"error": "invalid_token", "error_description": "Invalid Value"})

    with pytest.raises(AuthenticationError, match="Invalid Value"):
        _google(handler).verify_token("bad")


def test_google_verifier_rejects_other_domains():
    def handler(request):
        return httpx.Response(200, json={"email": "kim@gmail.com"})

    with pytest.raises(EmailDomainError):
        _google(handler).verify_token("abc")


def test_google_verifier_wraps_transport_errors():
    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    with pytest.raises(AuthenticationError):
        _google(handler).verify_token("abc")


def test_empty_token_is_rejected():
    with pytest.raises(AuthenticationError):
        StaticTokenVerifier({}, allowed_domain=DOMAIN).verify_token("")


def test_chained_verifier_prefers_static_tokens():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"email": f"kim@{DOMAIN}"})

    static = StaticTokenVerifier({"TEST_TOKEN_ADMIN": f"admin@{DOMAIN}"}, allowed_domain=DOMAIN)
    verifier = ChainedTokenVerifier(static, _google(handler))

    assert verifier.verify_token("TEST_TOKEN_ADMIN") == f"admin@{DOMAIN}"
    assert calls == []
    assert verifier.verify_token("real") == f"kim@{DOMAIN}"
    assert len(calls) == 1
