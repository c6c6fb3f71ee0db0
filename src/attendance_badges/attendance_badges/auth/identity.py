from __future__ import annotations

from typing import Mapping, Optional, Protocol

import httpx

from ..common.validators import is_allowed_domain
from ..core.exceptions import AuthenticationError, EmailDomainError
from ..logging_config import get_logger

logger = get_logger(__name__)


class TokenVerifier(Protocol):
    def verify_token(self, token: Optional[str]) -> str:
        """Return the verified email for ``token`` or raise AuthenticationError."""

        raise NotImplementedError


class GoogleTokenVerifier(TokenVerifier):
    """Verifies Google ID tokens through the tokeninfo endpoint."""

    REQUEST_TIMEOUT = 10.0

    def __init__(
        self,
        *,
        allowed_domain: str,
        tokeninfo_url: str = "https://oauth2.googleapis.com/tokeninfo",
        client: Optional[httpx.Client] = None,
    ):
        self._allowed_domain = allowed_domain
        self._tokeninfo_url = tokeninfo_url
        self._client = client

    def verify_token(self, token: Optional[str]) -> str:
        if not token:
            raise AuthenticationError("No token provided.")

        try:
            payload = self._fetch(token)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("token_verification_failed", error=str(e))
            raise AuthenticationError(f"Token verification failed: {e}") from e

        if payload.get("error"):
            raise AuthenticationError(f"Invalid token: {payload.get('error_description') or payload['error']}")

        email = payload.get("email")
        if not email:
            raise AuthenticationError("Token has no email claim.")
        if not is_allowed_domain(email, self._allowed_domain):
            raise EmailDomainError(f"Invalid domain: {email}")
        return email

    def _fetch(self, token: str) -> dict:
        params = {"id_token": token}
        if self._client is not None:
            response = self._client.get(self._tokeninfo_url, params=params)
        else:
            with httpx.Client(timeout=self.REQUEST_TIMEOUT) as client:
                response = client.get(self._tokeninfo_url, params=params)

        # tokeninfo answers 400 with an error body for bad tokens.
        if response.status_code >= 500:
            response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError("Unexpected tokeninfo response")
        return payload


class StaticTokenVerifier(TokenVerifier):
    """Fixed token-to-email table for tests and local runs."""

    def __init__(self, tokens: Mapping[str, str], *, allowed_domain: str):
        self._tokens = dict(tokens)
        self._allowed_domain = allowed_domain

    def knows(self, token: Optional[str]) -> bool:
        return bool(token) and token in self._tokens

    def verify_token(self, token: Optional[str]) -> str:
        if not token:
            raise AuthenticationError("No token provided.")

        email = self._tokens.get(token)
        if not email:
            raise AuthenticationError("Invalid token.")
        if not is_allowed_domain(email, self._allowed_domain):
            raise EmailDomainError(f"Invalid domain: {email}")
        return email


class ChainedTokenVerifier(TokenVerifier):
    """Tries static tokens first, then falls through to ``fallback``."""

    def __init__(self, static: StaticTokenVerifier, fallback: TokenVerifier):
        self._static = static
        self._fallback = fallback

    def verify_token(self, token: Optional[str]) -> str:
        if self._static.knows(token):
            return self._static.verify_token(token)
        return self._fallback.verify_token(token)
