"""Google sign-in: authorization code exchange and ID token verification."""

import logging
from functools import lru_cache
from typing import Any

import httpx
import jwt
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from src.config.settings import settings

from .exceptions import GoogleLoginException

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_CERTS_URL = "https://www.googleapis.com/oauth2/v3/certs"
GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


class GoogleIdentity(BaseModel):
    """Profile fields taken from a verified Google ID token."""

    email: str
    name: str | None = None
    picture: str | None = None


class GoogleOAuthClient:
    """Turns a browser authorization code into a verified Google identity."""

    def __init__(
        self,
        client_id: str | None,
        client_secret: str | None,
        redirect_uri: str,
        timeout: float = 10.0,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._timeout = timeout
        self._jwks_client = jwt.PyJWKClient(GOOGLE_CERTS_URL, cache_keys=True)

    async def exchange_code(self, code: str) -> GoogleIdentity:
        """Exchange an authorization code and verify the returned ID token.

        Raises:
            GoogleLoginException: If the exchange or the verification fails

        """
        if not self._client_id or not self._client_secret:
            logger.error("Google sign-in attempted but GOOGLE_CLIENT_ID/GOOGLE_CLIENT_SECRET are not set")
            raise GoogleLoginException()

        id_token = await self._fetch_id_token(code)

        try:
            claims = await run_in_threadpool(self._verify_id_token, id_token)
        except jwt.PyJWTError as exc:
            logger.warning(f"Google ID token rejected: {exc}")
            raise GoogleLoginException() from exc

        email = claims.get("email")
        if not email:
            raise GoogleLoginException()

        return GoogleIdentity(email=email, name=claims.get("name"), picture=claims.get("picture"))

    async def _fetch_id_token(self, code: str) -> str:
        token_data = {
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "code": code,
            "redirect_uri": self._redirect_uri,
            "grant_type": "authorization_code",
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=False) as client:
                response = await client.post(GOOGLE_TOKEN_URL, data=token_data, headers={"Accept": "application/json"})
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning(f"Google code exchange failed with status {exc.response.status_code}")
            raise GoogleLoginException() from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(f"Google code exchange error: {exc}")
            raise GoogleLoginException() from exc

        id_token = payload.get("id_token") if isinstance(payload, dict) else None
        if not id_token:
            raise GoogleLoginException()
        return id_token

    def _verify_id_token(self, id_token: str) -> dict[str, Any]:
        # Blocking: fetches Google's signing keys on first use
        signing_key = self._jwks_client.get_signing_key_from_jwt(id_token)
        claims = jwt.decode(id_token, signing_key.key, algorithms=["RS256"], audience=self._client_id)
        if claims.get("iss") not in GOOGLE_ISSUERS:
            raise jwt.InvalidIssuerError("Invalid issuer")
        return claims


@lru_cache
def get_google_client() -> GoogleOAuthClient:
    """Dependency returning the process-wide Google OAuth client."""
    return GoogleOAuthClient(
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        redirect_uri=settings.google_redirect_uri,
    )
