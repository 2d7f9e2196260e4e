"""
Bearer-token verification for the authenticated decision endpoint.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Protocol

import jwt
from loguru import logger

from app.errors import AuthError

FIREBASE_JWKS_URL = (
    "https://www.googleapis.com/service_accounts/v1/jwk/securetoken@system.gserviceaccount.com"
)


class TokenVerifier(Protocol):
    async def verify(self, token: str) -> dict[str, Any]: ...


@dataclass(frozen=True)
class AuthResult:
    ok: bool
    error: str | None = None


class FirebaseTokenVerifier:
    """
    Verify Firebase ID tokens against Google's published signing keys.
    """

    def __init__(self, project_id: str, jwks_url: str = FIREBASE_JWKS_URL):
        self.project_id = project_id
        self.issuer = f"https://securetoken.google.com/{project_id}"
        self.jwks_client = jwt.PyJWKClient(jwks_url)

    def _decode(self, token: str) -> dict[str, Any]:
        signing_key = self.jwks_client.get_signing_key_from_jwt(token)
        return jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            audience=self.project_id,
            issuer=self.issuer,
        )

    async def verify(self, token: str) -> dict[str, Any]:
        if not self.project_id:
            raise AuthError("FIREBASE_PROJECT_ID is not configured")
        try:
            claims = await asyncio.to_thread(self._decode, token)
        except jwt.PyJWTError as e:
            raise AuthError(str(e)) from e
        if not claims.get("sub"):
            raise AuthError("Token has no subject")
        return claims


async def verify_bearer(header: str | None, verifier: TokenVerifier) -> AuthResult:
    if not header or not header.startswith("Bearer "):
        return AuthResult(ok=False, error="Missing bearer token")

    token = header[len("Bearer "):].strip()
    if not token:
        return AuthResult(ok=False, error="Empty bearer token")

    try:
        await verifier.verify(token)
    except Exception as e:
        logger.warning("Bearer verification failed: {}", e)
        return AuthResult(ok=False, error="Invalid auth token")
    return AuthResult(ok=True)
