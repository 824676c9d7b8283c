"""
Authentication and access control.

Access tokens are verified against the identity provider's OpenID Connect
userinfo endpoint; results are cached briefly per token.
"""

import logging
import time
from typing import Callable, Iterable, Optional

import httpx
from cachetools import TTLCache
from fastapi import Depends, HTTPException, Request
from pydantic import BaseModel

from tubebrief.config import AuthConfig, get_settings

logger = logging.getLogger(__name__)


class CurrentUser(BaseModel):
    """Authenticated user as reported by the identity provider."""

    id: str
    email: Optional[str] = None


def is_email_allowed(email: Optional[str], allowed: Iterable[str]) -> bool:
    """Case-insensitive allowlist check; an empty allowlist admits nobody."""
    if not email:
        return False
    allowed_set = {entry.strip().lower() for entry in allowed if entry.strip()}
    return email.strip().lower() in allowed_set


class IdentityProvider:
    """Resolves access tokens to users through the userinfo endpoint."""

    def __init__(
        self,
        config: AuthConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self._transport = transport
        self._cache: TTLCache = TTLCache(
            maxsize=config.cache_max_tokens,
            ttl=config.cache_ttl_seconds,
            timer=timer,
        )

    async def resolve(self, token: str) -> Optional[CurrentUser]:
        cached = self._cache.get(token)
        if cached is not None:
            return cached

        async with httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            transport=self._transport,
        ) as client:
            try:
                response = await client.get(
                    self.config.userinfo_url,
                    headers={"Authorization": f"Bearer {token}"},
                )
            except httpx.RequestError as e:
                logger.error(f"Identity provider unreachable: {e}")
                raise HTTPException(status_code=503, detail="Identity provider unavailable")

        if response.status_code in (401, 403):
            return None
        if response.status_code >= 400:
            logger.error(f"Identity provider returned {response.status_code}")
            raise HTTPException(status_code=503, detail="Identity provider unavailable")

        claims = response.json()
        subject = claims.get("sub") or claims.get("id")
        if not subject:
            return None

        user = CurrentUser(id=subject, email=claims.get("email"))
        self._cache[token] = user
        return user


_identity_provider: Optional[IdentityProvider] = None


def get_identity_provider() -> IdentityProvider:
    """Get the singleton identity provider client."""
    global _identity_provider
    if _identity_provider is None:
        _identity_provider = IdentityProvider(get_settings().auth)
    return _identity_provider


def _extract_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(get_settings().auth.session_cookie) or None


async def get_current_user(
    request: Request,
    identity: IdentityProvider = Depends(get_identity_provider),
) -> CurrentUser:
    """FastAPI dependency: the authenticated user, or 401."""
    token = _extract_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized")
    user = await identity.resolve(token)
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


async def require_generation_access(
    user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """FastAPI dependency: the user, or 403 when not on the generation allowlist."""
    if not is_email_allowed(user.email, get_settings().allowed_email_set):
        logger.info(f"Generation denied for user {user.id}")
        raise HTTPException(status_code=403, detail="Access restricted")
    return user
