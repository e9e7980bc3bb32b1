from __future__ import annotations

from typing import Any

import httpx
import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from clustermgmt.config import Settings, get_settings

logger = structlog.get_logger()
security = HTTPBearer(auto_error=False)

ANONYMOUS_USER: dict[str, Any] = {
    "sub": "anonymous",
    "username": "anonymous",
    "auth_disabled": True,
}


class JWTValidator:
    """Validates JWT tokens against a JWKS endpoint."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._jwks: dict[str, Any] | None = None

    async def _get_jwks(self) -> dict[str, Any]:
        """Fetch JWKS from configured URL."""
        if self._jwks:
            return self._jwks

        if not self.settings.jwt_jwks_url:
            raise ValueError("No JWKS URL configured")

        async with httpx.AsyncClient(timeout=self.settings.http_timeout) as client:
            response = await client.get(self.settings.jwt_jwks_url)
            response.raise_for_status()
            self._jwks = response.json()
            return self._jwks

    async def validate_token(self, token: str) -> dict[str, Any]:
        """Validate JWT token and return claims."""
        try:
            unverified_header = jwt.get_unverified_header(token)
            kid = unverified_header.get("kid")

            jwks = await self._get_jwks()
            key = None
            for jwk in jwks.get("keys", []):
                if jwk.get("kid") == kid:
                    key = jwk
                    break

            if not key:
                raise JWTError("Public key not found in JWKS")

            claims = jwt.decode(
                token,
                key,
                algorithms=["RS256"],
                audience=self.settings.jwt_audience,
                issuer=self.settings.jwt_issuer,
            )
            return claims

        except JWTError as exc:
            logger.warning("jwt_validation_failed", error=str(exc))
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication credentials",
                headers={"WWW-Authenticate": "Bearer"},
            ) from exc


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),  # noqa: B008
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> dict[str, Any]:
    """Extract and validate JWT token from request."""
    if not settings.jwt_jwks_url:
        logger.warning("auth_disabled", reason="No JWT configuration")
        return dict(ANONYMOUS_USER)

    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    validator = JWTValidator(settings)
    return await validator.validate_token(credentials.credentials)


def user_roles(claims: dict[str, Any]) -> set[str]:
    roles: set[str] = set()
    for claim in ("roles", "cognito:groups"):
        value = claims.get(claim) or []
        if isinstance(value, str):
            value = [value]
        roles.update(value)
    return roles


async def require_admin(
    user: dict[str, Any] = Depends(get_current_user),  # noqa: B008
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> dict[str, Any]:
    """Allow only callers holding the configured admin role."""
    if user.get("auth_disabled"):
        return user

    if settings.admin_role not in user_roles(user):
        logger.warning(
            "authorization_denied", sub=user.get("sub"), required_role=settings.admin_role
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Role [{settings.admin_role}] required",
        )
    return user
