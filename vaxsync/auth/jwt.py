"""
JWT handling with RS256 (asymmetric keys).
Tokens are issued by the health unit's identity provider; this service only
needs to verify them. ``create_access_token`` exists for scripts and tests.
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from vaxsync.config import get_settings

settings = get_settings()


class TokenType:
    ACCESS = "access"


def create_access_token(
    user_id: UUID,
    role: str,
    barangay_id: UUID | None = None,
    extra_claims: dict | None = None,
) -> str:
    """Create a short-lived RS256 access token."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "role": role,
        "type": TokenType.ACCESS,
        "iat": now,
        "exp": now + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    if barangay_id is not None:
        payload["barangay_id"] = str(barangay_id)
    if extra_claims:
        payload.update(extra_claims)

    return jwt.encode(
        payload,
        settings.jwt_private_key,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_token(token: str) -> dict:
    """
    Decode and verify a JWT.
    Raises jwt.InvalidTokenError when the token is invalid or expired.
    """
    return jwt.decode(
        token,
        settings.jwt_public_key,
        algorithms=[settings.JWT_ALGORITHM],
    )
