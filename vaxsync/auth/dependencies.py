"""
FastAPI dependencies for authentication and barangay scoping.
"""

from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from vaxsync.auth.jwt import TokenType, decode_token
from vaxsync.auth.rbac import UserRole, has_permission
from vaxsync.core.exceptions import CredentialsException, ForbiddenException

# ── Security scheme ──────────────────────────────────
security = HTTPBearer()


# ── Typed token payload ──────────────────────────────
class TokenPayload:
    """Data extracted from the decoded JWT."""

    def __init__(self, payload: dict):
        self.user_id: UUID = UUID(payload["sub"])
        self.role: UserRole = UserRole(payload.get("role", ""))
        barangay_id = payload.get("barangay_id")
        self.barangay_id: UUID | None = UUID(barangay_id) if barangay_id else None
        self.token_type: str = payload.get("type", TokenType.ACCESS)

    @property
    def barangay_scope(self) -> UUID | None:
        """Barangay a Health Worker is restricted to, None for everyone else."""
        if self.role == UserRole.HEALTH_WORKER:
            return self.barangay_id
        return None


async def get_token_payload(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> TokenPayload:
    """Decode the bearer token without touching the database."""
    try:
        payload = decode_token(credentials.credentials)
        token_data = TokenPayload(payload)
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise CredentialsException("Invalid or expired token")

    if token_data.token_type != TokenType.ACCESS:
        raise CredentialsException("Invalid token type")

    return token_data


# ── Dependency factory with permissions ──────────────
def require_permission(resource: str, action: str):
    """
    Build a dependency that checks the caller's role against PERMISSIONS.

    Usage:
        @router.post("/deduct")
        async def deduct(user: TokenPayload = Depends(require_permission("inventory", "deduct"))):
            ...
    """

    async def _check_permission(
        user: TokenPayload = Depends(get_token_payload),
    ) -> TokenPayload:
        if not has_permission(user.role, resource, action):
            raise ForbiddenException(
                f"Role '{user.role.value}' cannot {action} {resource}"
            )
        return user

    return _check_permission


def ensure_barangay_access(user: TokenPayload, barangay_id: UUID) -> None:
    """Health Workers may only act on their assigned barangay."""
    scope = user.barangay_scope
    if scope is not None and scope != barangay_id:
        raise ForbiddenException("You can only manage your assigned barangay")
