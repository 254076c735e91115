"""
Endpoints for vaccination sessions.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from vaxsync.auth.dependencies import TokenPayload, ensure_barangay_access, require_permission
from vaxsync.database import get_db
from vaxsync.models.vaccination_session import SessionStatus
from vaxsync.schemas.vaccination_session import (
    SessionAdministeredUpdate,
    SessionCreate,
    SessionResponse,
    SessionStatusUpdate,
)
from vaxsync.services import session_service

router = APIRouter()


@router.post("", response_model=SessionResponse, status_code=201)
async def create_session(
    data: SessionCreate,
    user: TokenPayload = Depends(require_permission("session", "create")),
    db: AsyncSession = Depends(get_db),
):
    """Schedule a session and reserve its target doses."""
    ensure_barangay_access(user, data.barangay_id)
    return await session_service.create_session(db, user.user_id, data)


@router.get("", response_model=list[SessionResponse])
async def list_sessions(
    barangay_id: UUID | None = Query(None),
    status: SessionStatus | None = Query(None),
    user: TokenPayload = Depends(require_permission("session", "read")),
    db: AsyncSession = Depends(get_db),
):
    """List sessions, newest first."""
    scope = user.barangay_scope
    if scope is not None:
        barangay_id = scope
    return await session_service.list_sessions(db, barangay_id=barangay_id, status=status)


@router.patch("/{session_id}/administered", response_model=SessionResponse)
async def update_administered(
    session_id: UUID,
    data: SessionAdministeredUpdate,
    user: TokenPayload = Depends(require_permission("session", "update")),
    db: AsyncSession = Depends(get_db),
):
    """Record the administered count, optionally with a new status."""
    return await session_service.update_administered(
        db, session_id, user.user_id, data, barangay_scope=user.barangay_scope
    )


@router.patch("/{session_id}/status", response_model=SessionResponse)
async def update_status(
    session_id: UUID,
    data: SessionStatusUpdate,
    user: TokenPayload = Depends(require_permission("session", "update")),
    db: AsyncSession = Depends(get_db),
):
    """Move a session to a new status. Completing it deducts stock."""
    return await session_service.update_status(
        db, session_id, user.user_id, data.status, barangay_scope=user.barangay_scope
    )
