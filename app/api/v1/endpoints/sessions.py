"""
Table occupancy — which accounts currently hold an active session.

Logout never clears a row; staff free the table here.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_db, require_staff
from app.models.active_session import ActiveSession
from app.repositories.sessions import SessionRepository
from app.schemas.identity import CurrentIdentity
from app.schemas.user import ActiveSessionRead, DeleteResponse

router = APIRouter(prefix="/sessions", tags=["sessions"])
logger = logging.getLogger(__name__)


@router.get("", response_model=list[ActiveSessionRead])
async def list_sessions(db: AsyncSession = Depends(get_db)) -> list[ActiveSession]:
    """Occupied tables, polled by the login screen."""
    return await SessionRepository(db).list_all()


@router.delete("/{user_id}", response_model=DeleteResponse)
async def free_table(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    staff: CurrentIdentity = Depends(require_staff),
) -> DeleteResponse:
    if not await SessionRepository(db).delete_for_user(user_id):
        raise HTTPException(status_code=404, detail="No active session for this user")
    await db.commit()
    logger.info("Session for %s cleared by %s", user_id, staff.username)
    return DeleteResponse(success=True, message="Table freed")
