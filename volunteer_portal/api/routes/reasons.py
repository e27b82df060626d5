"""Reason scheduling endpoints.

The requestor is the account behind the bearer session credential; only
owners and administrators get past the role gate.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from volunteer_portal.api.deps import get_current_account, storage_failure
from volunteer_portal.core.clock import ReferenceClock, get_clock
from volunteer_portal.core.database import get_db
from volunteer_portal.models.account import Account
from volunteer_portal.schemas.reason import (
    MessageResponse,
    ReasonListResponse,
    ReasonRequest,
    ReasonResponse,
)
from volunteer_portal.services.reason_service import ReasonService

router = APIRouter()


def get_reason_service(
    db: AsyncSession = Depends(get_db),
    clock: ReferenceClock = Depends(get_clock),
) -> ReasonService:
    return ReasonService(db, clock)


@router.post("/{user_id}/reasons", response_model=MessageResponse)
async def create_reason(
    user_id: UUID,
    body: ReasonRequest,
    requestor: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
    reason_service: ReasonService = Depends(get_reason_service),
):
    """Schedule a reason for a future Sunday.

    Error codes: 0 not a Sunday, 7 past date, 6 empty reason, 1 forbidden,
    2 user not found, 3 already scheduled for that date.
    """
    try:
        await reason_service.create_reason(requestor, user_id, body.reason_data)
        await db.commit()
    except SQLAlchemyError as exc:
        raise await storage_failure(db, exc, status.HTTP_400_BAD_REQUEST) from exc
    return MessageResponse(message="Reason scheduled")


@router.get(
    "/{user_id}/reasons",
    response_model=ReasonListResponse | ReasonResponse,
    status_code=status.HTTP_200_OK,
)
async def get_reasons(
    user_id: UUID,
    query_date: str | None = Query(None, alias="queryDate"),
    requestor: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
    reason_service: ReasonService = Depends(get_reason_service),
):
    """List an account's reasons, or fetch the one for ``queryDate``.

    A date with nothing scheduled returns the unset shape
    (``isSet: false``) with 200, not a 404.
    """
    try:
        if query_date is not None:
            reason = await reason_service.get_reason(requestor, user_id, query_date)
            return reason_service.to_response(reason)

        reasons = await reason_service.list_reasons(requestor, user_id)
    except SQLAlchemyError as exc:
        raise await storage_failure(db, exc, status.HTTP_400_BAD_REQUEST) from exc

    return ReasonListResponse(reasons=[reason_service.to_response(r) for r in reasons])


@router.patch("/{user_id}/reasons", response_model=MessageResponse)
async def update_reason(
    user_id: UUID,
    body: ReasonRequest,
    requestor: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
    reason_service: ReasonService = Depends(get_reason_service),
):
    """Replace the text of the reason scheduled for a date.

    Error codes: 1 forbidden, 2 user not found, 0 not a Sunday,
    6 empty reason, 4 nothing scheduled for that date.
    """
    try:
        await reason_service.update_reason(requestor, user_id, body.reason_data)
        await db.commit()
    except SQLAlchemyError as exc:
        raise await storage_failure(db, exc, status.HTTP_400_BAD_REQUEST) from exc
    return MessageResponse(message="Reason Updated!")


@router.delete("/{user_id}/reasons", response_model=MessageResponse)
async def delete_reason(
    user_id: UUID,
    body: ReasonRequest,
    requestor: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
    reason_service: ReasonService = Depends(get_reason_service),
):
    """Delete the reason scheduled for a date.

    Error codes: 1 forbidden, 2 user not found, 0 not a Sunday,
    4 nothing scheduled, 5 storage failure.
    """
    try:
        await reason_service.delete_reason(requestor, user_id, body.reason_data)
        await db.commit()
    except SQLAlchemyError as exc:
        raise await storage_failure(db, exc, status.HTTP_400_BAD_REQUEST) from exc
    return MessageResponse(message="Document deleted")
