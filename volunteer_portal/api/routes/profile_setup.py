"""Profile setup endpoints: invitation issuance, validation and redemption."""
from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from volunteer_portal.api.deps import get_notifier, storage_failure
from volunteer_portal.core.clock import ReferenceClock, get_clock
from volunteer_portal.core.config import Settings, get_settings
from volunteer_portal.core.database import get_db
from volunteer_portal.schemas.invitation import (
    InvitationTokenResponse,
    IssueInvitationRequest,
    RedeemInvitationRequest,
    SessionTokenResponse,
    TimeZoneKeyResponse,
    TokenRequest,
)
from volunteer_portal.services.invitation_service import InvitationService
from volunteer_portal.services.notification_service import Notifier

router = APIRouter()


def get_invitation_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    clock: ReferenceClock = Depends(get_clock),
    notifier: Notifier = Depends(get_notifier),
) -> InvitationService:
    return InvitationService(db, settings, clock, notifier)


@router.post("/issue-invitation", response_class=PlainTextResponse, status_code=status.HTTP_200_OK)
async def issue_invitation(
    invite_data: IssueInvitationRequest,
    db: AsyncSession = Depends(get_db),
    invitation_service: InvitationService = Depends(get_invitation_service),
):
    """Issue a profile setup invitation.

    Replaces any outstanding token for the email, emails the setup link and
    returns the link as plain text. Open to unauthenticated callers.

    Raises:
        HTTPException: 400 if the email already has an account
        HTTPException: 409 if a concurrent issuance for the email won
    """
    try:
        link = await invitation_service.issue_invitation(
            email=invite_data.email, base_url=invite_data.base_url
        )
        await db.commit()
    except SQLAlchemyError as exc:
        raise await storage_failure(db, exc, status.HTTP_400_BAD_REQUEST) from exc

    return PlainTextResponse(link)


@router.post("/validate-invitation", response_model=InvitationTokenResponse)
async def validate_invitation(
    token_data: TokenRequest,
    db: AsyncSession = Depends(get_db),
    invitation_service: InvitationService = Depends(get_invitation_service),
):
    """Return the token record if it exists and has not expired.

    Used to pre-fill the setup form; the token is not consumed.

    Raises:
        HTTPException: 404 if the token does not exist
        HTTPException: 400 if the token has expired
    """
    try:
        record = await invitation_service.validate_invitation(token_data.token)
    except SQLAlchemyError as exc:
        raise await storage_failure(
            db, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "Error finding token"
        ) from exc

    return InvitationTokenResponse.model_validate(record)


@router.post("/redeem-invitation", response_model=SessionTokenResponse)
async def redeem_invitation(
    setup_data: RedeemInvitationRequest,
    db: AsyncSession = Depends(get_db),
    invitation_service: InvitationService = Depends(get_invitation_service),
):
    """Complete profile setup with a token and receive a session credential.

    Raises:
        HTTPException: 400 if the token is invalid, expired, or its email
            already has an account
    """
    try:
        session_token = await invitation_service.redeem_invitation(setup_data)
        await db.commit()
    except SQLAlchemyError as exc:
        raise await storage_failure(db, exc, status.HTTP_500_INTERNAL_SERVER_ERROR) from exc

    return SessionTokenResponse(token=session_token)


@router.post("/get-timezone-api-key", response_model=TimeZoneKeyResponse)
async def get_timezone_api_key(
    token_data: TokenRequest,
    db: AsyncSession = Depends(get_db),
    invitation_service: InvitationService = Depends(get_invitation_service),
):
    """Hand the geocoding API key to holders of an outstanding setup token.

    Raises:
        HTTPException: 403 if the token does not exist
    """
    try:
        key = await invitation_service.timezone_api_key(token_data.token)
    except SQLAlchemyError as exc:
        raise await storage_failure(db, exc, status.HTTP_400_BAD_REQUEST) from exc

    return TimeZoneKeyResponse(user_api_key=key)
