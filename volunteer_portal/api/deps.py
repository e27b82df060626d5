"""FastAPI dependencies for authentication and collaborators."""
import logging
from uuid import UUID

from fastapi import BackgroundTasks, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from volunteer_portal.core.config import Settings, get_settings
from volunteer_portal.core.database import get_db
from volunteer_portal.core.security import decode_token
from volunteer_portal.core.structured_logging import log_json
from volunteer_portal.models.account import Account
from volunteer_portal.services.notification_service import BackgroundNotifier, EmailSender, Notifier

logger = logging.getLogger(__name__)

# HTTP Bearer token security scheme
security = HTTPBearer()


async def get_current_account(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Account:
    """Resolve the requesting account from its session credential.

    Args:
        credentials: HTTP Bearer credentials from request
        db: Database session
        settings: Application settings holding the signing secret

    Returns:
        Authenticated Account instance

    Raises:
        HTTPException: 401 if the credential is invalid or the account is gone
        HTTPException: 403 if the account is inactive
    """
    payload = decode_token(credentials.credentials, settings)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    try:
        account_id = UUID(str(payload.get("sub") or payload.get("userid")))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        ) from None

    account = await db.get(Account, account_id)
    if not account:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account not found",
        )

    if not account.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    return account


def get_notifier(
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
) -> Notifier:
    """Email notifier that delivers after the response is sent."""
    return BackgroundNotifier(background_tasks, EmailSender(settings))


async def storage_failure(
    db: AsyncSession, exc: SQLAlchemyError, status_code: int, prefix: str = "Error"
) -> HTTPException:
    """Roll back and build the generic error response for a storage failure."""
    await db.rollback()
    log_json(logger, logging.ERROR, "storage_error", error=str(exc), exception=exc.__class__.__name__)
    return HTTPException(status_code=status_code, detail=f"{prefix}: {exc}")
