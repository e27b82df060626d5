"""Reason scheduling service.

Owners and administrators attach a justification to a specific Sunday for
a given account. Each failure carries a numeric ``errorCode`` so callers can
branch on it (see ``ReasonErrorCode``).
"""
import logging
from datetime import UTC, datetime
from uuid import UUID

from fastapi import status
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from volunteer_portal.core.clock import ReferenceClock
from volunteer_portal.core.errors import ReasonError, ReasonErrorCode
from volunteer_portal.core.structured_logging import log_json
from volunteer_portal.models.account import Account
from volunteer_portal.models.reason import Reason
from volunteer_portal.schemas.reason import ReasonData, ReasonResponse
from volunteer_portal.services.account_store import AccountStore

logger = logging.getLogger(__name__)

UNSET_REASON = ReasonResponse()


class ReasonService:
    """Service for per-account, per-Sunday reasons."""

    def __init__(self, db: AsyncSession, clock: ReferenceClock):
        """Initialize reason service.

        Args:
            db: Database session
            clock: Reference time zone clock used for date normalization
        """
        self.db = db
        self.clock = clock
        self.accounts = AccountStore(db)

    async def create_reason(self, requestor: Account, user_id: UUID, data: ReasonData) -> Reason:
        """Schedule a reason for a future Sunday.

        Date checks run before the role gate, so a non-Sunday date is
        reported as such whoever asks.

        Raises:
            ReasonError: 0 not a Sunday, 7 past date, 6 empty reason,
                1 forbidden, 2 user not found, 3 reason already scheduled
        """
        day = self._sunday(data.date)
        if day < self.clock.today():
            raise ReasonError(
                status.HTTP_400_BAD_REQUEST,
                "You should select a date that is yet to come",
                ReasonErrorCode.PAST_DATE,
            )
        self._require_message(data)
        self._require_scheduler(requestor)
        await self._require_user(user_id)

        stored_date = day.astimezone(UTC)
        if await self._find(user_id, stored_date):
            raise self._duplicate()

        reason = Reason(user_id=user_id, date=stored_date, reason=data.message.strip())
        self.db.add(reason)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise self._duplicate() from None

        log_json(
            logger,
            logging.INFO,
            "reason_created",
            user_id=user_id,
            date=stored_date,
            requestor_id=requestor.id,
        )
        return reason

    async def list_reasons(self, requestor: Account, user_id: UUID) -> list[Reason]:
        """All reasons scheduled for an account, oldest first."""
        self._require_scheduler(requestor)
        await self._require_user(user_id)

        result = await self.db.execute(
            select(Reason).where(Reason.user_id == user_id).order_by(Reason.date)
        )
        return list(result.scalars().all())

    async def get_reason(self, requestor: Account, user_id: UUID, query_date: str) -> Reason | None:
        """Reason scheduled for the day containing ``query_date``.

        Returns None when nothing is scheduled; callers render that as the
        unset sentinel rather than an error.
        """
        self._require_scheduler(requestor)
        await self._require_user(user_id)

        try:
            day = self.clock.start_of_day(self.clock.parse_local(query_date))
        except ValueError:
            return None
        return await self._find(user_id, day.astimezone(UTC))

    async def update_reason(self, requestor: Account, user_id: UUID, data: ReasonData) -> Reason:
        """Replace the text of an existing reason.

        Raises:
            ReasonError: 1 forbidden, 2 user not found, 0 not a Sunday,
                6 empty reason, 4 no reason scheduled for the date
        """
        self._require_scheduler(requestor)
        await self._require_user(user_id)
        day = self._sunday(data.date)
        self._require_message(data)

        reason = await self._find(user_id, day.astimezone(UTC))
        if reason is None:
            raise self._not_found()

        reason.reason = data.message.strip()
        await self.db.flush()

        log_json(
            logger,
            logging.INFO,
            "reason_updated",
            user_id=user_id,
            reason_id=reason.id,
            requestor_id=requestor.id,
        )
        return reason

    async def delete_reason(self, requestor: Account, user_id: UUID, data: ReasonData) -> None:
        """Delete the reason scheduled for a date.

        Raises:
            ReasonError: 1 forbidden, 2 user not found, 0 not a Sunday,
                4 no reason scheduled, 5 storage failure while deleting
        """
        self._require_scheduler(requestor)
        await self._require_user(user_id)
        day = self._sunday(data.date)

        reason = await self._find(user_id, day.astimezone(UTC))
        if reason is None:
            raise self._not_found()

        reason_id = reason.id
        try:
            result = await self.db.execute(
                delete(Reason)
                .where(Reason.id == reason_id)
                .execution_options(synchronize_session="fetch")
            )
        except SQLAlchemyError as exc:
            await self.db.rollback()
            log_json(logger, logging.ERROR, "reason_delete_failed", reason_id=reason_id, error=str(exc))
            raise ReasonError(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "Error while deleting document",
                ReasonErrorCode.DELETE_FAILED,
            ) from exc

        if result.rowcount != 1:
            raise self._not_found()

        log_json(
            logger,
            logging.INFO,
            "reason_deleted",
            user_id=user_id,
            reason_id=reason_id,
            requestor_id=requestor.id,
        )

    def to_response(self, reason: Reason | None) -> ReasonResponse:
        if reason is None:
            return UNSET_REASON
        return ReasonResponse(
            id=str(reason.id),
            reason=reason.reason,
            date=self.clock.to_local(reason.date).astimezone(UTC).isoformat(),
            user_id=str(reason.user_id),
            is_set=True,
        )

    def _sunday(self, value: str) -> datetime:
        """Start of the given day in the reference zone, which must be a Sunday."""
        try:
            day = self.clock.start_of_day(self.clock.parse_local(value))
        except ValueError:
            day = None
        if day is None or not self.clock.is_sunday(day):
            raise ReasonError(
                status.HTTP_400_BAD_REQUEST,
                "The selected day must be a sunday so the code can work properly",
                ReasonErrorCode.NOT_SUNDAY,
            )
        return day

    @staticmethod
    def _require_message(data: ReasonData) -> None:
        if not data.message or not data.message.strip():
            raise ReasonError(
                status.HTTP_400_BAD_REQUEST,
                "You must provide a reason.",
                ReasonErrorCode.EMPTY_REASON,
            )

    @staticmethod
    def _require_scheduler(requestor: Account) -> None:
        if not requestor.role.can_schedule_reasons:
            raise ReasonError(
                status.HTTP_403_FORBIDDEN,
                "You must be an Owner or Administrator to schedule a reason for a Blue Square",
                ReasonErrorCode.FORBIDDEN,
            )

    async def _require_user(self, user_id: UUID) -> Account:
        account = await self.accounts.get(user_id)
        if account is None:
            raise ReasonError(
                status.HTTP_404_NOT_FOUND,
                "User not found",
                ReasonErrorCode.USER_NOT_FOUND,
            )
        return account

    async def _find(self, user_id: UUID, stored_date: datetime) -> Reason | None:
        result = await self.db.execute(
            select(Reason).where(Reason.user_id == user_id, Reason.date == stored_date)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _duplicate() -> ReasonError:
        return ReasonError(
            status.HTTP_409_CONFLICT,
            "The reason must be unique to the date",
            ReasonErrorCode.DUPLICATE,
        )

    @staticmethod
    def _not_found() -> ReasonError:
        return ReasonError(
            status.HTTP_404_NOT_FOUND,
            "Reason not found",
            ReasonErrorCode.REASON_NOT_FOUND,
        )
