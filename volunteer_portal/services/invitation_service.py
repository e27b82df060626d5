"""Invitation service for the profile setup flow.

Handles issuance, validation and one-time redemption of profile setup
tokens:
- One live token per email (a new issuance replaces the old one)
- Expiration fixed at issuance to now + 7 days in the reference time zone
- Redemption creates the account, alerts the manager, consumes the token
  and returns a session credential

Redemption runs inside the caller's database transaction. The token is
removed with a conditional delete so only one of two concurrent
redemptions can succeed; the loser's transaction is rolled back.
"""
import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from volunteer_portal.core.clock import ReferenceClock
from volunteer_portal.core.config import Settings
from volunteer_portal.core.email_templates import (
    SETUP_LINK_SUBJECT,
    new_account_manager_message,
    new_account_subject,
    setup_link_message,
)
from volunteer_portal.core.errors import (
    EmailInUseError,
    InvalidTokenError,
    InvitationCollisionError,
    TokenExpiredError,
    TokenNotFoundError,
    UnauthorizedTokenError,
)
from volunteer_portal.core.metrics import record_invitation_event
from volunteer_portal.core.security import hash_password
from volunteer_portal.core.structured_logging import log_json
from volunteer_portal.models.account import Account, default_permissions
from volunteer_portal.models.enums import AccountRole, WeeklySummaryOption
from volunteer_portal.models.invitation_token import InvitationToken
from volunteer_portal.schemas.invitation import RedeemInvitationRequest
from volunteer_portal.services.account_store import AccountStore
from volunteer_portal.services.credential_service import CredentialIssuer
from volunteer_portal.services.notification_service import Notifier
from volunteer_portal.services.token_store import InvitationTokenStore

logger = logging.getLogger(__name__)

SETUP_PATH = "ProfileInitialSetup"


class InvitationService:
    """Service for profile setup invitations."""

    def __init__(
        self,
        db: AsyncSession,
        settings: Settings,
        clock: ReferenceClock,
        notifier: Notifier,
    ):
        """Initialize invitation service.

        Args:
            db: Database session
            settings: Application settings (lifetimes, manager address, secrets)
            clock: Reference time zone clock
            notifier: Fire-and-forget message dispatcher
        """
        self.db = db
        self.settings = settings
        self.clock = clock
        self.notifier = notifier
        self.tokens = InvitationTokenStore(db)
        self.accounts = AccountStore(db)
        self.credentials = CredentialIssuer(settings)

    async def issue_invitation(self, email: str, base_url: str) -> str:
        """Issue a setup token for ``email`` and send the link.

        Any token already issued for the address is replaced. The link is
        returned whether or not the email is eventually delivered.

        Args:
            email: Address of the invited person
            base_url: Frontend base URL the link points at

        Returns:
            Setup link ``{base_url}/ProfileInitialSetup/{token}``

        Raises:
            EmailInUseError: If an account already exists for the address
            InvitationCollisionError: If a concurrent issuance for the same
                address inserted its token first
        """
        email = email.lower()

        if await self.accounts.find_by_email(email):
            raise EmailInUseError()

        await self.tokens.delete_by_email(email)

        try:
            record = await self.tokens.create(
                token=str(uuid.uuid4()),
                email=email,
                expiration=self.clock.expires_in(self.settings.invitation_lifetime_days),
            )
        except IntegrityError:
            await self.db.rollback()
            log_json(logger, logging.WARNING, "invitation_collision", email=email)
            record_invitation_event("collision")
            raise InvitationCollisionError() from None

        link = f"{base_url.rstrip('/')}/{SETUP_PATH}/{record.token}"
        self.notifier.dispatch(email, SETUP_LINK_SUBJECT, setup_link_message(link))

        log_json(
            logger,
            logging.INFO,
            "invitation_issued",
            email=email,
            token_id=record.id,
            expiration=record.expiration,
        )
        record_invitation_event("issued")
        return link

    async def validate_invitation(self, token: str) -> InvitationToken:
        """Check that a token exists and has not expired, without consuming it.

        Raises:
            TokenNotFoundError: If no token matches
            InvalidTokenError: If the token has expired
        """
        record = await self.tokens.find_by_token(token)
        if record is None:
            raise TokenNotFoundError()

        if self.clock.is_expired(record.expiration):
            record_invitation_event("expired")
            raise InvalidTokenError()

        return record

    async def redeem_invitation(self, request: RedeemInvitationRequest) -> str:
        """Consume a token, create the account and return a session credential.

        Checks run in a fixed order (token exists, email free, not expired)
        because the first failing check decides the error returned.

        Args:
            request: Token plus the profile fields entered by the invitee

        Returns:
            Signed session credential for the new account

        Raises:
            InvalidTokenError: If the token does not exist or was consumed
                concurrently
            EmailInUseError: If an account already exists for the token's email
            TokenExpiredError: If the token has expired
        """
        record = await self.tokens.find_by_token(request.token)
        if record is None:
            record_invitation_event("invalid")
            raise InvalidTokenError()

        if await self.accounts.find_by_email(record.email):
            raise EmailInUseError()

        if self.clock.is_expired(record.expiration):
            record_invitation_event("expired")
            raise TokenExpiredError()

        account = await self._create_account(record.email, request)

        self.notifier.dispatch(
            self.settings.manager_email_address,
            new_account_subject(account),
            new_account_manager_message(account),
        )

        if not await self.tokens.delete_by_id(record.id):
            record_invitation_event("invalid")
            raise InvalidTokenError()

        log_json(
            logger,
            logging.INFO,
            "invitation_redeemed",
            account_id=account.id,
            email=account.email,
            token_id=record.id,
        )
        record_invitation_event("redeemed")
        return self.credentials.issue(account, self.clock.now())

    async def timezone_api_key(self, token: str) -> str | None:
        """Return the geocoding key for holders of an existing token.

        Only existence is checked; this is a lightweight bearer gate for the
        setup form.

        Raises:
            UnauthorizedTokenError: If the token does not exist
        """
        if await self.tokens.find_by_token(token) is None:
            raise UnauthorizedTokenError()
        return self.settings.timezone_premium_key

    async def _create_account(self, email: str, request: RedeemInvitationRequest) -> Account:
        default_project = await self.accounts.find_project_by_name(
            self.settings.default_project_name
        )
        if default_project is None:
            log_json(
                logger,
                logging.WARNING,
                "default_project_missing",
                project_name=self.settings.default_project_name,
            )

        account = Account(
            email=email,
            password_hash=hash_password(request.password),
            role=AccountRole.VOLUNTEER,
            is_active=True,
            first_name=request.first_name,
            last_name=request.last_name,
            job_title=request.job_title,
            phone_number=request.phone_number,
            weekly_committed_hours=request.weekly_committed_hours,
            collaboration_preference=request.collaboration_preference,
            time_zone=request.time_zone or self.settings.reference_timezone,
            location=request.location,
            privacy_settings={
                "email": request.privacy_settings.email,
                "phoneNumber": request.privacy_settings.phone_number,
            },
            permissions=default_permissions(),
            bio="",
            bio_posted="default",
            personal_links=[],
            admin_links=[],
            weekly_summaries=[{"summary": ""}],
            weekly_summaries_count=0,
            weekly_summary_option=WeeklySummaryOption.REQUIRED.value,
            media_url="",
            team_code="",
            projects=[default_project] if default_project else [],
        )

        try:
            return await self.accounts.create(account)
        except IntegrityError:
            # Another redemption or signup created the address meanwhile
            await self.db.rollback()
            raise EmailInUseError() from None
