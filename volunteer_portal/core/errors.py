"""Domain errors raised by services.

Each error is an ``HTTPException`` so FastAPI renders it directly; the
class name identifies the failure for callers that handle it in-process.
"""

from fastapi import HTTPException, status


class EmailInUseError(HTTPException):
    """An account already exists for the address."""

    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail="email already in use")


class TokenNotFoundError(HTTPException):
    """Validation probe for a token that does not exist."""

    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail="Token not found")


class InvalidTokenError(HTTPException):
    """Token is unknown, already consumed, or (on validation) expired."""

    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid token")


class TokenExpiredError(HTTPException):
    """Redemption attempted after the token's expiration."""

    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail="Token is expired")


class InvitationCollisionError(HTTPException):
    """A concurrent issuance for the same email won the uniqueness race."""

    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail="Another invitation for this email was issued concurrently, please retry",
        )


class UnauthorizedTokenError(HTTPException):
    """Token gate for the setup form failed."""

    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized Request")


class ReasonErrorCode:
    NOT_SUNDAY = 0
    FORBIDDEN = 1
    USER_NOT_FOUND = 2
    DUPLICATE = 3
    REASON_NOT_FOUND = 4
    DELETE_FAILED = 5
    EMPTY_REASON = 6
    PAST_DATE = 7


class ReasonError(HTTPException):
    """Reason scheduling failure carrying a numeric error code."""

    def __init__(self, status_code: int, message: str, error_code: int) -> None:
        super().__init__(
            status_code=status_code,
            detail={"message": message, "errorCode": error_code},
        )
        self.error_code = error_code
