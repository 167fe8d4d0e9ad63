# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors tell the client HOW to recover, not just WHAT failed.
#
# Quota and cooldown errors are expected outcomes: they are rendered as
# structured responses and are never logged as errors.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class KanvaException(Exception):
    """
    Base exception for the KANVA API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "KANVA_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}
        self.headers = headers

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Team Slot Exceptions
# =============================================================================

class QuotaExceededError(KanvaException):
    """Raised when a new team would exceed the owner's slot entitlement."""

    def __init__(self, limit: int, current: int):
        plural = "s" if limit != 1 else ""
        super().__init__(
            message=f"Team slot limit reached: {current}/{limit} slot{plural} in use",
            code="QUOTA_EXCEEDED",
            status_code=409,
            suggestion=(
                f"You can manage at most {limit} team{plural}. "
                "Upgrade your subscription or delete an existing slot."
            ),
            details={"limit": limit, "current": current},
        )
        self.limit = limit
        self.current = current


class CooldownActiveError(KanvaException):
    """Raised when a slot is changed before its weekly cooldown has elapsed."""

    def __init__(self, slot_id: str, days_remaining: int):
        plural = "s" if days_remaining != 1 else ""
        super().__init__(
            message=f"Team slot is locked for {days_remaining} more day{plural}",
            code="COOLDOWN_ACTIVE",
            status_code=409,
            suggestion=f"Try again in {days_remaining} day{plural}. A team slot can be changed once per week.",
            details={"slot_id": slot_id, "days_remaining": days_remaining},
        )
        self.days_remaining = days_remaining


class TeamSlotNotFoundError(KanvaException):
    """Raised when a slot ID doesn't exist (usually a stale client list)."""

    def __init__(self, slot_id: str):
        super().__init__(
            message=f"Team slot not found: {slot_id}",
            code="SLOT_NOT_FOUND",
            status_code=404,
            suggestion="Reload your team slots; this slot no longer exists",
            details={"slot_id": slot_id, "refresh": True},
        )


class TeamSlotForbiddenError(KanvaException):
    """Raised when a slot belongs to a different owner."""

    def __init__(self, slot_id: str):
        super().__init__(
            message=f"Team slot does not belong to you: {slot_id}",
            code="SLOT_FORBIDDEN",
            status_code=403,
            suggestion="Reload your team slots",
            details={"slot_id": slot_id, "refresh": True},
        )


class TeamAlreadyInSlotError(KanvaException):
    """Raised when rebinding a slot to a team that already occupies another slot."""

    def __init__(self, team_id: str):
        super().__init__(
            message=f"Team is already stored in one of your slots: {team_id}",
            code="TEAM_ALREADY_IN_SLOT",
            status_code=409,
            suggestion="Pick a different team or use the existing slot",
            details={"team_id": team_id},
        )


# =============================================================================
# Credit Exceptions
# =============================================================================

class InsufficientCreditsError(KanvaException):
    """Raised when a credit-consuming action is attempted with a zero balance."""

    def __init__(self, user_id: str):
        super().__init__(
            message="No credits remaining",
            code="INSUFFICIENT_CREDITS",
            status_code=402,
            suggestion="Upgrade your subscription or purchase additional credits",
            details={"user_id": user_id},
        )


class CreditLedgerMissingError(KanvaException):
    """Raised when an owner has no credit ledger row yet."""

    def __init__(self, user_id: str):
        super().__init__(
            message="Credit balance has not been initialized",
            code="CREDITS_UNINITIALIZED",
            status_code=404,
            suggestion="Provision a credit balance with POST /credits/provision",
            details={"user_id": user_id},
        )


# =============================================================================
# Infrastructure / Auth Exceptions
# =============================================================================

class StoreUnavailableError(KanvaException):
    """Raised when the Supabase backend cannot be reached or rejects a query."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            message=f"Database operation failed: {operation}",
            code="STORE_UNAVAILABLE",
            status_code=503,
            suggestion="Try again in a moment",
            details={"operation": operation, "error": error},
        )


class UnauthenticatedError(KanvaException):
    """Raised when a request carries no valid access token."""

    def __init__(self, reason: str = "Not authenticated"):
        super().__init__(
            message=reason,
            code="UNAUTHENTICATED",
            status_code=401,
            suggestion="Sign in again to refresh your session",
            headers={"WWW-Authenticate": "Bearer"},
        )


class AdminRequiredError(KanvaException):
    """Raised when a non-admin calls an admin-only endpoint."""

    def __init__(self):
        super().__init__(
            message="Admin role required",
            code="ADMIN_REQUIRED",
            status_code=403,
        )


# =============================================================================
# Account Exceptions
# =============================================================================

class InvalidConfirmationError(KanvaException):
    """Raised when the account deletion confirmation text is wrong."""

    def __init__(self, expected: str):
        super().__init__(
            message="Invalid confirmation text",
            code="INVALID_CONFIRMATION",
            status_code=400,
            suggestion=f"Type {expected} to confirm account deletion",
        )


class AccountDeletionError(KanvaException):
    """Raised when the identity itself could not be deleted."""

    def __init__(self, user_id: str, error: str):
        super().__init__(
            message=f"Failed to delete user: {error}",
            code="ACCOUNT_DELETION_FAILED",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"user_id": user_id},
        )


# =============================================================================
# Upstream Exceptions
# =============================================================================

class SportsDataError(KanvaException):
    """Raised when the league data API fails or returns garbage."""

    def __init__(self, sport: str, error: str):
        super().__init__(
            message=f"Could not load {sport} data: {error}",
            code="SPORTS_DATA_UNAVAILABLE",
            status_code=502,
            suggestion="The league data service may be down. Try again later.",
            details={"sport": sport, "error": error},
        )


class SubscriptionCheckError(KanvaException):
    """Raised when the billing provider can't be queried."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Subscription check failed: {error}",
            code="SUBSCRIPTION_CHECK_FAILED",
            status_code=502,
            suggestion="Try again later; your current plan stays active meanwhile",
            details={"error": error},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def kanva_exception_handler(
    request: Request,
    exc: KanvaException
) -> JSONResponse:
    """
    Convert KanvaException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context (limit, days_remaining, refresh hint...)
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Converts validation errors to user-friendly messages.
    """
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": str(exc)
        }
    )
