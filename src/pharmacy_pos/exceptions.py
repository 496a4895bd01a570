"""
Exception classes for the POS cores.

Validation rejections are recoverable and carry a user-facing message.
Authorization denials from the predicate surface are plain ``False`` results;
``AuthorizationError`` is only raised by the ``require_permission`` decorator.
"""

from typing import Any


class POSError(Exception):
    """
    Base exception for POS errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or "POS_ERROR"
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for display or logging."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


# =============================================================================
# VALIDATION REJECTIONS
# =============================================================================


class ValidationRejectedError(POSError):
    """Operator input rejected. No state was changed."""

    def __init__(
        self,
        message: str = "Validation failed",
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            error_code=error_code or "VALIDATION_REJECTED",
            details=details,
        )


class EmptyCartError(ValidationRejectedError):
    """Checkout attempted with no items in the cart."""

    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message=message, error_code="EMPTY_CART")


class InsufficientPaymentError(ValidationRejectedError):
    """Tendered amount is below the final total."""

    def __init__(
        self,
        message: str = "Insufficient payment amount",
        tendered: Any = None,
        total: Any = None,
    ):
        details = {}
        if tendered is not None:
            details["tendered"] = str(tendered)
        if total is not None:
            details["total"] = str(total)

        super().__init__(
            message=message,
            error_code="INSUFFICIENT_PAYMENT",
            details=details,
        )


class PointsRedemptionError(ValidationRejectedError):
    """Loyalty points request exceeds what the customer and cart allow."""

    def __init__(
        self,
        message: str = "Cannot redeem that many points",
        requested: int | None = None,
        maximum: int | None = None,
    ):
        details = {}
        if requested is not None:
            details["requested"] = requested
        if maximum is not None:
            details["maximum"] = maximum

        super().__init__(
            message=message,
            error_code="POINTS_REDEMPTION_REJECTED",
            details=details,
        )


class RoleAssignmentError(ValidationRejectedError):
    """Role outside the actor's assignable roles."""

    def __init__(
        self,
        message: str = "Role assignment not allowed",
        actor_role: str | None = None,
        target_role: str | None = None,
    ):
        details = {}
        if actor_role:
            details["actor_role"] = actor_role
        if target_role:
            details["target_role"] = target_role

        super().__init__(
            message=message,
            error_code="ROLE_ASSIGNMENT_REJECTED",
            details=details,
        )


# =============================================================================
# AUTHORIZATION
# =============================================================================


class AuthorizationError(POSError):
    """Authorization failed error."""

    def __init__(
        self,
        message: str = "Permission denied",
        required_permission: str | None = None,
        role: str | None = None,
    ):
        details = {}
        if required_permission:
            details["required_permission"] = required_permission
        if role:
            details["role"] = role

        super().__init__(
            message=message,
            error_code="PERMISSION_DENIED",
            details=details,
        )


# =============================================================================
# PERSISTENCE
# =============================================================================


class SalePersistenceError(POSError):
    """The Sales collaborator failed to store the sale. Safe to retry."""

    def __init__(
        self,
        message: str = "Failed to complete sale",
        invoice_number: str | None = None,
    ):
        details = {}
        if invoice_number:
            details["invoice_number"] = invoice_number

        super().__init__(
            message=message,
            error_code="SALE_PERSISTENCE_FAILED",
            details=details,
        )
