"""
Audit Logging Service.

Keeps a trail of sales and role changes. Every event is written to the
``pharmacy_pos.audit`` logger and held in memory for the register session.
"""

import logging
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

logger = logging.getLogger("pharmacy_pos.audit")


class AuditAction(str, Enum):
    """Predefined audit action types."""
    # Sales
    SALE_CREATE = "sale.create"
    SALE_FAILED = "sale.failed"

    # User management
    ROLE_ASSIGN = "role.assign"

    # Access
    ACCESS_DENIED = "access_denied"


class AuditResult(str, Enum):
    """Outcome of an audited action."""
    SUCCESS = "success"
    DENIED = "denied"
    ERROR = "error"


@dataclass
class AuditEvent:
    """One audit log entry."""
    action: str
    result: str
    actor_id: str | None = None
    resource_type: str | None = None
    resource_id: str | None = None
    resource_name: str | None = None
    error_message: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "action": self.action,
            "result": self.result,
            "actor_id": self.actor_id,
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
            "resource_name": self.resource_name,
            "error_message": self.error_message,
            "metadata": self.metadata,
        }


class AuditService:
    """
    Audit logging service.

    Disabled services still accept calls and return None, so callers never
    branch on configuration.
    """

    def __init__(self, enabled: bool = True, max_events: int = 1000):
        self.enabled = enabled
        self._events: deque[AuditEvent] = deque(maxlen=max_events)

    # =========================================================================
    # EVENT LOGGING
    # =========================================================================

    def log_event(
        self,
        action: str | AuditAction,
        actor_id: str | None = None,
        resource_type: str | None = None,
        resource_id: str | None = None,
        resource_name: str | None = None,
        result: str | AuditResult = AuditResult.SUCCESS,
        error_message: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AuditEvent | None:
        """
        Log an audit event.

        Args:
            action: Action performed (e.g., 'sale.create', 'role.assign')
            actor_id: ID of the user performing the action
            resource_type: Type of resource affected
            resource_id: ID of the specific resource
            resource_name: Human-readable resource name (invoice number, username)
            result: Result of the action ('success', 'denied', 'error')
            error_message: Error message if result is 'error'
            metadata: Additional context data

        Returns:
            The recorded event, or None if auditing is disabled
        """
        if not self.enabled:
            return None

        if isinstance(action, AuditAction):
            action = action.value
        if isinstance(result, AuditResult):
            result = result.value

        log_msg = (
            f"[AUDIT] user:{actor_id or 'unknown'} "
            f"{action} {resource_type or ''}:{resource_name or resource_id or ''} "
            f"-> {result}"
        )
        if result == AuditResult.SUCCESS.value:
            logger.info(log_msg)
        elif result == AuditResult.DENIED.value:
            logger.warning(log_msg)
        else:
            logger.error(log_msg)

        event = AuditEvent(
            action=action,
            result=result,
            actor_id=actor_id,
            resource_type=resource_type,
            resource_id=resource_id,
            resource_name=resource_name,
            error_message=error_message,
            metadata=metadata or {},
        )
        self._events.append(event)
        return event

    # =========================================================================
    # CONVENIENCE METHODS
    # =========================================================================

    def log_sale(
        self,
        user_id: str,
        sale_id: str,
        invoice_number: str,
        total_amount: Any,
        item_count: int,
    ) -> AuditEvent | None:
        """Log a completed sale."""
        return self.log_event(
            action=AuditAction.SALE_CREATE,
            actor_id=user_id,
            resource_type="sale",
            resource_id=sale_id,
            resource_name=invoice_number,
            metadata={"total_amount": str(total_amount), "items": item_count},
        )

    def log_sale_failed(
        self,
        user_id: str,
        invoice_number: str,
        reason: str | None = None,
    ) -> AuditEvent | None:
        """Log a sale the Sales collaborator failed to store."""
        return self.log_event(
            action=AuditAction.SALE_FAILED,
            actor_id=user_id,
            resource_type="sale",
            resource_name=invoice_number,
            result=AuditResult.ERROR,
            error_message=reason,
        )

    def log_role_assignment(
        self,
        actor_id: str,
        target_user_id: str | None,
        new_role: str,
        allowed: bool,
        current_role: str | None = None,
    ) -> AuditEvent | None:
        """Log an attempt to grant a role."""
        return self.log_event(
            action=AuditAction.ROLE_ASSIGN,
            actor_id=actor_id,
            resource_type="user",
            resource_id=target_user_id,
            result=AuditResult.SUCCESS if allowed else AuditResult.DENIED,
            metadata={"new_role": new_role, "current_role": current_role},
        )

    def log_access_denied(
        self,
        actor_id: str | None,
        permission: str,
        role: str | None = None,
    ) -> AuditEvent | None:
        """Log an action refused for lack of a permission."""
        return self.log_event(
            action=AuditAction.ACCESS_DENIED,
            actor_id=actor_id,
            resource_type="permission",
            resource_name=permission,
            result=AuditResult.DENIED,
            metadata={"role": role},
        )

    # =========================================================================
    # QUERY
    # =========================================================================

    def list_events(
        self,
        action: str | AuditAction | None = None,
        actor_id: str | None = None,
        result: str | AuditResult | None = None,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Most recent events first, optionally filtered."""
        if isinstance(action, AuditAction):
            action = action.value
        if isinstance(result, AuditResult):
            result = result.value

        matches = [
            event for event in reversed(self._events)
            if (action is None or event.action == action)
            and (actor_id is None or event.actor_id == actor_id)
            and (result is None or event.result == result)
        ]
        return matches[:limit]

    def clear(self) -> None:
        self._events.clear()
