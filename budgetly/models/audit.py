"""
Audit Models for Budgetly

Every security-relevant or money-relevant action produces an AuditEvent.
This provides:
1. Traceability of authentication and password changes
2. Debugging information when a flow fails half-way
3. A history of AI-generated plannings

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.

CRITICAL: Events never carry secrets. No plaintext passwords, hashes or
tokens end up in `details`.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Authentication
    USER_REGISTERED = "user_registered"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"

    # Password lifecycle
    PASSWORD_RESET_REQUESTED = "password_reset_requested"
    PASSWORD_RESET = "password_reset"

    # Planning
    PLANNING_GENERATED = "planning_generated"

    # Persistence
    ENTITY_DELETED = "entity_deleted"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'user', 'bill', 'planning')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one register flow)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.login_succeeded(user_id)
        event = AuditEventBuilder.entity_deleted("bill", bill_id, permanent=True)
    """

    @staticmethod
    def user_registered(
        user_id: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REGISTERED,
            entity_type="user",
            entity_id=user_id,
            correlation_id=correlation_id,
            description="User registered",
            is_user_action=True,
        )

    @staticmethod
    def login_succeeded(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            entity_type="user",
            entity_id=user_id,
            description="User logged in",
            is_user_action=True,
        )

    @staticmethod
    def login_failed(
        email: str,
        reason: str,
        user_id: Optional[str] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            entity_id=user_id,
            description=f"Login failed: {reason}",
            details={
                "email": email,
                "reason": reason,
            },
            is_user_action=True,
        )

    @staticmethod
    def password_reset_requested(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PASSWORD_RESET_REQUESTED,
            entity_type="user",
            entity_id=user_id,
            description="Password reset email sent",
            is_user_action=True,
        )

    @staticmethod
    def password_reset(
        user_id: str,
        old_password_id: str,
        new_password_id: str
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PASSWORD_RESET,
            entity_type="password",
            entity_id=new_password_id,
            description="Active password replaced",
            details={
                "user_id": user_id,
                "deactivated_password_id": old_password_id,
            },
            is_user_action=True,
        )

    @staticmethod
    def planning_generated(
        planning_id: str,
        user_id: str,
        model: str
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PLANNING_GENERATED,
            entity_type="planning",
            entity_id=planning_id,
            description=f"Planning generated with {model}",
            details={
                "user_id": user_id,
                "model": model,
            },
        )

    @staticmethod
    def entity_deleted(
        entity_type: str,
        entity_id: str,
        permanent: bool
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_DELETED,
            severity=AuditSeverity.WARNING if permanent else AuditSeverity.INFO,
            entity_type=entity_type,
            entity_id=entity_id,
            description=(
                f"{entity_type.capitalize()} "
                f"{'permanently deleted' if permanent else 'soft deleted'}"
            ),
            details={"permanent": permanent},
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
