"""
Audit Logger

DESIGN DECISION: Security-relevant actions (registration, logins,
password changes, deletions, AI plannings) are logged as AuditEvents.

The audit logger:
- Is async so it fits the use cases' flow
- Gracefully handles failures (never breaks the operation being audited)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from budgetly.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from budgetly.services.storage.interface import AuditStorageInterface


def configure_logging(level: str = "INFO") -> None:
    """
    Configure structlog for JSON output through the stdlib logging module.

    Called once at startup by create_app_components().
    """
    logging.basicConfig(format="%(message)s", level=level.upper())
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("budgetly.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_user_registered(
        self,
        user_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.user_registered(user_id, correlation_id))

    async def log_login_succeeded(self, user_id: str) -> None:
        await self.log(AuditEventBuilder.login_succeeded(user_id))

    async def log_login_failed(
        self,
        email: str,
        reason: str,
        user_id: Optional[str] = None,
    ) -> None:
        """Log a refused login. `reason` is the message returned to the caller."""
        await self.log(AuditEventBuilder.login_failed(email, reason, user_id))

    async def log_password_reset_requested(self, user_id: str) -> None:
        await self.log(AuditEventBuilder.password_reset_requested(user_id))

    async def log_password_reset(
        self,
        user_id: str,
        old_password_id: str,
        new_password_id: str,
    ) -> None:
        await self.log(
            AuditEventBuilder.password_reset(user_id, old_password_id, new_password_id)
        )

    async def log_planning_generated(
        self,
        planning_id: str,
        user_id: str,
        model: str,
    ) -> None:
        await self.log(AuditEventBuilder.planning_generated(planning_id, user_id, model))

    async def log_entity_deleted(
        self,
        entity_type: str,
        entity_id: str,
        permanent: bool,
    ) -> None:
        await self.log(AuditEventBuilder.entity_deleted(entity_type, entity_id, permanent))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        event = AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a multi-step user action (e.g., registration).
    Pass it through all subsequent operations.
    """
    return uuid4()
