"""
Main Orchestrator for Budgetly

This module ties together all the components and defines the
end-to-end flows for:
1. Authentication (register -> login -> forgot password -> reset password)
2. Planning (load user -> summarize bills -> AI plan -> persist)

DESIGN DECISION: Flows take raw request payloads (plain dicts with
snake_case keys), check required parameters, build value objects and
delegate to the use cases. Transport layers only have to map exceptions
to status codes with `http_status_for`.

Every collaborator is created once in create_app_components() and
injected. Nothing here reaches for a global.
"""

from typing import Any, NamedTuple, Optional

import structlog

from budgetly.audit import AuditLogger, configure_logging, create_correlation_id
from budgetly.config import Settings, get_settings
from budgetly.exceptions import (
    BadRequestError,
    NotFoundError,
    ServiceException,
    UnauthorizedError,
)
from budgetly.models.entities import Password, Planning, User
from budgetly.models.summary import UserSummary
from budgetly.models.value_objects import (
    Bool,
    DateEpoch,
    Description,
    Email,
    Goal,
    Id,
    MoneyValue,
    Name,
    Password as PlainPassword,
    PasswordHash,
)
from budgetly.services.ai import AIService, GeminiAIService
from budgetly.services.email import (
    EmailService,
    EmailTemplates,
    EmailTemplateType,
    SmtpEmailService,
)
from budgetly.services.security import (
    BcryptPasswordHasher,
    JwtTokenService,
    PasswordHasher,
    TokenService,
)
from budgetly.services.storage import (
    InMemoryAuditStorage,
    InMemoryBillQueryRepository,
    InMemoryDatabase,
    InMemoryPasswordCommandRepository,
    InMemoryPasswordQueryRepository,
    InMemoryPlanningCommandRepository,
    InMemoryPlanningQueryRepository,
    InMemoryUserCommandRepository,
    InMemoryUserQueryRepository,
    PasswordCommandRepository,
    PasswordQueryRepository,
    PlanningQueryRepository,
    UserCommandRepository,
    UserQueryRepository,
)
from budgetly.usecases import (
    CreatePassword,
    CreateUser,
    DeleteUser,
    FindPlanning,
    FindUser,
    ForgotPassword,
    GeneratePlanning,
    GetBillsSummary,
    GetUserSummary,
    Login,
    LoginResult,
    ResetPassword,
)
from budgetly.validation import validate_required_fields


logger = structlog.get_logger(__name__)


class AuthFlow:
    """
    Orchestrates the authentication flows.

    Register creates the user row first and its password record second.
    If the password record cannot be stored, the user row is removed again
    and the failure is audited before it propagates.
    The welcome email is a courtesy: if it fails, the registration stands
    and the failure is audited.
    """

    def __init__(
        self,
        user_command: UserCommandRepository,
        user_query: UserQueryRepository,
        password_command: PasswordCommandRepository,
        password_query: PasswordQueryRepository,
        hasher: PasswordHasher,
        token_service: TokenService,
        email_service: Optional[EmailService] = None,
        frontend_url: str = "http://localhost:3000",
        email_sender: str = "noreply@budgetly.com",
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._password_query = password_query
        self._hasher = hasher
        self._token_service = token_service
        self._email_service = email_service
        self._email_sender = email_sender
        self._audit_logger = audit_logger

        self._create_user = CreateUser(user_command)
        self._delete_user = DeleteUser(user_command)
        self._create_password = CreatePassword(password_command)
        self._find_user = FindUser(user_query)
        self._login = Login(
            user_query, password_query, hasher, token_service, audit_logger
        )
        self._reset_password = ResetPassword(password_command, audit_logger)
        self._forgot_password = (
            ForgotPassword(
                token_service,
                email_service,
                frontend_url,
                email_sender,
                audit_logger,
            )
            if email_service else None
        )

    async def _new_password_record(self, user_id: Id, plaintext: PlainPassword) -> Password:
        hashed = await self._hasher.encrypt(str(plaintext))
        return Password(
            id=Id.generate(),
            user_id=user_id,
            password=PasswordHash(hashed),
            active=Bool(True),
            created_at=DateEpoch.now(),
        )

    async def register(self, params: dict[str, Any]) -> LoginResult:
        """
        Create a user with an active password and log them in.

        Required: name, email, birthdate, password. Optional: salary.
        """
        validate_required_fields(params, ["name", "email", "birthdate", "password"])
        correlation_id = create_correlation_id()

        user_id = Id.generate()
        password = await self._new_password_record(user_id, PlainPassword(params["password"]))
        user = User(
            id=user_id,
            name=Name(params["name"]),
            birthdate=DateEpoch(params["birthdate"]),
            email=Email(params["email"]),
            created_at=DateEpoch.now(),
            password=password,
            salary=MoneyValue(params["salary"]) if params.get("salary") else None,
        )

        created = await self._create_user.execute(user)
        try:
            await self._create_password.execute(password)
        except Exception as e:
            await self._delete_user.execute(user_id, is_permanent=True)
            logger.error("registration_rolled_back", user_id=str(user_id), error=str(e))
            if self._audit_logger:
                await self._audit_logger.log_error(
                    type(e).__name__,
                    str(e),
                    details={"step": "create_password", "user_id": str(user_id)},
                    correlation_id=correlation_id,
                )
            raise
        token = self._token_service.generate_token_for_user(user_id)

        if self._audit_logger:
            await self._audit_logger.log_user_registered(str(user_id), correlation_id)

        await self._send_welcome(created, correlation_id)
        return LoginResult(user=created, token=token)

    async def _send_welcome(self, user: User, correlation_id) -> None:
        if not self._email_service:
            return
        template = EmailTemplates.get_template(
            EmailTemplateType.WELCOME, username=str(user.name)
        )
        try:
            await self._email_service.send_email(
                self._email_sender,
                str(user.email),
                template.subject,
                template.text,
                template.html,
            )
        except ServiceException as e:
            if self._audit_logger:
                await self._audit_logger.log_external_service_error(
                    "email", str(e), correlation_id
                )

    async def login(self, params: dict[str, Any]) -> LoginResult:
        """Required: email, password."""
        validate_required_fields(params, ["email", "password"])
        return await self._login.execute(
            Email(params["email"]), PlainPassword(params["password"])
        )

    async def forgot_password(self, params: dict[str, Any]) -> None:
        """
        Email a reset link to the account behind `email`.

        Raises:
            ServiceException: If no email service is configured
        """
        validate_required_fields(params, ["email"])
        if self._forgot_password is None:
            raise ServiceException("Email service is not configured")

        user = await self._find_user.execute({"email": params["email"]})
        await self._forgot_password.execute(user)

    async def reset_password(self, token: Optional[str], params: dict[str, Any]) -> Password:
        """
        Replace the active password of the user the reset token was issued to.

        Required: token, new_password.
        """
        validate_required_fields(params, ["new_password"])
        if not token:
            raise BadRequestError("Missing required parameter: token")

        try:
            user_id = self._token_service.get_user_id_from_token(token)
        except UnauthorizedError:
            raise UnauthorizedError("Invalid or expired token")

        old_password = await self._password_query.find(
            {"user_id": str(user_id), "active": True}
        )
        if old_password is None:
            raise NotFoundError("Active password not found for this user")

        if not self._token_service.validate_token(user_id, token):
            raise UnauthorizedError("Invalid or expired token")

        new_password = await self._new_password_record(
            user_id, PlainPassword(params["new_password"])
        )
        return await self._reset_password.execute(new_password, old_password)


class PlanningFlow:
    """
    Orchestrates the dashboard summary and AI planning generation for an
    authenticated user.

    A new plan can build on one of the user's earlier plannings: pass its
    id as `previous_planning_id` and the AI is shown the earlier plan.
    """

    def __init__(
        self,
        user_query: UserQueryRepository,
        planning_query: PlanningQueryRepository,
        get_bills_summary: GetBillsSummary,
        generate_planning: Optional[GeneratePlanning] = None,
    ):
        self._find_user = FindUser(user_query)
        self._find_planning = FindPlanning(planning_query)
        self._get_user_summary = GetUserSummary(user_query, get_bills_summary)
        self._generate_planning = generate_planning

    async def summary(self, user_id: Id) -> UserSummary:
        return await self._get_user_summary.execute(user_id)

    async def generate(self, user_id: Id, params: dict[str, Any]) -> Planning:
        """
        Required: goal, goal_value. Optional: description, previous_planning_id.

        Raises:
            ServiceException: If no AI service is configured
            NotFoundError: If the previous planning does not exist or belongs
                to another user
        """
        validate_required_fields(params, ["goal", "goal_value"])
        if self._generate_planning is None:
            raise ServiceException("AI service is not configured")

        user = await self._find_user.execute({"id": str(user_id)})
        previous_planning = None
        if params.get("previous_planning_id"):
            previous_planning = await self._find_previous_planning(
                user.id, params["previous_planning_id"]
            )

        return await self._generate_planning.execute(
            user,
            Goal(params["goal"]),
            MoneyValue(params["goal_value"]),
            Description(params["description"]) if params.get("description") else None,
            previous_planning=previous_planning,
        )

    async def _find_previous_planning(self, user_id: Id, planning_id: Any) -> Planning:
        planning = await self._find_planning.execute({"id": str(planning_id)})
        # Another user's planning is reported as missing
        if planning.user_id != user_id or planning.is_deleted:
            raise NotFoundError(FindPlanning.not_found_message)
        return planning


class AppComponents(NamedTuple):
    auth_flow: AuthFlow
    planning_flow: PlanningFlow
    token_service: TokenService
    audit_logger: AuditLogger
    database: InMemoryDatabase


def create_app_components(
    settings: Optional[Settings] = None,
    use_email: bool = True,
    use_ai: bool = True,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Defaults to get_settings()
        use_email: Whether to initialize SMTP delivery.
                   Set to False for testing without a mail server.
        use_ai: Whether to initialize the Gemini client.

    Email and AI are optional: when their configuration is missing the
    app still starts, and the flows that need them raise ServiceException.

    Raises:
        pydantic.ValidationError: If the token settings are missing
    """
    settings = settings or get_settings()
    app_settings = settings.app
    configure_logging(app_settings.log_level)

    database = InMemoryDatabase()
    audit_logger = AuditLogger(InMemoryAuditStorage(database))

    token_settings = settings.token
    token_service = JwtTokenService(
        token_settings.secret,
        expire_hours=token_settings.expire_hours,
        algorithm=token_settings.algorithm,
    )
    hasher = BcryptPasswordHasher(app_settings.password_salt_rounds)

    email_service: Optional[EmailService] = None
    if use_email:
        try:
            smtp = settings.smtp
            email_service = SmtpEmailService(
                smtp.server, smtp.port, smtp.user, smtp.password, smtp.timeout_seconds
            )
        except Exception as e:
            # Email not configured - continue without it
            logger.warning("email_not_configured", error=str(e))

    ai_service: Optional[AIService] = None
    if use_ai:
        try:
            gemini = settings.gemini
            ai_service = GeminiAIService(
                gemini.api_key, gemini.model_name, gemini.max_tokens, gemini.temperature
            )
        except Exception as e:
            logger.warning("ai_not_configured", error=str(e))

    user_query = InMemoryUserQueryRepository(database)
    get_bills_summary = GetBillsSummary(InMemoryBillQueryRepository(database))

    auth_flow = AuthFlow(
        user_command=InMemoryUserCommandRepository(database),
        user_query=user_query,
        password_command=InMemoryPasswordCommandRepository(database),
        password_query=InMemoryPasswordQueryRepository(database),
        hasher=hasher,
        token_service=token_service,
        email_service=email_service,
        frontend_url=app_settings.frontend_url,
        email_sender=app_settings.email_sender,
        audit_logger=audit_logger,
    )

    generate_planning = None
    if ai_service:
        generate_planning = GeneratePlanning(
            InMemoryPlanningCommandRepository(database),
            get_bills_summary,
            ai_service,
            audit_logger,
        )
    planning_flow = PlanningFlow(
        user_query,
        InMemoryPlanningQueryRepository(database),
        get_bills_summary,
        generate_planning,
    )

    return AppComponents(
        auth_flow=auth_flow,
        planning_flow=planning_flow,
        token_service=token_service,
        audit_logger=audit_logger,
        database=database,
    )
