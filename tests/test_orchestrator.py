"""
Integration tests for the orchestrated flows.

Real in-memory storage, real bcrypt (low cost) and real JWTs. Only email
and AI are faked.
"""

import re
from unittest.mock import AsyncMock

import pytest

from budgetly.config import Settings, get_settings
from budgetly.exceptions import (
    BadRequestError,
    DatabaseException,
    InvalidParam,
    NotFoundError,
    ServiceException,
    UnauthorizedError,
)
from budgetly.models.value_objects import Id, Plan
from budgetly.orchestrator import AuthFlow, PlanningFlow, create_app_components
from budgetly.services.ai import AIStructuredResponse
from budgetly.services.security import BcryptPasswordHasher, JwtTokenService
from budgetly.usecases import GeneratePlanning, GetBillsSummary

from conftest import NOW, make_bill, make_planning


SECRET = "orchestrator-test-secret-long-enough"

REGISTRATION = {
    "name": "Jane Doe",
    "email": "jane@example.com",
    "birthdate": "1990-05-20T00:00:00.000Z",
    "password": "s3cret!",
    "salary": 4200,
}


@pytest.fixture
def email_service():
    return AsyncMock()


@pytest.fixture
def token_service():
    return JwtTokenService(SECRET)


@pytest.fixture
def auth_flow(repos, token_service, email_service, audit_logger):
    return AuthFlow(
        user_command=repos.user_command,
        user_query=repos.user_query,
        password_command=repos.password_command,
        password_query=repos.password_query,
        hasher=BcryptPasswordHasher(salt_rounds=4),
        token_service=token_service,
        email_service=email_service,
        frontend_url="https://app.budgetly.com",
        email_sender="noreply@budgetly.com",
        audit_logger=audit_logger,
    )


def reset_token_from(email_service) -> str:
    text = email_service.send_email.await_args.args[3]
    return re.search(r"token=(\S+)", text).group(1)


class TestRegister:
    """Tests for AuthFlow.register."""

    async def test_creates_user_and_active_password(self, auth_flow, repos, token_service, audit_logger):
        result = await auth_flow.register(REGISTRATION)

        user = await repos.user_query.get(result.user.id)
        assert str(user.email) == "jane@example.com"
        assert user.salary.to_number() == 4200.0
        assert user.password.is_active()
        assert str(user.password.password) != "s3cret!"
        assert token_service.validate_token(result.user.id, result.token)
        audit_logger.log_user_registered.assert_awaited_once()

    async def test_sends_welcome_email(self, auth_flow, email_service):
        await auth_flow.register(REGISTRATION)

        sender, to, subject, text, html = email_service.send_email.await_args.args
        assert sender == "noreply@budgetly.com"
        assert to == "jane@example.com"
        assert subject == "Welcome to Our App!"
        assert text == "Hello Jane Doe, welcome aboard!"

    async def test_welcome_email_failure_is_audited_not_raised(
        self, auth_flow, email_service, audit_logger
    ):
        email_service.send_email.side_effect = ServiceException("SMTP down")

        result = await auth_flow.register(REGISTRATION)

        assert result.token
        audit_logger.log_external_service_error.assert_awaited_once()
        assert audit_logger.log_external_service_error.await_args.args[:2] == ("email", "SMTP down")

    async def test_salary_is_optional(self, auth_flow):
        params = {k: v for k, v in REGISTRATION.items() if k != "salary"}
        result = await auth_flow.register(params)
        assert result.user.salary is None

    @pytest.mark.parametrize("missing", ["name", "email", "birthdate", "password"])
    async def test_missing_parameter(self, auth_flow, repos, missing):
        params = {k: v for k, v in REGISTRATION.items() if k != missing}

        with pytest.raises(BadRequestError, match=f"Missing required parameter: {missing}"):
            await auth_flow.register(params)
        assert await repos.user_query.list() == []

    async def test_invalid_email(self, auth_flow):
        with pytest.raises(InvalidParam):
            await auth_flow.register({**REGISTRATION, "email": "jane"})

    async def test_duplicate_email(self, auth_flow, database):
        await auth_flow.register(REGISTRATION)

        with pytest.raises(DatabaseException, match="Email already registered"):
            await auth_flow.register(REGISTRATION)
        assert len(database.users) == 1
        assert len(database.passwords) == 1

    async def test_password_failure_removes_user(
        self, repos, database, token_service, email_service, audit_logger
    ):
        """Test a failed password insert leaves no orphaned user behind."""
        password_command = AsyncMock()
        password_command.create.side_effect = DatabaseException("connection lost")
        flow = AuthFlow(
            repos.user_command, repos.user_query, password_command,
            repos.password_query, BcryptPasswordHasher(4), token_service,
            email_service=email_service, audit_logger=audit_logger,
        )

        with pytest.raises(DatabaseException, match="connection lost"):
            await flow.register(REGISTRATION)

        assert database.users == {}
        assert database.passwords == {}
        email_service.send_email.assert_not_awaited()
        audit_logger.log_user_registered.assert_not_awaited()
        audit_logger.log_error.assert_awaited_once()
        error_type, message = audit_logger.log_error.await_args.args
        assert (error_type, message) == ("DatabaseException", "connection lost")
        assert audit_logger.log_error.await_args.kwargs["details"]["step"] == "create_password"

    async def test_email_free_after_failed_registration(self, repos, token_service, database):
        password_command = AsyncMock()
        password_command.create.side_effect = DatabaseException("connection lost")
        failing = AuthFlow(
            repos.user_command, repos.user_query, password_command,
            repos.password_query, BcryptPasswordHasher(4), token_service,
        )
        working = AuthFlow(
            repos.user_command, repos.user_query, repos.password_command,
            repos.password_query, BcryptPasswordHasher(4), token_service,
        )

        with pytest.raises(DatabaseException):
            await failing.register(REGISTRATION)
        result = await working.register(REGISTRATION)

        assert list(database.users) == [str(result.user.id)]


class TestLoginFlow:

    async def test_login_after_register(self, auth_flow):
        registered = await auth_flow.register(REGISTRATION)

        result = await auth_flow.login({"email": "jane@example.com", "password": "s3cret!"})

        assert result.user.id == registered.user.id

    async def test_wrong_password(self, auth_flow):
        await auth_flow.register(REGISTRATION)

        with pytest.raises(UnauthorizedError, match="Invalid credentials"):
            await auth_flow.login({"email": "jane@example.com", "password": "nope"})

    async def test_unknown_user(self, auth_flow):
        with pytest.raises(NotFoundError, match="User not found"):
            await auth_flow.login({"email": "nobody@example.com", "password": "x"})

    async def test_missing_password(self, auth_flow):
        with pytest.raises(BadRequestError, match="Missing required parameter: password"):
            await auth_flow.login({"email": "jane@example.com"})


class TestPasswordResetFlow:
    """Forgot password -> emailed link -> reset -> login with the new password."""

    async def test_full_reset(self, auth_flow, email_service, database):
        await auth_flow.register(REGISTRATION)

        await auth_flow.forgot_password({"email": "jane@example.com"})
        subject = email_service.send_email.await_args.args[2]
        assert subject == "Password Reset Request"
        token = reset_token_from(email_service)

        await auth_flow.reset_password(token, {"new_password": "n3w-s3cret"})

        await auth_flow.login({"email": "jane@example.com", "password": "n3w-s3cret"})
        with pytest.raises(UnauthorizedError, match="Invalid credentials"):
            await auth_flow.login({"email": "jane@example.com", "password": "s3cret!"})
        active = [r for r in database.passwords.values() if r["active"]]
        assert len(active) == 1

    async def test_reset_link_uses_frontend_url(self, auth_flow, email_service):
        await auth_flow.register(REGISTRATION)
        await auth_flow.forgot_password({"email": "jane@example.com"})

        text = email_service.send_email.await_args.args[3]
        assert "https://app.budgetly.com/reset-password?token=" in text

    async def test_forgot_password_unknown_email(self, auth_flow):
        with pytest.raises(NotFoundError, match="User not found"):
            await auth_flow.forgot_password({"email": "nobody@example.com"})

    async def test_forgot_password_without_email_service(self, repos, token_service):
        flow = AuthFlow(
            repos.user_command, repos.user_query, repos.password_command,
            repos.password_query, BcryptPasswordHasher(4), token_service,
        )
        with pytest.raises(ServiceException, match="Email service is not configured"):
            await flow.forgot_password({"email": "jane@example.com"})

    async def test_invalid_token(self, auth_flow):
        with pytest.raises(UnauthorizedError, match="Invalid or expired token"):
            await auth_flow.reset_password("garbage", {"new_password": "n3w"})

    async def test_missing_token(self, auth_flow):
        with pytest.raises(BadRequestError, match="Missing required parameter: token"):
            await auth_flow.reset_password(None, {"new_password": "n3w"})

    async def test_missing_new_password(self, auth_flow):
        with pytest.raises(BadRequestError, match="Missing required parameter: new_password"):
            await auth_flow.reset_password("token", {})

    async def test_token_for_user_without_password(self, auth_flow, token_service):
        token = token_service.generate_token_for_user(Id.generate())

        with pytest.raises(NotFoundError, match="Active password not found for this user"):
            await auth_flow.reset_password(token, {"new_password": "n3w"})


class TestPlanningFlow:
    """Tests for PlanningFlow."""

    @pytest.fixture
    def ai_service(self):
        service = AsyncMock()
        service.generate_structured.return_value = AIStructuredResponse(
            data={
                "name": "Emergency fund",
                "plan": "Put aside 500 every month.",
                "description": "Six months of bills.",
            },
            model="gemini-1.5-flash",
        )
        return service

    @pytest.fixture
    def planning_flow(self, repos, ai_service):
        get_bills_summary = GetBillsSummary(repos.bill_query, clock=lambda: NOW)
        return PlanningFlow(
            repos.user_query,
            repos.planning_query,
            get_bills_summary,
            GeneratePlanning(repos.planning_command, get_bills_summary, ai_service),
        )

    async def test_summary_and_generate(self, auth_flow, planning_flow, repos):
        registered = await auth_flow.register(REGISTRATION)
        user_id = registered.user.id
        await repos.bill_command.create(make_bill("Rent", 1500.0, user_id=str(user_id)))

        planning = await planning_flow.generate(
            user_id, {"goal": "Emergency fund", "goal_value": 15000}
        )
        summary = await planning_flow.summary(user_id)

        assert str(planning.name) == "Emergency fund"
        assert summary.salary == 4200.0
        assert summary.total_bills_value_monthly == 1500.0
        assert summary.plannings_count == 1

    async def test_generate_missing_goal_value(self, planning_flow):
        with pytest.raises(BadRequestError, match="Missing required parameter: goal_value"):
            await planning_flow.generate(Id.generate(), {"goal": "Trip"})

    async def test_generate_unknown_user(self, planning_flow):
        with pytest.raises(NotFoundError, match="User not found"):
            await planning_flow.generate(Id.generate(), {"goal": "Trip", "goal_value": 100})

    async def test_generate_from_previous_planning(
        self, auth_flow, planning_flow, repos, ai_service
    ):
        registered = await auth_flow.register(REGISTRATION)
        previous = make_planning(str(registered.user.id), plan=Plan("Sell the old car first."))
        await repos.planning_command.create(previous)

        await planning_flow.generate(
            registered.user.id,
            {"goal": "New car", "goal_value": 30000, "previous_planning_id": str(previous.id)},
        )

        prompt = ai_service.generate_structured.await_args.args[0]
        assert "Previous plan" in prompt
        assert "Sell the old car first." in prompt

    async def test_generate_without_previous_planning(self, auth_flow, planning_flow, ai_service):
        registered = await auth_flow.register(REGISTRATION)

        await planning_flow.generate(registered.user.id, {"goal": "Trip", "goal_value": 100})

        assert "Previous plan" not in ai_service.generate_structured.await_args.args[0]

    async def test_previous_planning_of_another_user(
        self, auth_flow, planning_flow, repos, ai_service
    ):
        registered = await auth_flow.register(REGISTRATION)
        other = await auth_flow.register({**REGISTRATION, "email": "john@example.com"})
        foreign = make_planning(str(other.user.id))
        await repos.planning_command.create(foreign)

        with pytest.raises(NotFoundError, match="Planning not found"):
            await planning_flow.generate(
                registered.user.id,
                {"goal": "Trip", "goal_value": 100, "previous_planning_id": str(foreign.id)},
            )
        ai_service.generate_structured.assert_not_awaited()

    async def test_deleted_previous_planning(self, auth_flow, planning_flow, repos):
        registered = await auth_flow.register(REGISTRATION)
        previous = make_planning(str(registered.user.id))
        await repos.planning_command.create(previous)
        await repos.planning_command.soft_delete(previous.id)

        with pytest.raises(NotFoundError, match="Planning not found"):
            await planning_flow.generate(
                registered.user.id,
                {"goal": "Trip", "goal_value": 100, "previous_planning_id": str(previous.id)},
            )

    async def test_unknown_previous_planning(self, auth_flow, planning_flow):
        registered = await auth_flow.register(REGISTRATION)

        with pytest.raises(NotFoundError, match="Planning not found"):
            await planning_flow.generate(
                registered.user.id,
                {"goal": "Trip", "goal_value": 100, "previous_planning_id": str(Id.generate())},
            )

    async def test_generate_without_ai(self, repos):
        flow = PlanningFlow(
            repos.user_query, repos.planning_query, GetBillsSummary(repos.bill_query)
        )
        with pytest.raises(ServiceException, match="AI service is not configured"):
            await flow.generate(Id.generate(), {"goal": "Trip", "goal_value": 100})


class TestCreateAppComponents:
    """Tests for the component factory."""

    @pytest.fixture(autouse=True)
    def env(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("TOKEN_SECRET", SECRET)
        monkeypatch.setenv("PASSWORD_SALT_ROUNDS", "4")
        monkeypatch.delenv("SMTP_SERVER", raising=False)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    async def test_runs_without_email_and_ai(self):
        """Test that optional services being unconfigured doesn't stop startup."""
        components = create_app_components(Settings())

        result = await components.auth_flow.register(REGISTRATION)

        assert components.token_service.validate_token(result.user.id, result.token)
        assert len(components.database.audit_events) == 1
        with pytest.raises(ServiceException, match="Email service is not configured"):
            await components.auth_flow.forgot_password({"email": "jane@example.com"})
        with pytest.raises(ServiceException, match="AI service is not configured"):
            await components.planning_flow.generate(
                result.user.id, {"goal": "Trip", "goal_value": 100}
            )

    def test_missing_token_secret(self, monkeypatch):
        monkeypatch.delenv("TOKEN_SECRET")
        with pytest.raises(Exception):
            create_app_components(Settings(), use_email=False, use_ai=False)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
