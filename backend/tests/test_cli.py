"""
CLI command tests.
"""

from laundrydesk.models import BusinessSettings, SessionToken, User
from laundrydesk.permissions import Role
from laundrydesk.services import session_service


class TestSystemCommands:

    def test_init_creates_settings_and_super_admin(self, app, db_session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=["system", "init", "--username", "owner", "--password", "Owner123"])
        assert result.exit_code == 0, result.output
        assert "Created super admin: owner" in result.output

        user = db_session.query(User).filter_by(username="owner").one()
        assert user.role == Role.SUPER_ADMIN
        assert db_session.query(BusinessSettings).count() == 1

    def test_init_is_idempotent(self, app, db_session, super_admin):
        result = app.test_cli_runner().invoke(args=["system", "init"])
        assert result.exit_code == 0
        assert "Super admin already exists" in result.output
        assert db_session.query(User).filter_by(role=Role.SUPER_ADMIN).count() == 1

    def test_cleanup_sessions(self, app, db_session, employee):
        live, _ = session_service.create_session(employee.id)
        _, dead_token = session_service.create_session(employee.id)
        session_service.revoke_session(dead_token)

        result = app.test_cli_runner().invoke(args=["system", "cleanup-sessions"])
        assert result.exit_code == 0
        assert "Removed 1 session records" in result.output
        assert [s.id for s in db_session.query(SessionToken).all()] == [live.id]


class TestUserCommands:

    def test_create_and_list(self, app, db_session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "users", "create", "--username", "clerk", "--password", "Clerk123", "--role", "employee",
        ])
        assert result.exit_code == 0, result.output

        result = runner.invoke(args=["users", "list"])
        assert "clerk" in result.output

    def test_set_role_refuses_last_super_admin(self, app, super_admin):
        result = app.test_cli_runner().invoke(args=["users", "set-role", super_admin.username, "admin"])
        assert result.exit_code != 0
        assert "Cannot demote the last super admin" in result.output

    def test_set_role(self, app, db_session, employee):
        result = app.test_cli_runner().invoke(args=["users", "set-role", employee.username, "admin"])
        assert result.exit_code == 0
        db_session.refresh(employee)
        assert employee.role == Role.ADMIN


class TestPermissionCommands:

    def test_check(self, app, employee):
        runner = app.test_cli_runner()
        assert "PASS" in runner.invoke(args=["perms", "check", employee.username, "orders:create"]).output
        assert "FAIL" in runner.invoke(args=["perms", "check", employee.username, "orders:delete"]).output

    def test_list_for_role(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["perms", "list", "--role", "super_admin"])
        assert result.exit_code == 0
        assert "users:delete" in result.output

    def test_list_groups_by_category(self, app, db_session):
        output = app.test_cli_runner().invoke(args=["perms", "list"]).output
        lines = output.splitlines()
        orders_at = lines.index("[orders]")
        expenses_at = lines.index("[expenses]")
        assert orders_at < expenses_at
        reject_line = next(line for line in lines[orders_at:expenses_at] if "orders:reject" in line)
        assert "employee" not in reject_line
        assert "super_admin" in reject_line
