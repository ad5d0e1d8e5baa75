"""
Authentication and account administration tests.

Verifies:
- Login outcomes (success, unknown user, wrong password, empty fields)
- Temporary passwords force a change before access is granted
- Admin-only operations reject other roles
- User creation validation (empty fields, case-insensitive duplicates)
"""

import pytest

from dealership.errors import (
    InvalidCredentialsError,
    PermissionDeniedError,
    StoreError,
    UserNotFoundError,
    ValidationError,
)
from dealership.permissions import RoleName
from dealership.services import auth_service, permission_service
from tests.conftest import BOB_PASSWORD, make_user, user_row


class TestPasswordHashing:

    def test_hash_and_verify(self):
        hashed = auth_service.hash_password("s3cret!", rounds=4)
        assert hashed != "s3cret!"
        assert auth_service.verify_password("s3cret!", hashed)
        assert not auth_service.verify_password("other", hashed)

    def test_plaintext_stored_value_never_matches(self):
        assert not auth_service.verify_password("test123", "test123")

    def test_empty_inputs_never_match(self):
        hashed = auth_service.hash_password("s3cret!", rounds=4)
        assert not auth_service.verify_password("", hashed)
        assert not auth_service.verify_password("s3cret!", "")

    @pytest.mark.parametrize("password,confirm,message", [
        ("", None, "empty"),
        ("abc", None, "at least 6"),
        ("abcdef", "abcdeg", "do not match"),
    ])
    def test_validate_password_rejects(self, password, confirm, message):
        with pytest.raises(ValidationError, match=message):
            auth_service.validate_password(password, min_length=6, confirm=confirm)

    def test_generated_temp_password(self):
        first = auth_service.generate_temp_password()
        assert first.startswith("temp")
        assert first != auth_service.generate_temp_password()


class TestLogin:

    def test_login_returns_principal(self, access, bob):
        principal = access.login("bob", BOB_PASSWORD)

        assert principal.user_id == bob.id
        assert principal.role is RoleName.SALESPERSON
        assert principal.is_active
        assert not principal.must_change_password
        assert principal.has_permission("SELL_VEHICLE")
        assert not principal.has_permission("MANAGE_USERS")

    def test_username_is_case_insensitive(self, access, bob):
        assert access.login("BOB", BOB_PASSWORD).username == "bob"

    def test_unknown_user(self, access, admin):
        with pytest.raises(UserNotFoundError) as exc:
            access.login("nobody", "whatever")
        assert str(exc.value) == "Username not found"

    def test_wrong_password_is_distinct_from_unknown_user(self, access, bob):
        with pytest.raises(InvalidCredentialsError):
            access.login("bob", "not-bobs-password")

    @pytest.mark.parametrize("username", ["", "   ", None])
    def test_empty_username_is_not_found(self, access, bob, username):
        with pytest.raises(UserNotFoundError):
            access.login(username, BOB_PASSWORD)

    def test_empty_password_counts_as_wrong_password(self, access, bob):
        with pytest.raises(InvalidCredentialsError) as exc:
            access.login("bob", "")

        assert exc.value.remaining_attempts == 2
        assert user_row(access, "bob")["failed_attempts"] == 1

    @pytest.mark.parametrize("attempt", ["Émile", "émile", "ÉMILE", " Émile "])
    def test_non_ascii_username_lookup(self, access, admin, attempt):
        make_user(access, admin, "Manager", "Émile", "emilepass")

        assert access.login(attempt, "emilepass").username == "Émile"

    def test_non_ascii_username_without_fold_is_distinct(self, access, admin):
        make_user(access, admin, "Manager", "Émile", "emilepass")

        with pytest.raises(UserNotFoundError):
            access.login("Emile", "emilepass")

    def test_successful_login_is_audited(self, access, bob):
        access.login("bob", BOB_PASSWORD)

        with access.store.session() as session:
            events = permission_service.list_security_events(session, user_id=bob.id)
        assert events[0].event_type == "LOGIN_SUCCESS"
        assert events[0].success

    def test_logout_is_audited(self, access, bob):
        principal = access.login("bob", BOB_PASSWORD)
        access.logout(principal)
        access.logout(None)

        with access.store.session() as session:
            events = permission_service.list_security_events(session, user_id=bob.id)
        assert events[0].event_type == "LOGOUT"


class TestTemporaryPassword:

    def test_new_user_must_change_password(self, access, admin):
        make_user(access, admin, "Manager", "carol", "temp-carol", temporary=True)

        principal = access.login("carol", "temp-carol")

        assert principal.must_change_password
        assert not principal.has_permission("ADD_VEHICLE")
        assert not principal.has_permission("SEARCH_VEHICLES", default=True)

    def test_change_password_clears_flag(self, access, admin):
        make_user(access, admin, "Manager", "carol", "temp-carol", temporary=True)
        principal = access.login("carol", "temp-carol")

        access.change_password(principal, "carols-own", "carols-own")

        with pytest.raises(InvalidCredentialsError):
            access.login("carol", "temp-carol")
        fresh = access.login("carol", "carols-own")
        assert not fresh.must_change_password
        assert fresh.has_permission("ADD_VEHICLE")

    def test_change_password_leaves_counter_and_active_flag(self, access, bob):
        principal = access.login("bob", BOB_PASSWORD)
        access.store.execute("UPDATE users SET failed_attempts = 1 WHERE username = 'bob'")

        access.change_password(principal, "new-bob-pass")

        row = user_row(access, "bob")
        assert row["failed_attempts"] == 1
        assert row["is_active"]
        assert not row["is_temp_password"]

    def test_change_password_validates(self, access, bob):
        principal = access.login("bob", BOB_PASSWORD)

        with pytest.raises(ValidationError, match="do not match"):
            access.change_password(principal, "first-try", "second-try")
        with pytest.raises(ValidationError, match="empty"):
            access.change_password(principal, "")

    def test_temp_admin_cannot_administer(self, access, admin):
        make_user(access, admin, "Admin", "second", "temp-second", temporary=True)
        principal = access.login("second", "temp-second")

        with pytest.raises(PermissionDeniedError):
            access.toggle_active(principal, "Admin")


class TestCreateUser:

    def test_create_user(self, access, admin):
        user = access.create_user(
            admin, "Salesperson", "dave", "temp-dave", "Dave", "dave@dealership.local", "555-300-0000"
        )

        assert user.id > 0
        assert user.role_name == "Salesperson"
        row = user_row(access, "dave")
        assert row["is_temp_password"]
        assert row["is_active"]
        assert row["failed_attempts"] == 0
        assert row["role_id"] == 3
        assert row["password"] != "temp-dave"
        assert row["join_date"]

    def test_duplicate_username_case_insensitive(self, access, admin):
        with pytest.raises(ValidationError, match="already exists"):
            access.create_user(
                admin, "Manager", "admin", "temp-pass", "Other", "other@dealership.local", "555"
            )

    def test_duplicate_non_ascii_username(self, access, admin):
        make_user(access, admin, "Salesperson", "Émile", "emilepass")

        with pytest.raises(ValidationError, match="already exists"):
            access.create_user(
                admin, "Manager", "émile", "temp-pass", "Other", "other@dealership.local", "555"
            )
        assert len(access.store.query("SELECT user_id FROM users")) == 2

    def test_username_key_constraint(self, access, admin):
        make_user(access, admin, "Salesperson", "Émile", "emilepass")

        with pytest.raises(StoreError):
            access.store.execute(
                "INSERT INTO users (username, username_key, password, role_id, name, "
                "is_active, is_temp_password, failed_attempts, join_date) "
                "VALUES ('ÉMILE', 'émile', 'x', 3, 'Dup', 1, 0, 0, '2024-01-01')"
            )

    @pytest.mark.parametrize("field", ["role", "username", "temp_password", "name", "email", "phone"])
    def test_empty_field_rejected(self, access, admin, field):
        values = {
            "role": "Manager",
            "username": "erin",
            "temp_password": "temp-erin",
            "name": "Erin",
            "email": "erin@dealership.local",
            "phone": "555-400-0000",
        }
        values[field] = "  "

        with pytest.raises(ValidationError, match=field):
            access.create_user(admin, **values)

    def test_unknown_role_rejected(self, access, admin):
        with pytest.raises(ValidationError, match="Unknown role"):
            access.create_user(admin, "Janitor", "erin", "temp-erin", "Erin", "e@x", "555")

    def test_non_admin_cannot_create(self, access, bob):
        principal = access.login("bob", BOB_PASSWORD)

        with pytest.raises(PermissionDeniedError):
            access.create_user(principal, "Salesperson", "eve", "temp-eve", "Eve", "e@x", "555")

        with access.store.session() as session:
            assert auth_service.find_user(session, "eve") is None
            events = permission_service.list_security_events(session, user_id=bob.id)
        assert events[0].event_type == "PERMISSION_DENIED"

    def test_bootstrap_admin_only_once(self, access, admin):
        with pytest.raises(ValidationError, match="already exists"):
            access.bootstrap_admin(username="root", password="rootpass", name="Root")


class TestAdminOperations:

    def test_reset_password_does_not_set_temp_flag(self, access, admin, bob):
        access.reset_password(admin, "bob", "reset-bob-1")

        assert not user_row(access, "bob")["is_temp_password"]
        principal = access.login("bob", "reset-bob-1")
        assert not principal.must_change_password

    def test_reset_password_unknown_user(self, access, admin):
        with pytest.raises(UserNotFoundError):
            access.reset_password(admin, "ghost", "whatever1")

    def test_reset_password_requires_admin(self, access, admin, bob):
        make_user(access, admin, "Manager", "mia", "mia-pass")
        manager = access.login("mia", "mia-pass")

        with pytest.raises(PermissionDeniedError):
            access.reset_password(manager, "bob", "hijacked1")
        assert access.login("bob", BOB_PASSWORD)

    def test_list_users(self, access, admin, bob):
        rows = access.list_users(admin)

        assert [row["username"] for row in rows] == ["Admin", "bob"]
        assert rows[1]["role"] == "Salesperson"
        assert "SELL_VEHICLE" in rows[1]["permissions"]

    def test_password_reset_requests(self, access, admin, bob):
        access.request_password_reset("BOB")

        requests = access.list_password_reset_requests(admin)

        assert [r.username for r in requests] == ["bob"]
        assert requests[0].request_date

    def test_password_reset_request_unknown_user(self, access, admin):
        with pytest.raises(UserNotFoundError):
            access.request_password_reset("ghost")

    def test_reset_requests_are_admin_only(self, access, bob):
        principal = access.login("bob", BOB_PASSWORD)
        with pytest.raises(PermissionDeniedError):
            access.list_password_reset_requests(principal)
