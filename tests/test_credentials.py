import logging

import pytest

from webapp.auth.credentials import ADMIN_EMAIL, ADMIN_ID, CredentialEngine
from webapp.auth.passwords import verify_password
from webapp.errors import ValidationCode, ValidationError
from webapp.models import Role


@pytest.fixture()
def engine(file_stores):
    return CredentialEngine(file_stores.users)


def _register(engine, username="alice", email="alice@example.com", password="password1"):
    user = engine.register_user(username, email, password)
    engine.users.save(user)
    return user


def _code(excinfo):
    return excinfo.value.code


@pytest.mark.parametrize(
    "username,email,password,code",
    [
        ("", "", "", ValidationCode.EMPTY_USERNAME),
        ("bob", "", "", ValidationCode.EMPTY_EMAIL),
        ("bob", "bob@example.com", "", ValidationCode.EMPTY_PASSWORD),
        ("bob", "bob@example.com", "short", ValidationCode.PASSWORD_TOO_SHORT),
        # field checks come before uniqueness checks
        ("alice", "alice@example.com", "short", ValidationCode.PASSWORD_TOO_SHORT),
        ("ALICE", "bob@example.com", "password1", ValidationCode.USERNAME_TAKEN),
        ("bob", "Alice@Example.com", "password1", ValidationCode.EMAIL_TAKEN),
    ],
)
def test_register_reports_first_failure(engine, username, email, password, code):
    _register(engine)
    with pytest.raises(ValidationError) as excinfo:
        engine.register_user(username, email, password)
    assert _code(excinfo) == code


def test_register_returns_unsaved_standard_user(engine):
    user = engine.register_user("bob", "bob@example.com", "password1")
    assert user.id.startswith("usr_")
    assert user.role == Role.STANDARD
    assert user.password_hash != "password1"
    assert verify_password(user.password_hash, "password1")
    assert engine.users.find(user.id) is None


def test_registered_user_can_authenticate(engine):
    user = _register(engine)
    assert engine.authenticate("alice", "password1").id == user.id
    assert engine.authenticate("Alice", "password1").id == user.id


def test_unknown_user_and_wrong_password_fail_identically(engine):
    _register(engine)
    with pytest.raises(ValidationError) as unknown:
        engine.authenticate("nobody", "password1")
    with pytest.raises(ValidationError) as wrong:
        engine.authenticate("alice", "password2")
    assert _code(unknown) == _code(wrong) == ValidationCode.CREDENTIALS_INCORRECT
    assert str(unknown.value) == str(wrong.value)


def test_update_without_current_password_keeps_hash(engine):
    user = _register(engine)
    updated = engine.update_user(user, "alice2", "a2@example.com", "", "", is_admin_actor=False)
    assert updated.username == "alice2"
    assert updated.email == "a2@example.com"
    assert updated.password_hash == user.password_hash


def test_update_with_wrong_current_password(engine):
    user = _register(engine)
    with pytest.raises(ValidationError) as excinfo:
        engine.update_user(user, "alice", "alice@example.com", "wrong-one", "password2", is_admin_actor=False)
    assert _code(excinfo) == ValidationCode.PASSWORD_INCORRECT


def test_update_changes_password(engine):
    user = _register(engine)
    updated = engine.update_user(user, "alice", "alice@example.com", "password1", "password2", is_admin_actor=False)
    assert verify_password(updated.password_hash, "password2")
    assert not verify_password(updated.password_hash, "password1")


def test_update_checks_new_password(engine):
    user = _register(engine)
    with pytest.raises(ValidationError) as excinfo:
        engine.update_user(user, "alice", "alice@example.com", "password1", "short", is_admin_actor=False)
    assert _code(excinfo) == ValidationCode.PASSWORD_TOO_SHORT


def test_update_rejects_taken_username_and_email(engine):
    alice = _register(engine)
    _register(engine, "bob", "bob@example.com")
    with pytest.raises(ValidationError) as excinfo:
        engine.update_user(alice, "BOB", "alice@example.com", "", "", is_admin_actor=False)
    assert _code(excinfo) == ValidationCode.USERNAME_TAKEN
    with pytest.raises(ValidationError) as excinfo:
        engine.update_user(alice, "alice", "bob@example.com", "", "", is_admin_actor=False)
    assert _code(excinfo) == ValidationCode.EMAIL_TAKEN


def test_update_rejects_empty_fields(engine):
    user = _register(engine)
    with pytest.raises(ValidationError) as excinfo:
        engine.update_user(user, " ", "alice@example.com", "", "", is_admin_actor=False)
    assert _code(excinfo) == ValidationCode.EMPTY_USERNAME


def test_admin_actor_sets_password_without_current(engine):
    user = _register(engine)
    updated = engine.update_user(user, "alice", "alice@example.com", "", "password9", is_admin_actor=True)
    assert verify_password(updated.password_hash, "password9")


@pytest.mark.parametrize(
    "new_password,code",
    [("", ValidationCode.EMPTY_PASSWORD), ("short", ValidationCode.PASSWORD_TOO_SHORT)],
)
def test_admin_actor_must_set_valid_password(engine, new_password, code):
    user = _register(engine)
    with pytest.raises(ValidationError) as excinfo:
        engine.update_user(user, "alice", "new@example.com", "", new_password, is_admin_actor=True)
    assert _code(excinfo) == code


def test_surrounding_whitespace_is_stripped(engine):
    user = _register(engine, " alice ", " alice@example.com ")
    assert (user.username, user.email) == ("alice", "alice@example.com")
    with pytest.raises(ValidationError) as excinfo:
        engine.register_user("alice ", "other@example.com", "password1")
    assert _code(excinfo) == ValidationCode.USERNAME_TAKEN

    updated = engine.update_user(user, " alice2 ", " a2@example.com ", "", "", is_admin_actor=False)
    assert (updated.username, updated.email) == ("alice2", "a2@example.com")


def test_admin_account_bootstrapped_once(engine, caplog):
    with caplog.at_level(logging.WARNING, logger="webapp"):
        password = engine.ensure_admin_account()
    assert password
    assert password in caplog.text

    admin = engine.users.find(ADMIN_ID)
    assert admin.role == Role.ADMIN
    assert admin.is_admin
    assert admin.email == ADMIN_EMAIL
    assert engine.authenticate(ADMIN_ID, password).id == ADMIN_ID

    caplog.clear()
    assert engine.ensure_admin_account() is None
    assert caplog.text == ""
