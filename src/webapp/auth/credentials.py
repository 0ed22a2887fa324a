# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from webapp.auth.passwords import hash_password, verify_password
from webapp.errors import ValidationCode, ValidationError
from webapp.ids import generate_id, generate_password
from webapp.models import Role, User
from webapp.stores import UserStore

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
USER_ID_LENGTH = 16
ADMIN_ID = "admin"
ADMIN_EMAIL = "root@localhost"
ADMIN_PASSWORD_LENGTH = 16


class CredentialEngine:
    """Validates, hashes and checks credentials against the user store.

    None of the operations persist anything except ``ensure_admin_account``;
    callers save the returned records themselves.
    """

    def __init__(self, users: UserStore):
        self.users = users

    def _check_new_password(self, password: str) -> None:
        if not password:
            raise ValidationError(ValidationCode.EMPTY_PASSWORD)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(ValidationCode.PASSWORD_TOO_SHORT)

    def register_user(self, username: str, email: str, password: str) -> User:
        username = (username or "").strip()
        email = (email or "").strip()
        # Order matters: only the first failure is reported to the user.
        if not username:
            raise ValidationError(ValidationCode.EMPTY_USERNAME)
        if not email:
            raise ValidationError(ValidationCode.EMPTY_EMAIL)
        self._check_new_password(password)

        if self.users.find_by_username(username) is not None:
            raise ValidationError(ValidationCode.USERNAME_TAKEN)
        if self.users.find_by_email(email) is not None:
            raise ValidationError(ValidationCode.EMAIL_TAKEN)

        return User(
            id=generate_id("usr", USER_ID_LENGTH),
            username=username,
            email=email,
            password_hash=hash_password(password),
            role=Role.STANDARD,
        )

    def authenticate(self, username: str, password: str) -> User:
        user = self.users.find_by_username(username)
        if user is None or not verify_password(user.password_hash, password):
            raise ValidationError(ValidationCode.CREDENTIALS_INCORRECT)
        return user

    def update_user(
        self,
        user: User,
        new_username: str,
        new_email: str,
        current_password: str,
        new_password: str,
        is_admin_actor: bool,
    ) -> User:
        new_username = (new_username or "").strip()
        new_email = (new_email or "").strip()
        if not new_username:
            raise ValidationError(ValidationCode.EMPTY_USERNAME)
        if not new_email:
            raise ValidationError(ValidationCode.EMPTY_EMAIL)

        existing = self.users.find_by_username(new_username)
        if existing is not None and existing.id != user.id:
            raise ValidationError(ValidationCode.USERNAME_TAKEN)
        existing = self.users.find_by_email(new_email)
        if existing is not None and existing.id != user.id:
            raise ValidationError(ValidationCode.EMAIL_TAKEN)

        updated = replace(user, username=new_username, email=new_email)

        # An admin override always sets a new password; no current one is needed.
        if not is_admin_actor:
            if not current_password:
                return updated
            if not verify_password(user.password_hash, current_password):
                raise ValidationError(ValidationCode.PASSWORD_INCORRECT)

        self._check_new_password(new_password)
        return replace(updated, password_hash=hash_password(new_password))

    def ensure_admin_account(self) -> Optional[str]:
        """Create the administrator account if it is missing.

        Returns the generated plaintext password (also logged once), or None
        when the account already exists.
        """
        if self.users.find(ADMIN_ID) is not None:
            return None

        password = generate_password(ADMIN_PASSWORD_LENGTH)
        admin = User(
            id=ADMIN_ID,
            username=ADMIN_ID,
            email=ADMIN_EMAIL,
            password_hash=hash_password(password),
            role=Role.ADMIN,
        )
        self.users.save(admin)
        logger.warning(
            "No admin account found, created one with the following credentials:\n"
            "Username: %s\nPassword: %s\n"
            "Please note these down and put them in a secure location.",
            admin.username,
            password,
        )
        return password
