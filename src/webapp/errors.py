# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error classes.

Two families:

- ``ValidationError``: the user can fix it (missing field, taken username,
  wrong credentials). Handlers re-render the form with a localized message.
- ``InfrastructureError``: storage or hashing failed. Mapped to HTTP 500.
"""

from __future__ import annotations

from enum import Enum


class ValidationCode(str, Enum):
    EMPTY_USERNAME = "empty_username"
    EMPTY_EMAIL = "empty_email"
    EMPTY_PASSWORD = "empty_password"
    PASSWORD_TOO_SHORT = "password_too_short"
    USERNAME_TAKEN = "username_taken"
    EMAIL_TAKEN = "email_taken"
    CREDENTIALS_INCORRECT = "credentials_incorrect"
    PASSWORD_INCORRECT = "password_incorrect"
    LANGUAGE_UNAVAILABLE = "language_unavailable"


# English fallbacks; localized versions live in the i18n catalogs.
DEFAULT_MESSAGES = {
    ValidationCode.EMPTY_USERNAME: "you must supply a username",
    ValidationCode.EMPTY_EMAIL: "you must supply an email",
    ValidationCode.EMPTY_PASSWORD: "you must supply a password",
    ValidationCode.PASSWORD_TOO_SHORT: "your password is too short",
    ValidationCode.USERNAME_TAKEN: "username is already taken",
    ValidationCode.EMAIL_TAKEN: "an account has already been registered with that email address",
    ValidationCode.CREDENTIALS_INCORRECT: "couldn't find a user with this username+password combination",
    ValidationCode.PASSWORD_INCORRECT: "passwords didn't match",
    ValidationCode.LANGUAGE_UNAVAILABLE: "the selected language is not available",
}


class WebappError(Exception):
    pass


class ValidationError(WebappError):
    def __init__(self, code: ValidationCode):
        self.code = code
        super().__init__(DEFAULT_MESSAGES[code])

    @property
    def message_key(self) -> str:
        return f"errors.{self.code.value}"


class InfrastructureError(WebappError):
    """Storage I/O, hashing or other non user-correctable failure."""


class ConfigError(WebappError):
    pass
