# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from argon2 import PasswordHasher
from argon2.exceptions import HashingError, InvalidHashError, VerificationError, VerifyMismatchError

from webapp.errors import InfrastructureError

# argon2 time cost; salted and adaptive, never reversible.
HASH_COST = 10

_PH = PasswordHasher(time_cost=HASH_COST, memory_cost=19456, parallelism=1)


def hash_password(plain: str) -> str:
    if not plain:
        raise ValueError("Empty password")
    try:
        return _PH.hash(plain)
    except HashingError as e:
        raise InfrastructureError(f"Unable to hash password: {e}") from e


def verify_password(hash_value: str, plain: str) -> bool:
    if not hash_value or not plain:
        return False
    try:
        return _PH.verify(hash_value, plain)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False
