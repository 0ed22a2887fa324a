#!/usr/bin/env python3
from __future__ import annotations

import argparse
from dataclasses import replace
from getpass import getpass
from pathlib import Path

from webapp.auth.credentials import CredentialEngine
from webapp.config import DEFAULT_CONFIG_PATH, load_config
from webapp.errors import ValidationError
from webapp.models import Role
from webapp.stores import build_stores


def main() -> None:
    parser = argparse.ArgumentParser(description="Create a user in the configured store")
    parser.add_argument("--config", default=str(DEFAULT_CONFIG_PATH))
    args = parser.parse_args()

    config = load_config(Path(args.config))
    stores = build_stores(db_connector=config.db_connector, data_directory=Path(config.data_directory))
    engine = CredentialEngine(stores.users)

    username = input("Username: ").strip()
    email = input("Email: ").strip()
    admin_in = input("Admin? [y/N]: ").strip().lower()

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")

    try:
        user = engine.register_user(username, email, pw1)
    except ValidationError as e:
        raise SystemExit(str(e))

    if admin_in == "y":
        user = replace(user, role=Role.ADMIN)
    stores.users.save(user)
    print(f"OK -> {user.id} ({user.username}, {user.role.value})")


if __name__ == "__main__":
    main()
