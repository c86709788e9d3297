#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from cashtracker.auth.passwords import hash_password
from cashtracker.core import config
from cashtracker.infra.store import DuplicateError, YamlStore
from cashtracker.models import ACCOUNTS


def main() -> None:
    store = YamlStore(config.data_path())

    name = input("Name: ").strip()
    email = input("Email: ").strip().lower()
    if not name or not email:
        raise SystemExit("Name and email are required")
    if store.find_one(ACCOUNTS, email=email) is not None:
        raise SystemExit(f"An account with email {email} already exists")

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")

    try:
        rec = store.create(
            ACCOUNTS,
            {
                "name": name,
                "email": email,
                "password": hash_password(pw1),
                "confirmed": True,
                "token": None,
            },
            unique=("email",),
        )
    except DuplicateError:
        raise SystemExit(f"An account with email {email} already exists") from None
    print(f"OK -> account #{rec['id']} in {store.path}")


if __name__ == "__main__":
    main()
