#!/usr/bin/env python3
# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Create or promote a super-admin account.

Run from the repository root:

    python -m scripts.create_admin --username admin --email admin@example.com

The password is read from ``--password`` or the ``ADMIN_PASSWORD``
environment variable, and prompted for when neither is set.
"""

from __future__ import annotations

import argparse
import getpass
import logging
import os
import sys

from src.database import SessionLocal
from src.exceptions import AccessControlError
from src.models import AdminSubRole, User, UserRole
from src.services import auth_service, store

logger = logging.getLogger("create_admin")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--username", default=os.getenv("ADMIN_USERNAME", "admin"))
    parser.add_argument(
        "--email", default=os.getenv("ADMIN_EMAIL", "admin@example.com")
    )
    parser.add_argument("--password", default=os.getenv("ADMIN_PASSWORD"))
    parser.add_argument("--full-name", default="Admin User")
    return parser.parse_args(argv)


def promote(db, user: User) -> User:
    """Turn an existing account into an active super-admin."""
    return store.cas_update(
        db,
        user,
        user.version,
        {
            "role": UserRole.ADMIN,
            "admin_sub_role": AdminSubRole.SUPER_ADMIN,
            "permissions": [],
            "is_active": True,
        },
    )


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    args = parse_args(argv)

    db = SessionLocal()
    try:
        existing = auth_service.get_user_by_email(
            db, args.email
        ) or auth_service.get_user_by_username(db, args.username)
        if existing:
            promote(db, existing)
            logger.info(f"Promoted {existing.username} to super-admin")
            return 0

        password = args.password or getpass.getpass("Password: ")
        if len(password) < 8:
            logger.error("Password must be at least 8 characters")
            return 1

        user = auth_service.create_user(
            db,
            args.username,
            args.email,
            password,
            full_name=args.full_name,
            role=UserRole.ADMIN,
            admin_sub_role=AdminSubRole.SUPER_ADMIN,
        )
        logger.info(f"Created super-admin {user.username}")
        return 0
    except AccessControlError as e:
        logger.error(f"Could not create admin: {e.message}")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
