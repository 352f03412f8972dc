#!/usr/bin/env python3
"""
Create (or promote) an administrator account.

Usage:
    python scripts/create_admin.py EMAIL [--name NAME] [--password PASSWORD]

Without --password the password is read from the terminal.
"""

import argparse
import asyncio
import getpass
import sys
from pathlib import Path

from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.c1_database_session import get_db, get_db_manager
from src.c1_user_models import User
from src.c2_auth_service import AuthService

load_dotenv()


def promote(email: str) -> bool:
    """Give an existing account the admin role. Returns False when it does not exist."""
    with get_db() as db:
        user = db.query(User).filter(User.email == email).first()
        if not user:
            return False
        user.role = "admin"
        return True


def main():
    parser = argparse.ArgumentParser(description="Create a TicketDesk administrator")
    parser.add_argument("email", help="E-mail of the administrator")
    parser.add_argument("--name", type=str, default=None, help="Display name")
    parser.add_argument("--password", type=str, default=None, help="Password (prompted when omitted)")
    args = parser.parse_args()

    email = args.email.strip().lower()
    get_db_manager().create_tables()

    if promote(email):
        print(f"✅ {email} already existed and is now an administrator")
        return 0

    password = args.password or getpass.getpass("Password: ")
    try:
        result = asyncio.run(AuthService.create_user(email, password, name=args.name, role="admin"))
    except ValueError as e:
        print(f"❌ {e}")
        return 1

    print(f"✅ Administrator created: {result['user']['email']} (id {result['user']['id']})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
