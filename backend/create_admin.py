# create_admin.py
# Usage: python create_admin.py admin@example.com "StrongPassword123" "Admin Name"
# Reads DATABASE_URL (and the rest of the settings) from the environment or .env.

import argparse
import sys

from sqlmodel import Session

from app.core.config import settings
from app.core.errors import ServiceError
from app.db.session import engine, init_db
from app.services.accounts import AccountService


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create the first CoachAlly administrator.")
    parser.add_argument("email")
    parser.add_argument("password")
    parser.add_argument("full_name", nargs="?", default="Administrator")
    args = parser.parse_args(argv)

    if len(args.password) < settings.min_password_length:
        print(f"Password must be at least {settings.min_password_length} characters.")
        return 1

    init_db()
    with Session(engine) as session:
        try:
            profile = AccountService(session).bootstrap_admin(args.email, args.password, args.full_name)
        except ServiceError as exc:
            print(f"Could not create admin: {exc.message}")
            return 1
    print(f"Admin {profile.email} created (id={profile.id}).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
