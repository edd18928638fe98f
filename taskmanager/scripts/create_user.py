"""
Create a user account from the command line. Run from project root:
  python -m taskmanager.scripts.create_user EMAIL NAME PASSWORD
Example:
  python -m taskmanager.scripts.create_user ada@example.com "Ada" your-secure-password
"""
import argparse
import sys

from taskmanager.core.database import SessionLocal
from taskmanager.core.security import (
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    hash_password,
)
from taskmanager.models import User


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a Task Manager user account.")
    parser.add_argument("email", help="Login email (must be unique)")
    parser.add_argument("name", help=f"Display name ({NAME_MIN_LEN}-{NAME_MAX_LEN} chars)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    args = parser.parse_args()

    email = args.email.strip().lower()
    name = args.name.strip()
    if "@" not in email:
        print("Invalid email address.", file=sys.stderr)
        return 1
    if not (NAME_MIN_LEN <= len(name) <= NAME_MAX_LEN):
        print("Invalid name length.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(
            f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.",
            file=sys.stderr,
        )
        return 1

    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.email == email).first()
        if existing:
            print(f"User '{email}' already exists.", file=sys.stderr)
            return 1
        user = User(email=email, name=name, password_hash=hash_password(args.password))
        db.add(user)
        db.commit()
        print(f"Created user '{email}' (id={user.id}).")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
