"""
Create a user (e.g. first admin). Run from project root:
  python -m app.scripts.create_user USERNAME PASSWORD EMAIL [role]
Example:
  python -m app.scripts.create_user admin your-secure-password admin@example.com ADMIN
"""
import argparse
import sys

from app.core.database import SessionLocal
from app.core.errors import AuthCoreError
from app.models.user import Role
from app.services.accounts import create_user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create an exchange user without starting a session.")
    parser.add_argument("username", help="Username (3-20 letters, digits, underscores)")
    parser.add_argument("password", help="Password (8-64 chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("role", nargs="?", default=Role.USER.value, choices=[r.value for r in Role])
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        user = create_user(db, args.username, args.password, args.email, role=Role(args.role))
        print(f"Created user '{user.username}' with role '{user.role}'.")
        return 0
    except AuthCoreError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
