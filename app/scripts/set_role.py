"""
Promote or demote a user. Revokes the user's sessions; the new role applies at next login.
  python -m app.scripts.set_role USERNAME ROLE
Example:
  python -m app.scripts.set_role alice ADMIN
"""
import argparse
import sys

from app.core.database import SessionLocal
from app.core.errors import AuthCoreError
from app.models.user import Role
from app.services.accounts import set_role


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Change an exchange user's role.")
    parser.add_argument("username", help="Existing username")
    parser.add_argument("role", choices=[r.value for r in Role])
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        user = set_role(db, args.username, args.role)
        print(f"User '{user.username}' now has role '{user.role}'.")
        return 0
    except AuthCoreError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
