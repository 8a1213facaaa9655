"""
Create a user (e.g. first admin). Run from project root:
  python -m spendlog.scripts.create_user EMAIL PASSWORD [role]
Example:
  python -m spendlog.scripts.create_user admin@example.com your-secure-password admin
"""
import argparse
import sys

from spendlog.core.database import SessionLocal
from spendlog.core.errors import ConflictError, ValidationError
from spendlog.models import ROLES
from spendlog.services.user_store import UserStore


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a SpendLog user (e.g. the first admin).")
    parser.add_argument("email", help="Account e-mail (stored lowercase)")
    parser.add_argument("password", help="Password (8-32 chars)")
    parser.add_argument("role", nargs="?", default="user", choices=list(ROLES))
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        store = UserStore(db)
        try:
            user = store.create(email=args.email, password=args.password, role=args.role)
        except (ValidationError, ConflictError) as e:
            print(e.message, file=sys.stderr)
            return 1
        print(f"Created user '{user.email}' with role '{user.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
