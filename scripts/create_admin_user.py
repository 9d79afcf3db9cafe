# scripts/create_admin_user.py
from __future__ import annotations

import os
import sys
import argparse

# --- Ensure we import the local menuphotos package ---
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from menuphotos import create_app              # noqa: E402
from menuphotos.extensions import db           # noqa: E402
from menuphotos.models_user import User        # noqa: E402


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create an admin (or staff) user.")
    parser.add_argument("--email", required=True, help="User email (must be unique)")
    parser.add_argument("--password", required=True, help="Plain password to be hashed")
    parser.add_argument("--role", default="admin", choices=("admin", "staff"),
                        help="Role to assign (default: admin)")
    args = parser.parse_args(argv)

    app = create_app(light=True)

    with app.app_context():
        binds = app.config.get("SQLALCHEMY_BINDS") or {}
        print(f"[DB] auth bind @ {binds.get('auth')}")

        email = args.email.strip().lower()
        existing = User.query.filter_by(email=email).first()
        if existing:
            print(f"[SKIP] user already exists: {existing.email} (id={existing.id}, role={existing.role})")
            return 0

        user = User(email=email, role=args.role)
        user.set_password(args.password)
        db.session.add(user)
        db.session.commit()
        print(f"[OK] created user {user.email} (id={user.id}, role={user.role})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
