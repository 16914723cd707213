#!/usr/bin/env python3
"""Account administration: list accounts and change a user's role.

The first Administrator cannot be appointed through the API, so run this after
that user has signed in once:

    python scripts/manage_users.py set-role admin@example.com 3
"""

import argparse
import sys
from pathlib import Path

# Make the backend root importable when run as a script
BASE_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BASE_DIR))

from sqlmodel import Session, select
from app.db import engine, init_db
from app.models import User, UserRole
from app.models.user import ROLE_LABELS


def list_users(session: Session) -> list:
    """Print every account, active or not."""
    users = session.exec(select(User).order_by(User.email)).all()

    print("=" * 100)
    if not users:
        print("No accounts yet")
        return []

    print(f"{'Email':<40} {'Name':<25} {'Role':<15} {'Active':<7} {'ID':<40}")
    print("-" * 100)
    for user in users:
        role = ROLE_LABELS.get(user.role_id, str(user.role_id))
        print(f"{user.email:<40} {user.name:<25} {role:<15} {'yes' if user.is_active else 'no':<7} {user.id:<40}")
    print("=" * 100)
    print(f"Total: {len(users)}")
    return list(users)


def set_role(session: Session, email: str, role_id: int) -> User:
    if role_id not in UserRole.ALL:
        raise ValueError("role must be 1 (User), 2 (Agent) or 3 (Administrator)")

    email = email.strip().lower()
    user = session.exec(select(User).where(User.email == email)).first()
    if not user:
        raise LookupError(f"No account with email {email}; the user must sign in once first")

    user.role_id = role_id
    session.add(user)
    session.commit()
    session.refresh(user)
    print(f"✓ {user.email} is now {ROLE_LABELS[role_id]}")
    return user


def interactive(session: Session) -> None:
    while True:
        print("\n1. List accounts")
        print("2. Change role")
        print("3. Exit")
        choice = input("\nChoose (1-3): ").strip()

        if choice == "1":
            list_users(session)
        elif choice == "2":
            email = input("Email: ")
            role = input("Role (1=User, 2=Agent, 3=Administrator): ").strip()
            try:
                set_role(session, email, int(role))
            except (ValueError, LookupError) as e:
                print(f"✗ {e}")
        elif choice == "3":
            break
        else:
            print("✗ Invalid choice")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("list", help="list accounts")
    role_parser = subparsers.add_parser("set-role", help="change a user's role")
    role_parser.add_argument("email")
    role_parser.add_argument("role_id", type=int, choices=UserRole.ALL)
    args = parser.parse_args(argv)

    init_db()
    with Session(engine) as session:
        if args.command == "list":
            list_users(session)
        elif args.command == "set-role":
            try:
                set_role(session, args.email, args.role_id)
            except LookupError as e:
                print(f"✗ {e}")
                return 1
        else:
            interactive(session)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nCancelled")
