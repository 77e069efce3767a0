"""
Outils opérateur.

    python -m placement.cli create-admin --email admin@college.edu --name "Site Admin" --password '...'
    python -m placement.cli issue-token --email admin@college.edu

create-admin crée le compte administrateur (ou promeut un compte existant) ;
issue-token affiche un jeton Bearer pour un compte actif.
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from sqlalchemy import select

from placement.database import SessionLocal, init_db
from placement.models.user import User
from placement.security import create_access_token, hash_password
from placement.services.account_fields import is_valid_email, normalize_email, split_full_name

logger = logging.getLogger("placement.cli")


def create_admin(email: str, name: str, password: str) -> User:
    """Crée ou promeut un compte administrateur actif."""
    email = normalize_email(email)
    if not is_valid_email(email):
        raise ValueError(f"Invalid email format ({email})")
    if len(password) < 6:
        raise ValueError("Password must be at least 6 characters")

    first_name, last_name = split_full_name(name)
    db = SessionLocal()
    try:
        user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if user is None:
            user = User(email=email, first_name=first_name or "Admin", last_name=last_name)
            db.add(user)
        user.role = "admin"
        user.is_active = True
        user.password_hash = hash_password(password)
        db.commit()
        db.refresh(user)
        return user
    finally:
        db.close()


def issue_token(email: str) -> str:
    db = SessionLocal()
    try:
        user = db.execute(
            select(User).where(User.email == normalize_email(email))
        ).scalar_one_or_none()
        if user is None or not user.is_active:
            raise ValueError(f"No active account for {email}")
        return create_access_token(user.id)
    finally:
        db.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="placement.cli", description="Placement Prep operator tools")
    sub = parser.add_subparsers(dest="command", required=True)

    admin = sub.add_parser("create-admin", help="create or promote an administrator account")
    admin.add_argument("--email", required=True)
    admin.add_argument("--name", required=True)
    admin.add_argument("--password", required=True)

    token = sub.add_parser("issue-token", help="print a bearer token for an active account")
    token.add_argument("--email", required=True)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)
    init_db()

    try:
        if args.command == "create-admin":
            user = create_admin(args.email, args.name, args.password)
            logger.info("Administrateur prêt : %s (%s)", user.email, user.id)
        else:
            print(issue_token(args.email))
    except ValueError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
