"""
Operator commands.

    python -m showdown.manage grant-admin --email someone@example.com
"""
from __future__ import annotations
import argparse
import asyncio
import sys
from sqlalchemy import select
import structlog

from showdown.db import SessionLocal, engine
from showdown.logging_setup import configure_logging
from showdown.models.user import User
from showdown.services.roles import grant_role, ADMIN

log = structlog.get_logger()


async def grant_admin(email: str) -> bool | None:
    """Grant the admin role by account email. None if no such user, else whether it was newly granted."""
    async with SessionLocal() as session:
        user = await session.scalar(select(User).where(User.email == email.lower()))
        if not user:
            return None
        granted = await grant_role(session, user.id, ADMIN)
        await session.commit()
    log.info("role_granted" if granted else "role_already_held", user_id=str(user.id), role=ADMIN)
    return granted


async def _run(args: argparse.Namespace) -> int:
    try:
        granted = await grant_admin(args.email)
    finally:
        await engine.dispose()
    if granted is None:
        print(f"No user registered with {args.email}", file=sys.stderr)
        return 1
    print(f"{args.email} is {'now' if granted else 'already'} an admin")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="CarMod Showdown operator commands")
    sub = parser.add_subparsers(dest="command", required=True)
    grant = sub.add_parser("grant-admin", help="Give an existing account the admin role")
    grant.add_argument("--email", required=True, help="Account email")
    args = parser.parse_args(argv)
    configure_logging()
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
