"""
Bootstrap Admin Script
Grants the admin_master role to an existing auth user so the portal can be
administered on first run. Requires SUPABASE_SERVICE_ROLE_KEY.

Usage: python -m app.scripts.bootstrap_admin --email admin@example.com
       python -m app.scripts.bootstrap_admin --user-id <uuid>
"""

import argparse
import sys
from typing import Optional

from app.config.permissions_config import ADMIN_MASTER
from app.database.supabase_client import get_service_supabase
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

USERS_PER_PAGE = 1000


def find_user_id_by_email(supabase: Client, email: str) -> Optional[str]:
    """Look the user up through the auth admin API, one page of users at a time"""
    page = 1
    while True:
        users = supabase.auth.admin.list_users(page=page, per_page=USERS_PER_PAGE)
        for user in users:
            if user.email and user.email.lower() == email.lower():
                return user.id
        if len(users) < USERS_PER_PAGE:
            return None
        page += 1


def grant_admin_master(supabase: Client, user_id: str) -> bool:
    """Make admin_master the only role of the user and make sure a profile exists. Returns False if already granted."""
    existing = supabase.table("user_roles")\
        .select("role")\
        .eq("user_id", user_id)\
        .execute()

    roles = [r["role"] for r in existing.data or []]
    if roles == [ADMIN_MASTER]:
        logger.info(f"User {user_id} is already {ADMIN_MASTER}")
        return False

    if roles:
        supabase.table("user_roles")\
            .delete()\
            .eq("user_id", user_id)\
            .execute()
        logger.info(f"Removed previous roles of {user_id}: {', '.join(roles)}")

    supabase.table("user_roles").insert({
        "user_id": user_id,
        "role": ADMIN_MASTER
    }).execute()

    supabase.table("profiles").upsert({
        "id": user_id,
        "is_active": True
    }, on_conflict="id").execute()

    logger.info(f"Granted {ADMIN_MASTER} to {user_id}")
    return True


def main(argv=None):
    parser = argparse.ArgumentParser(description="Grant admin_master to a portal user")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--email", help="email of an existing auth user")
    target.add_argument("--user-id", help="auth user id")
    args = parser.parse_args(argv)

    try:
        supabase = get_service_supabase()

        user_id = args.user_id
        if args.email:
            user_id = find_user_id_by_email(supabase, args.email)
            if not user_id:
                logger.error(f"No auth user with email {args.email}")
                sys.exit(1)

        grant_admin_master(supabase, user_id)
    except Exception as e:
        logger.error(f"Error during bootstrap: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
