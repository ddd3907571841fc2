"""
Create a user directly in the database, e.g. the first admin.

Registration over HTTP always creates role 'user'; this is the only way
to create an admin. Run from the project root:
  python -m catapi.scripts.create_user EMAIL USER_NAME PASSWORD [role]
Example:
  python -m catapi.scripts.create_user admin@example.com admin your-secure-password admin
"""
import argparse
import asyncio
import sys

from catapi.database import async_session_factory, dispose_engine
from catapi.exceptions import CatApiError
from catapi.models import USER_ROLES
from catapi.security import hash_password
from catapi.stores import UserStore


async def create_user(email: str, user_name: str, password: str, role: str) -> int:
    async with async_session_factory() as db:
        store = UserStore(db)
        if await store.find_by_email(email) is not None:
            print(f"User '{email}' already exists.", file=sys.stderr)
            return 1
        try:
            user = await store.create(
                {
                    "email": email,
                    "user_name": user_name,
                    "password": hash_password(password),
                    "role": role,
                }
            )
            await db.commit()
        except CatApiError as e:
            await db.rollback()
            print(f"Could not create user: {e.message}", file=sys.stderr)
            return 1
    print(f"Created user '{email}' ({user.id}) with role '{role}'.")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a Cat Registry user.")
    parser.add_argument("email", help="Email address, also the login name")
    parser.add_argument("user_name", help="Display name (at least 2 chars)")
    parser.add_argument("password", help="Password (at least 4 chars)")
    parser.add_argument("role", nargs="?", default="user", choices=list(USER_ROLES))
    args = parser.parse_args()

    email = args.email.strip()
    user_name = args.user_name.strip()
    if len(email) < 2 or len(user_name) < 2:
        print("Email and user name must be at least 2 characters.", file=sys.stderr)
        return 1
    if len(args.password) < 4:
        print("Password must be at least 4 characters.", file=sys.stderr)
        return 1

    async def run() -> int:
        try:
            return await create_user(email, user_name, args.password, args.role)
        finally:
            await dispose_engine()

    return asyncio.run(run())


if __name__ == "__main__":
    sys.exit(main())
