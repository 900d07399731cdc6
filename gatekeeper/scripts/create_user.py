"""
Create a user and optionally give it a role (e.g. the first admin). Run from project root:
  python -m gatekeeper.scripts.create_user USERNAME EMAIL PASSWORD [--role NAME]
Example:
  python -m gatekeeper.scripts.create_user admin admin@example.com your-secure-password --role admin
"""
import argparse
import logging
import sys

from gatekeeper.core.config import get_settings
from gatekeeper.core.database import SessionLocal
from gatekeeper.core.errors import AppError, NotFoundError
from gatekeeper.services import AssociationManager, DirectoryService

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None, session_factory=None) -> int:
    parser = argparse.ArgumentParser(description="Create a Gatekeeper user (no registration UI needed).")
    parser.add_argument("username", help="Username (1-255 chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password (6-128 chars)")
    parser.add_argument("--role", default=None, help="Role to assign; created if it does not exist")
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(level=settings.log_level_value, format="%(levelname)s %(name)s %(message)s")
    factory = session_factory or SessionLocal
    directory = DirectoryService(factory, bcrypt_rounds=settings.BCRYPT_ROUNDS)
    associations = AssociationManager(factory)

    try:
        user = directory.create_user(args.username, args.email, args.password)
        print(f"Created user '{user.username}' with id {user.id}.")
        if args.role:
            try:
                role = directory.get_role_by_name(args.role)
            except NotFoundError:
                role = directory.create_role(args.role)
                print(f"Created role '{role.name}' with id {role.id}.")
            associations.add_user_role(user.id, role.id)
            print(f"Assigned role '{role.name}' to '{user.username}'.")
        return 0
    except AppError as e:
        print(f"{e.kind}: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
