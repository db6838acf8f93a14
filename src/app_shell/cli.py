import argparse
import getpass
import logging
import sys

from src.adapters.auth.crypto import Argon2PasswordHasher
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite_db import SQLitePublisherRepo
from src.app_shell.config import Settings, load_settings
from src.components.publishers import (
    CreatePublisherInput,
    PublisherExistsError,
    create_publisher,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")


def handle_migrate(settings: Settings, args: argparse.Namespace) -> None:
    applied = SQLiteMigrator(settings.database.path).run_migrations()
    if applied:
        print(f"Applied {len(applied)} migration(s): {', '.join(applied)}")
    else:
        print("Database is up to date.")


def handle_create_publisher(settings: Settings, args: argparse.Namespace) -> None:
    password = args.password or getpass.getpass("Password: ")
    repo = SQLitePublisherRepo(settings.database.path, settings.database.timeout_seconds)
    try:
        publisher = create_publisher(
            CreatePublisherInput(username=args.username, password=password),
            repo,
            Argon2PasswordHasher(),
        )
    except (PublisherExistsError, ValueError) as e:
        logger.error(str(e))
        sys.exit(1)
    print(f"Publisher '{publisher.username}' created ({publisher.user_id}).")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Newsletter service CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Apply pending database migrations")

    # create-publisher
    publisher_parser = subparsers.add_parser(
        "create-publisher", help="Create a publisher account for POST /newsletters"
    )
    publisher_parser.add_argument("username")
    publisher_parser.add_argument("--password", help="Prompted for when omitted")

    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Could not load configuration: {e}")
        sys.exit(1)

    if args.command == "migrate":
        handle_migrate(settings, args)
    elif args.command == "create-publisher":
        handle_create_publisher(settings, args)


if __name__ == "__main__":
    main()
