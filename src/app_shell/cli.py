import argparse
import getpass
import logging
import sys

from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.fs.session_store import FileSessionStore
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLiteMasterDataRepo, SQLiteUserRepo
from src.api.deps import Settings
from src.app_shell.seed import seed_demo
from src.components.validation import build_master_data, save_master_data
from src.domain.entities import User
from src.rules.loader import load_rules

logger = logging.getLogger("cli")


def handle_migrate(settings: Settings, args: argparse.Namespace) -> None:
    migrator = SQLiteMigrator(settings.db_path, settings.migrations_dir)
    if args.dry_run:
        pending = migrator.pending()
        print(f"{len(pending)} pending migration(s)")
        for name in pending:
            print(f" - {name}")
        return
    applied = migrator.run_migrations()
    print(f"Applied {len(applied)} migration(s) to {settings.db_path}")


def handle_seed_demo(settings: Settings, args: argparse.Namespace) -> None:
    SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()
    created = seed_demo(settings.db_path)
    if not created:
        print("Demo data already present.")
        return
    for key, count in sorted(created.items()):
        print(f"{key}: {count}")


def handle_cleanup_sessions(settings: Settings, args: argparse.Namespace) -> None:
    store = FileSessionStore(str(settings.sessions_dir), settings.session_timeout_hours)
    result = store.cleanup_expired_sessions()
    print(f"Removed {result['removed']} expired session(s), {result['errors']} error(s)")


def handle_session_stats(settings: Settings, args: argparse.Namespace) -> None:
    store = FileSessionStore(str(settings.sessions_dir), settings.session_timeout_hours)
    for key, value in store.session_stats().items():
        print(f"{key}: {value}")


def handle_export_master_data(settings: Settings, args: argparse.Namespace) -> None:
    """Rebuild the validation snapshot from the database."""
    path = args.output or settings.master_data_path
    data = build_master_data(SQLiteMasterDataRepo(settings.db_path))
    save_master_data(path, data)
    print(
        f"Wrote {path}: {len(data['categories'])} categories, "
        f"{len(data['ranges'])} ranges, {len(data['campaigns'])} campaigns"
    )


def handle_create_admin(settings: Settings, args: argparse.Namespace) -> None:
    rules = load_rules(settings.rules_path)
    password = args.password or getpass.getpass("Password: ")
    if len(password) < rules.auth.password_min_length:
        logger.error("Password must be at least %d characters", rules.auth.password_min_length)
        sys.exit(1)

    repo = SQLiteUserRepo(settings.db_path)
    email = args.email.strip().lower()
    if repo.get_by_email(email) is not None:
        logger.error("User %s already exists", email)
        sys.exit(1)

    user = repo.save(
        User(
            email=email,
            name=args.name or "Administrator",
            password_hash=JWTAuthAdapter().hash_password(password),
            role="super_admin" if args.super else "admin",
            email_verified=True,
        )
    )
    print(f"Created {user.role} {user.email} (id {user.id})")


COMMANDS = {
    "migrate": handle_migrate,
    "seed-demo": handle_seed_demo,
    "cleanup-sessions": handle_cleanup_sessions,
    "session-stats": handle_session_stats,
    "export-master-data": handle_export_master_data,
    "create-admin": handle_create_admin,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Media Governance CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    migrate_parser = subparsers.add_parser("migrate", help="Apply pending database migrations")
    migrate_parser.add_argument("--dry-run", action="store_true", help="List pending only")

    subparsers.add_parser("seed-demo", help="Insert demo reference data")
    subparsers.add_parser("cleanup-sessions", help="Delete expired upload sessions")
    subparsers.add_parser("session-stats", help="Show upload session counts")

    export_parser = subparsers.add_parser(
        "export-master-data", help="Write the master data snapshot from the database"
    )
    export_parser.add_argument("--output", help="Target path (default: data dir)")

    admin_parser = subparsers.add_parser("create-admin", help="Create an admin user")
    admin_parser.add_argument("email")
    admin_parser.add_argument("--name", default="")
    admin_parser.add_argument("--password", help="Prompted for when omitted")
    admin_parser.add_argument("--super", action="store_true", help="Create a super admin")
    return parser


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)
    COMMANDS[args.command](Settings(), args)


if __name__ == "__main__":
    main()
