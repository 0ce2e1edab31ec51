"""ShopStream cart service management CLI.

Provides commands to create and drop the shopping database schema and to
purge anonymous carts past their retention window.

Usage:
    python src/manage.py setup-db                     # Create all tables
    python src/manage.py drop-db                      # Drop all tables
    python src/manage.py purge-expired                # Purge expired anonymous carts
    python src/manage.py purge-expired --as-of 2026-01-01T00:00:00+00:00
"""

import argparse
import sys
from datetime import datetime


def _shopping():
    from shopping.config import get_settings
    from shopping.domain import shopping
    from shopping.utils.logging import configure_logging

    settings = get_settings()
    configure_logging(settings.log_level, log_dir=settings.log_dir, log_to_file=settings.log_to_file)

    print("Initializing shopping domain...")
    shopping.init()
    return shopping


def setup_database():
    """Create the shopping database schema."""
    from shopping.utils.db import setup_db

    domain = _shopping()
    print("Creating shopping database schema...")
    setup_db(domain)
    print("  shopping schema ready.")
    print("Done.")


def drop_database():
    """Drop the shopping database schema."""
    from shopping.utils.db import drop_db

    domain = _shopping()
    print("Dropping shopping database schema...")
    drop_db(domain)
    print("  shopping schema dropped.")
    print("Done.")


def purge_expired(as_of=None):
    """Delete anonymous carts past their expiry. Returns how many were deleted."""
    from shopping.cart.dispatch import process
    from shopping.cart.expiry import PurgeExpiredCarts

    domain = _shopping()
    with domain.domain_context():
        purged = process(PurgeExpiredCarts(as_of=as_of))
    print(f"Purged {purged} expired anonymous cart(s).")
    return purged


def main(argv=None):
    parser = argparse.ArgumentParser(description="ShopStream cart service management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    purge_parser = subparsers.add_parser("purge-expired", help="Delete expired anonymous carts")
    purge_parser.add_argument(
        "--as-of",
        type=datetime.fromisoformat,
        help="ISO timestamp to purge against (default: now)",
    )

    args = parser.parse_args(argv)

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "purge-expired":
        purge_expired(args.as_of)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
