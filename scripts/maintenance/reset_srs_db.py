"""
Reset the SRS review database.

DANGEROUS: This deletes review history!
Only use when you want to start fresh for testing.

Usage:
    # Drop and recreate all tables (every user)
    python -m scripts.maintenance.reset_srs_db

    # Clear one user's review states only
    python -m scripts.maintenance.reset_srs_db --user alice

    # Skip the confirmation prompt
    python -m scripts.maintenance.reset_srs_db --yes
"""

import argparse
import logging

from vocab_core import config, srs


def main():
    parser = argparse.ArgumentParser(description="Reset the SRS review database")
    parser.add_argument("--user", help="Only clear this user's review states")
    parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    db_url = config.get_database_url()
    print("=" * 60)
    print("WARNING: Reset SRS Database")
    print("=" * 60)
    print()
    print(f"Database: {db_url}")
    if args.user:
        print(f"This will DELETE all review states and events of user '{args.user}'.")
    else:
        print("This will DELETE all review history of EVERY user:")
        print("  - All review states (level, ease factor, interval, counters)")
        print("  - All review events (logs of past reviews)")
    print()

    if not args.yes:
        response = input("Are you sure you want to reset? (type 'yes' to confirm): ")
        if response.lower() != "yes":
            print("\nCancelled. No changes made.")
            return

    engine = srs.get_engine(db_url)
    print("\nResetting database...")
    if args.user:
        srs.SqlRecordStore(engine, user_id=args.user).clear()
    else:
        srs.reset_db(engine)
    print("✓ Reset complete!")


if __name__ == "__main__":
    main()
