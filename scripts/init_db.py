#!/usr/bin/env python3
"""
Script: init_db.py
Purpose: Apply the SQL migrations in migrations/ to the configured database

Usage:
    python scripts/init_db.py [--dry-run]

Options:
    --dry-run    List the migrations that would run without executing them
"""
import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

PROJECT_DIR = Path(__file__).parent.parent
MIGRATIONS_DIR = PROJECT_DIR / 'migrations'

load_dotenv(PROJECT_DIR / '.env')

from storepos.core.database import get_db_connection_with_retry

logger = logging.getLogger("init_db")


def migration_files():
    """SQL files in apply order (by filename prefix)"""
    return sorted(MIGRATIONS_DIR.glob("*.sql"))


def apply_migrations(dry_run: bool = False) -> int:
    files = migration_files()
    if not files:
        logger.warning(f"No migrations found in {MIGRATIONS_DIR}")
        return 0

    if dry_run:
        for path in files:
            logger.info(f"Would apply {path.name}")
        return len(files)

    conn = get_db_connection_with_retry()
    cursor = conn.cursor()

    try:
        for path in files:
            logger.info(f"Applying {path.name}")
            cursor.execute(path.read_text(encoding='utf-8'))
        conn.commit()
        logger.info(f"Applied {len(files)} migration(s)")
        return len(files)

    except Exception:
        conn.rollback()
        logger.exception("Migration failed, changes rolled back")
        raise
    finally:
        cursor.close()
        conn.close()


def main():
    parser = argparse.ArgumentParser(description="Apply Store POS database migrations")
    parser.add_argument('--dry-run', action='store_true', help="List migrations without running them")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    try:
        apply_migrations(dry_run=args.dry_run)
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
