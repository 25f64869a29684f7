#!/usr/bin/env python3
"""
Apply a SQL migration file to PostgreSQL (Supabase or local)

Usage:
    python apply_migration.py migrations/001_subscription_store.sql
"""
import os
import sys
import psycopg2
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def normalize_database_url(database_url: str) -> str:
    """psycopg2 does not understand SQLAlchemy driver suffixes (postgresql+psycopg2://)."""
    scheme, sep, rest = database_url.partition("://")
    if sep and "+" in scheme:
        scheme = scheme.split("+", 1)[0]
    return f"{scheme}{sep}{rest}"


def apply_migration(migration_file: str):
    """
    Apply a SQL migration file to the database.

    Args:
        migration_file: Path to the SQL migration file
    """
    database_url = os.getenv('DATABASE_URL')
    if not database_url:
        print("ERROR: DATABASE_URL not found in environment variables")
        sys.exit(1)
    if database_url.startswith("sqlite"):
        print("ERROR: migrations target PostgreSQL; SQLite databases are created by init_db()")
        sys.exit(1)

    if not os.path.exists(migration_file):
        print(f"ERROR: Migration file not found: {migration_file}")
        sys.exit(1)

    with open(migration_file, 'r', encoding='utf-8') as f:
        sql_content = f.read()

    database_url = normalize_database_url(database_url)
    print(f"Applying migration: {migration_file}")
    print(f"Database: {database_url.split('@')[1] if '@' in database_url else database_url}")

    try:
        conn = psycopg2.connect(database_url)
        conn.autocommit = True
        cursor = conn.cursor()

        cursor.execute(sql_content)
        print("Migration applied successfully!")

        cursor.close()
        conn.close()

    except psycopg2.Error as e:
        print("ERROR applying migration:")
        print(f"   {e}")
        sys.exit(1)


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python apply_migration.py <migration_file.sql>")
        sys.exit(1)

    apply_migration(sys.argv[1])
