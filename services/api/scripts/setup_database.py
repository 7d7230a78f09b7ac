#!/usr/bin/env python3
"""Create the storefront tables.

For local development; deployed databases are migrated with alembic.

Usage:
    cd services/api
    python -m scripts.setup_database           # create missing tables
    python -m scripts.setup_database --reset   # drop everything first
"""

import argparse
import asyncio
import os
import sys

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

from storefront.stores.postgres import close_db, create_tables, drop_tables, init_db

load_dotenv()


async def main(reset: bool) -> int:
    try:
        await init_db()
        if reset:
            print("Dropping all tables...")
            await drop_tables()
        print("Creating tables...")
        await create_tables()
    except Exception as e:
        print(f"\nDatabase setup failed: {e}")
        return 1
    finally:
        await close_db()

    print("Database setup completed.")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--reset", action="store_true", help="drop all tables before creating them")
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.reset)))
