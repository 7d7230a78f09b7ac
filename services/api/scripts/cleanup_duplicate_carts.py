#!/usr/bin/env python3
"""Remove duplicated Cart rows, keeping one physical row per cart id.

Usage:
    cd services/api
    python -m scripts.cleanup_duplicate_carts
"""

import asyncio
import os
import sys

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

from storefront.services.carts import cleanup_duplicate_carts, count_carts, find_duplicate_cart_ids
from storefront.stores.postgres import close_db, get_session, init_db

load_dotenv()


async def main() -> int:
    print("Cleaning up duplicate carts...")
    try:
        await init_db()

        async with get_session() as session:
            deleted = await cleanup_duplicate_carts(session)

        if not deleted:
            print("No duplicate carts found.")
        for cart_id, rows in deleted.items():
            print(f"   {cart_id}: removed {rows} duplicate row(s)")

        async with get_session() as session:
            remaining = await find_duplicate_cart_ids(session)
            total = await count_carts(session)

        if remaining:
            print(f"\n{len(remaining)} cart id(s) still duplicated: {[cart_id for cart_id, _ in remaining]}")
            return 1
        print(f"\nDone. Duplicated ids cleaned: {len(deleted)}. Total carts: {total}")
    except Exception as e:
        print(f"\nCleanup failed: {e}")
        return 1
    finally:
        await close_db()

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
