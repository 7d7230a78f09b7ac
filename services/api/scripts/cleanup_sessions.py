#!/usr/bin/env python3
"""Delete expired login sessions.

Usage:
    cd services/api
    python -m scripts.cleanup_sessions
"""

import asyncio
import os
import sys

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

from storefront.services.auth import delete_expired_sessions
from storefront.stores.postgres import close_db, get_session, init_db

load_dotenv()


async def main() -> int:
    try:
        await init_db()
        async with get_session() as session:
            deleted = await delete_expired_sessions(session)
    except Exception as e:
        print(f"Session cleanup failed: {e}")
        return 1
    finally:
        await close_db()

    print(f"Deleted {deleted} expired session(s).")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
