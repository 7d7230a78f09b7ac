"""Admin endpoints for diagnostics.

These endpoints are intended for manual testing and admin operations.
In production, put them behind the admin proxy or an API key.
"""

import logging

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from storefront.services.debug_storage import get_debug_file, list_debug_files
from storefront.stores.postgres import ping_db

router = APIRouter()
logger = logging.getLogger("uvicorn.error")


@router.get("/db")
async def check_db() -> dict:
    """Database connectivity check (server time)."""
    try:
        now = await ping_db()
    except (SQLAlchemyError, RuntimeError, OSError) as e:
        logger.error(f"[admin] database check failed: {e}")
        return {"ok": False, "error": {"code": "DB_UNAVAILABLE", "message": str(e), "detail": {}}}
    return {"ok": True, "now": now}


# ============================================================
# Debug: scraper payloads
# ============================================================


@router.get("/debug/scrapes")
async def list_scrape_debug_files(limit: int = Query(default=50, le=100)) -> dict:
    """List saved scraper extraction payloads.

    Files are saved when SCRAPER_DEBUG=true is enabled.
    """
    files = list_debug_files(limit=limit)
    return {
        "count": len(files),
        "files": files,
    }


@router.get("/debug/scrapes/{filename}")
async def get_scrape_debug_file(filename: str) -> JSONResponse:
    """Get one saved extraction payload."""
    content = get_debug_file(filename)
    if not content:
        raise HTTPException(status_code=404, detail=f"Debug file not found: {filename}")

    return JSONResponse(content=content)
