"""Debug storage for scraper extraction payloads.

Saves the raw per-selector extraction payload to files when SCRAPER_DEBUG is
enabled, so selector fallbacks can be tuned against real marketplace pages.
Files are stored in /tmp/scrape_debug/ and can be accessed via admin endpoints.
"""

import hashlib
import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger("uvicorn.error")

DEBUG_DIR = Path("/tmp/scrape_debug")
MAX_FILES = 100  # Keep last 100 files


def ensure_debug_dir() -> Path:
    """Ensure debug directory exists."""
    DEBUG_DIR.mkdir(parents=True, exist_ok=True)
    return DEBUG_DIR


def save_scrape_payload(url: str, payload: dict[str, Any]) -> str | None:
    """Save a raw extraction payload to file.

    Args:
        url: Listing URL that was scraped.
        payload: Raw payload returned by the in-page extraction script.

    Returns:
        Filename if saved, None if failed.
    """
    try:
        ensure_debug_dir()

        now = datetime.now(timezone.utc)
        url_hash = hashlib.sha256(url.encode()).hexdigest()[:8]
        filename = f"scrape_{now.strftime('%Y%m%d_%H%M%S')}_{url_hash}.json"
        filepath = DEBUG_DIR / filename

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(
                {
                    "type": "scrape",
                    "url": url,
                    "timestamp": now.isoformat(),
                    "data": payload,
                },
                f,
                indent=2,
                ensure_ascii=False,
            )

        logger.info(f"Saved scrape payload to {filepath}")
        _cleanup_old_files()
        return filename
    except OSError as e:
        logger.warning(f"Failed to save scrape payload: {e}")
        return None


def list_debug_files(limit: int = 50) -> list[dict[str, Any]]:
    """List debug files with metadata, newest first."""
    if not DEBUG_DIR.exists():
        return []

    files = []
    for filepath in sorted(DEBUG_DIR.glob("*.json"), key=os.path.getmtime, reverse=True):
        if len(files) >= limit:
            break

        stat = filepath.stat()
        files.append(
            {
                "filename": filepath.name,
                "size": stat.st_size,
                "created_at": datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc).isoformat(),
            }
        )

    return files


def get_debug_file(filename: str) -> dict[str, Any] | None:
    """Read debug file content.

    Args:
        filename: Filename (must be in DEBUG_DIR, no path traversal allowed).

    Returns:
        File content as dict, or None if not found/invalid.
    """
    if "/" in filename or "\\" in filename or ".." in filename:
        return None

    filepath = DEBUG_DIR / filename
    if not filepath.exists() or not filepath.is_file():
        return None

    try:
        with open(filepath, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to read debug file {filename}: {e}")
        return None


def _cleanup_old_files() -> None:
    """Remove old files if we exceed MAX_FILES."""
    files = sorted(DEBUG_DIR.glob("*.json"), key=os.path.getmtime, reverse=True)
    for filepath in files[MAX_FILES:]:
        try:
            filepath.unlink()
            logger.debug(f"Removed old debug file: {filepath.name}")
        except OSError as e:
            logger.warning(f"Failed to remove debug file {filepath.name}: {e}")
