"""Scrape-and-import endpoint.

POST /api/scrape-and-import - Scrape a marketplace listing, optionally import it into the CMS
GET  /api/scrape-and-import - Same, with ?url=&import=true&categoryId= query parameters

Flow: validate URL -> headless scrape -> (optional) import under a per-URL lock.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from storefront.schemas import ScrapeRequest, failure
from storefront.services.importer import (
    ImportInProgressError,
    ProductImportError,
    complete_import,
    import_lock,
    is_supported_marketplace_url,
)
from storefront.services.scraper import ScrapeError, scrape_product

router = APIRouter()
logger = logging.getLogger("uvicorn.error")


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


async def _scrape_and_import(request: ScrapeRequest) -> JSONResponse:
    url = (request.url or "").strip()
    if not url:
        return JSONResponse(status_code=400, content=failure("URL is required"))

    if not is_supported_marketplace_url(url):
        return JSONResponse(
            status_code=400,
            content=failure("Only Alibaba and AliExpress URLs are supported"),
        )

    logger.info(f"[scrape-and-import] url={url} import={request.import_to_sanity}")

    try:
        scraped = await scrape_product(url)
    except ScrapeError as e:
        logger.exception(f"[scrape] failed url={url}")
        return JSONResponse(
            status_code=500,
            content=failure("Failed to scrape product", details=str(e), timestamp=_timestamp()),
        )

    import_result = None
    if request.import_to_sanity:
        try:
            async with import_lock(url):
                imported = await complete_import(scraped, url, request.category_id)
        except ImportInProgressError as e:
            logger.warning(f"[import] {e}")
            return JSONResponse(
                status_code=409,
                content=failure("Import already in progress for this URL", timestamp=_timestamp()),
            )
        except ProductImportError as e:
            logger.exception(f"[import] failed url={url}")
            extra = {"productId": e.product_id} if e.product_id else {}
            return JSONResponse(
                status_code=500,
                content=failure(
                    "Scraping successful but import failed",
                    details=str(e),
                    scrapedData=scraped.to_dict(),
                    timestamp=_timestamp(),
                    **extra,
                ),
            )
        import_result = imported.to_dict()

    return JSONResponse(
        content={
            "success": True,
            "data": scraped.to_dict(),
            "importResult": import_result,
            "message": (
                "Product scraped and imported successfully"
                if request.import_to_sanity
                else "Product scraped successfully"
            ),
            "timestamp": _timestamp(),
        }
    )


@router.post("")
async def post_scrape_and_import(request: ScrapeRequest) -> JSONResponse:
    """Scrape a listing; import it when `importToSanity` is true."""
    return await _scrape_and_import(request)


@router.get("")
async def get_scrape_and_import(
    url: str | None = Query(default=None),
    import_: bool = Query(default=False, alias="import"),
    category_id: str | None = Query(default=None, alias="categoryId"),
) -> JSONResponse:
    """Query-string variant of the POST endpoint."""
    return await _scrape_and_import(
        ScrapeRequest(url=url, import_to_sanity=import_, category_id=category_id or None)
    )
