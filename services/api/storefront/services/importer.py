"""Import service: scraped listing → CMS product document + image assets.

Stages (strictly sequential):
1. Normalize scraped fields (slug, numeric price, platform) and create the
   product document
2. Download each image URL and re-upload the bytes as an image asset;
   images that fail to download or upload are skipped
3. Patch the product with references to the uploaded assets (only when at
   least one image made it)

There is no compensation: if stage 3 fails the product document created in
stage 1 stays in the CMS, and its id is carried on the raised error.
"""

import hashlib
import logging
import re
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

import httpx
from redis.exceptions import RedisError

from storefront.services.cms_client import CmsError, SanityClient, get_cms_client
from storefront.services.cms_schemas import SchemaValidationError, validate_document
from storefront.services.scraper import ScrapedProduct
from storefront.stores.redis import TTL_IMPORT_LOCK, acquire_lock, import_lock_key, release_lock

logger = logging.getLogger("uvicorn.error")

SLUG_MAX_LENGTH = 96
SUPPORTED_MARKETPLACES = ("alibaba.com", "aliexpress.com")

_NUMBER_TOKEN_RE = re.compile(r"\d[\d.,]*")
_THOUSANDS_ONLY_RE = re.compile(r"^\d{1,3}(,\d{3})+$")
_LEADING_NUMBER_RE = re.compile(r"^\d+(\.\d+)?")


class ProductImportError(RuntimeError):
    """Raised when a stage of the import fails.

    `product_id` is set when the product document was already created.
    """

    def __init__(self, message: str, product_id: str | None = None):
        super().__init__(message)
        self.product_id = product_id


class ImportInProgressError(Exception):
    """Raised when another request is already importing the same listing."""


# ============================================================
# Normalization helpers
# ============================================================


def generate_slug(title: str) -> str:
    """Generate a URL-friendly slug from a title.

    Example:
        >>> generate_slug("  Rose Gold Hair-Dryer (2024) ")
        "rose-gold-hair-dryer-2024"
    """
    slug = title.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug.strip("-")
    return slug[:SLUG_MAX_LENGTH].rstrip("-")


def parse_price(text: str) -> float:
    """Parse a scraped price string into a number (0.0 when unparsable).

    ',' is a thousands separator when a '.' is present or when it groups
    exactly three digits ("1,299"); otherwise it is the decimal separator
    ("12,50"). For ranges only the leading number counts ("1.50-2.30" -> 1.5).
    """
    token = _NUMBER_TOKEN_RE.search(text or "")
    if not token:
        return 0.0
    cleaned = token.group(0).rstrip(".,")

    if "," in cleaned:
        if "." in cleaned or _THOUSANDS_ONLY_RE.match(cleaned):
            cleaned = cleaned.replace(",", "")
        else:
            head, _, tail = cleaned.rpartition(",")
            cleaned = f"{head.replace(',', '')}.{tail}"

    match = _LEADING_NUMBER_RE.match(cleaned)
    if not match:
        return 0.0
    return float(match.group(0))


def product_slug(title: str, original_url: str) -> str:
    """Slug for an imported product.

    Titles without ASCII letters or digits slug to "", so those fall back to a
    stable slug derived from the listing URL.
    """
    slug = generate_slug(title)
    if slug:
        return slug
    return f"product-{hashlib.sha1(original_url.encode()).hexdigest()[:12]}"


def is_supported_marketplace_url(url: str) -> bool:
    """Only Alibaba and AliExpress listings can be imported."""
    return any(domain in url for domain in SUPPORTED_MARKETPLACES)


def detect_platform(url: str) -> str:
    """Source platform recorded on the product."""
    return "alibaba" if "alibaba.com" in url else "aliexpress"


def image_reference(asset_id: str) -> dict[str, Any]:
    """Array item referencing an uploaded image asset."""
    return {
        "_type": "image",
        "_key": uuid4().hex[:12],
        "asset": {"_type": "reference", "_ref": asset_id},
    }


# ============================================================
# Result types
# ============================================================


@dataclass
class ImportedProduct:
    """Product as written to the CMS."""

    id: str
    title: str
    description: str
    price: float
    source: dict[str, Any]
    slug: dict[str, Any]
    category: dict[str, Any] | None = None
    images: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "_id": self.id,
            "title": self.title,
            "description": self.description,
            "price": self.price,
            "images": self.images,
            "source": self.source,
            "slug": self.slug,
        }
        if self.category:
            payload["category"] = self.category
        return payload


def build_product_document(
    scraped: ScrapedProduct,
    original_url: str,
    category_id: str | None = None,
) -> dict[str, Any]:
    """Build the `product` document for a scraped listing (images attached later)."""
    now = datetime.now(timezone.utc).isoformat()
    document: dict[str, Any] = {
        "_type": "product",
        "title": scraped.title,
        "description": scraped.description,
        "price": parse_price(scraped.price),
        "images": [],
        "source": {
            "_type": "object",
            "platform": detect_platform(original_url),
            "originalUrl": original_url,
            "scrapedAt": scraped.scraped_at,
        },
        "slug": {"_type": "slug", "current": product_slug(scraped.title, original_url)},
        "supplierUrl": original_url,
        "isActive": True,
        "importMetadata": {
            "importedAt": now,
            "originalUrl": original_url,
        },
        "createdAt": now,
        "updatedAt": now,
    }
    if category_id:
        document["category"] = {"_type": "reference", "_ref": category_id}
    return document


# ============================================================
# Importer
# ============================================================


class ProductImporter:
    """Writes scraped listings into the CMS."""

    def __init__(
        self,
        cms: SanityClient | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.cms = cms or get_cms_client()
        self._http_client = http_client

    async def import_product(
        self,
        scraped: ScrapedProduct,
        original_url: str,
        category_id: str | None = None,
    ) -> ImportedProduct:
        """Stage 1: create the product document."""
        document = build_product_document(scraped, original_url, category_id)

        try:
            validate_document(document)
            created = await self.cms.create(document)
        except (SchemaValidationError, CmsError) as e:
            logger.error(f"[import] failed to create product: {e}")
            raise ProductImportError(f"Failed to import product: {e}") from e

        logger.info(f"[import] product created _id={created['_id']}")
        return ImportedProduct(
            id=created["_id"],
            title=document["title"],
            description=document["description"],
            price=document["price"],
            source=document["source"],
            slug=document["slug"],
            category=document.get("category"),
        )

    async def _upload_one(self, client: httpx.AsyncClient, image_url: str) -> str | None:
        try:
            response = await client.get(image_url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"[import] failed to download image {image_url}: {e}")
            return None

        if not response.is_success:
            logger.warning(f"[import] failed to download image {image_url}: HTTP {response.status_code}")
            return None

        content_type = response.headers.get("content-type", "").split(";")[0].strip()
        if not content_type.startswith("image/"):
            content_type = "image/jpeg"

        try:
            asset = await self.cms.upload_image(
                response.content,
                filename=f"alibaba-import-{int(time.time() * 1000)}.jpg",
                content_type=content_type,
            )
        except CmsError as e:
            logger.warning(f"[import] failed to upload image {image_url}: {e}")
            return None

        logger.info(f"[import] image uploaded {asset['_id']}")
        return asset["_id"]

    async def upload_images(self, image_urls: list[str]) -> list[str]:
        """Stage 2: download + upload each image in order.

        Returns:
            Asset ids of the images that uploaded, in input order.
        """
        refs: list[str] = []

        if self._http_client is not None:
            for image_url in image_urls:
                ref = await self._upload_one(self._http_client, image_url)
                if ref:
                    refs.append(ref)
            return refs

        async with httpx.AsyncClient(timeout=30.0, follow_redirects=True) as client:
            for image_url in image_urls:
                ref = await self._upload_one(client, image_url)
                if ref:
                    refs.append(ref)
        return refs

    async def update_product_images(self, product_id: str, image_refs: list[str]) -> list[dict[str, Any]]:
        """Stage 3: attach uploaded assets to the product."""
        images = [image_reference(ref) for ref in image_refs]
        try:
            await self.cms.patch_set(product_id, {"images": images})
        except CmsError as e:
            logger.error(f"[import] failed to update product images _id={product_id}: {e}")
            raise ProductImportError(
                f"Failed to update product images: {e}",
                product_id=product_id,
            ) from e

        logger.info(f"[import] product {product_id} updated with {len(images)} images")
        return images

    async def complete_import(
        self,
        scraped: ScrapedProduct,
        original_url: str,
        category_id: str | None = None,
    ) -> ImportedProduct:
        """Run all stages for one scraped listing."""
        imported = await self.import_product(scraped, original_url, category_id)

        if scraped.images:
            refs = await self.upload_images(scraped.images)
            if refs:
                imported.images = await self.update_product_images(imported.id, refs)
            else:
                logger.warning(f"[import] no images uploaded for _id={imported.id}")

        logger.info(f"[import] complete _id={imported.id} title={imported.title!r} images={len(imported.images)}")
        return imported


async def complete_import(
    scraped: ScrapedProduct,
    original_url: str,
    category_id: str | None = None,
) -> ImportedProduct:
    """Import a scraped listing with the shared CMS client."""
    return await ProductImporter().complete_import(scraped, original_url, category_id)


@asynccontextmanager
async def import_lock(url: str) -> AsyncGenerator[None, None]:
    """Hold the per-listing import lock for the duration of the block.

    Raises:
        ImportInProgressError: Another request holds the lock.
    """
    key = import_lock_key(url)
    token: str | None = None
    try:
        token = await acquire_lock(key, ttl=TTL_IMPORT_LOCK)
        if token is None:
            raise ImportInProgressError(f"Import already in progress for {url}")
    except (RedisError, RuntimeError) as e:
        # Redis down or not initialized: import without the lock
        logger.warning(f"[import] lock unavailable, continuing without it: {e}")

    try:
        yield
    finally:
        if token is not None:
            try:
                if not await release_lock(key, token):
                    logger.warning(f"[import] lock {key} expired before the import finished")
            except (RedisError, RuntimeError) as e:
                logger.warning(f"[import] failed to release lock {key}: {e}")
