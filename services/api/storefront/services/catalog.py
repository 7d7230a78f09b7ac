"""Catalog service: navigation data and CMS product lists for the storefront.

Categories and banner slides are static; product lists come from the CMS
and are cached in Redis for a short time.
"""

import logging
from typing import Any

from redis.exceptions import RedisError

from storefront.services.cms_client import CmsError, SanityClient, get_cms_client
from storefront.stores.redis import (
    TTL_CATEGORY_PRODUCTS,
    TTL_FEATURED_PRODUCTS,
    catalog_key,
    get_catalog_cache,
    set_catalog_cache,
)

logger = logging.getLogger("uvicorn.error")

FEATURED_LIMIT = 12

PRODUCT_PROJECTION = """{
  _id,
  title,
  "slug": slug.current,
  price,
  description,
  "image": images[0].asset->url,
  "category": category->{ title, "slug": slug.current }
}"""

FEATURED_PRODUCTS_QUERY = (
    '*[_type == "product" && isActive != false] | order(_createdAt desc) [0...$limit] '
    + PRODUCT_PROJECTION
)

CATEGORY_PRODUCTS_QUERY = (
    '*[_type == "product" && isActive != false && category->slug.current == $slug] '
    "| order(_createdAt desc) [0...$limit] " + PRODUCT_PROJECTION
)

CATEGORIES: list[dict[str, Any]] = [
    {
        "name": "Skincare",
        "slug": "skincare",
        "href": "/category/skincare",
        "subcategories": ["Cleansers", "Moisturizers", "Serums", "Sunscreen", "Masks"],
    },
    {
        "name": "Makeup",
        "slug": "makeup",
        "href": "/category/makeup",
        "subcategories": ["Foundation", "Lipstick", "Eyeshadow", "Mascara", "Blush"],
    },
    {
        "name": "Hair Care",
        "slug": "haircare",
        "href": "/category/haircare",
        "subcategories": ["Shampoo", "Conditioner", "Hair Oils", "Styling", "Treatments"],
    },
    {
        "name": "Fragrances",
        "slug": "fragrances",
        "href": "/category/fragrances",
        "subcategories": ["Perfume", "Body Mist", "Cologne", "Gift Sets"],
    },
    {
        "name": "Beauty Tools",
        "slug": "tools",
        "href": "/category/tools",
        "subcategories": ["Brushes", "Hair Dryers", "Straighteners", "Skincare Devices"],
    },
    {
        "name": "Bath & Body",
        "slug": "bath-body",
        "href": "/category/bath-body",
        "subcategories": ["Body Wash", "Lotions", "Scrubs", "Bath Bombs"],
    },
    {
        "name": "Wellness",
        "slug": "wellness",
        "href": "/category/wellness",
        "subcategories": ["Supplements", "Aromatherapy", "Self Care"],
    },
]

BANNERS: list[dict[str, Any]] = [
    {
        "id": 1,
        "title": "Beauty Essentials Under $50",
        "subtitle": "Premium Quality, Affordable Prices",
        "image": "https://images.unsplash.com/photo-1522335789203-aabd1fc54bc9?auto=format&fit=crop&w=2000&q=80",
        "ctaText": "Shop Now",
        "ctaLink": "/#products",
    },
    {
        "id": 2,
        "title": "New Arrivals - Limited Time",
        "subtitle": "Fresh Beauty Products",
        "image": "https://images.unsplash.com/photo-1596462502278-27bfdc403348?auto=format&fit=crop&w=2000&q=80",
        "ctaText": "Explore New",
        "ctaLink": "/#products",
    },
    {
        "id": 3,
        "title": "VIP Beauty Club",
        "subtitle": "Exclusive Member Benefits",
        "image": "https://images.unsplash.com/photo-1571781926291-c477ebfd024b?auto=format&fit=crop&w=2000&q=80",
        "video": "https://player.vimeo.com/video/328217769?background=1&autoplay=1&loop=1&byline=0&title=0&muted=1",
        "ctaText": "Join Now",
        "ctaLink": "/auth/sign-in",
    },
    {
        "id": 4,
        "title": "Free Shipping on Orders $50+",
        "subtitle": "Shop More, Save More",
        "image": "https://images.unsplash.com/photo-1556228720-195a672e8a03?auto=format&fit=crop&w=2000&q=80",
        "ctaText": "Start Shopping",
        "ctaLink": "/#products",
    },
]


def get_categories() -> list[dict[str, Any]]:
    return CATEGORIES


def get_banners() -> list[dict[str, Any]]:
    return BANNERS


def find_category(slug: str) -> dict[str, Any] | None:
    return next((c for c in CATEGORIES if c["slug"] == slug), None)


async def _cached_fetch(
    cache_key: str,
    query: str,
    params: dict[str, Any],
    ttl: int,
    cms: SanityClient | None,
) -> list[dict[str, Any]]:
    """Run a GROQ list query through the Redis cache.

    Cache errors are logged and bypassed. CMS errors yield an empty list.
    """
    try:
        cached = await get_catalog_cache(cache_key)
        if cached is not None:
            return cached
    except (RedisError, RuntimeError) as e:
        logger.warning(f"[catalog] cache read failed {cache_key}: {e}")

    try:
        products = await (cms or get_cms_client()).fetch(query, params) or []
    except CmsError as e:
        logger.error(f"[catalog] CMS query failed {cache_key}: {e}")
        return []

    try:
        await set_catalog_cache(cache_key, products, ttl)
    except (RedisError, RuntimeError) as e:
        logger.warning(f"[catalog] cache write failed {cache_key}: {e}")

    return products


async def get_featured_products(
    limit: int = FEATURED_LIMIT,
    cms: SanityClient | None = None,
) -> list[dict[str, Any]]:
    """Newest active products for the home page."""
    return await _cached_fetch(
        catalog_key("featured", str(limit)),
        FEATURED_PRODUCTS_QUERY,
        {"limit": limit},
        TTL_FEATURED_PRODUCTS,
        cms,
    )


async def get_category_products(
    slug: str,
    limit: int = 48,
    cms: SanityClient | None = None,
) -> list[dict[str, Any]]:
    """Active products of one category."""
    return await _cached_fetch(
        catalog_key("category", slug, str(limit)),
        CATEGORY_PRODUCTS_QUERY,
        {"slug": slug, "limit": limit},
        TTL_CATEGORY_PRODUCTS,
        cms,
    )
