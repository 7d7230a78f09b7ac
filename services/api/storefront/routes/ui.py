"""UI bootstrap endpoints.

GET /v1/ui/home       - Categories, banner slides and featured products
GET /v1/ui/categories - Category mega-menu
GET /v1/ui/categories/{slug}/products - Products of one category

Routers are thin: call services for business logic.
"""

from fastapi import APIRouter, HTTPException, Query

from storefront.schemas import Banner, CategoriesResponse, Category, HomeResponse
from storefront.services.catalog import (
    FEATURED_LIMIT,
    find_category,
    get_banners,
    get_categories,
    get_category_products,
    get_featured_products,
)

router = APIRouter()


@router.get("/home", response_model=HomeResponse)
async def get_home(
    featured: int = Query(
        default=FEATURED_LIMIT,
        ge=0,
        le=48,
        description="Number of featured products",
    ),
) -> HomeResponse:
    """Get home screen data.

    Featured products are an empty list when the CMS is unreachable.
    """
    products = await get_featured_products(limit=featured) if featured else []

    return HomeResponse(
        categories=[Category(**c) for c in get_categories()],
        banners=[Banner(**b) for b in get_banners()],
        featured_products=products,
    )


@router.get("/categories", response_model=CategoriesResponse)
async def list_categories() -> CategoriesResponse:
    return CategoriesResponse(categories=[Category(**c) for c in get_categories()])


@router.get("/categories/{slug}/products")
async def list_category_products(
    slug: str,
    limit: int = Query(default=48, ge=1, le=100),
) -> dict:
    category = find_category(slug)
    if category is None:
        raise HTTPException(status_code=404, detail=f"Unknown category: {slug}")

    products = await get_category_products(slug, limit=limit)
    return {"category": Category(**category).model_dump(), "products": products}
