"""Schemas for the UI bootstrap endpoints (/v1/ui/home, /v1/ui/categories)."""

from typing import Any

from pydantic import BaseModel, Field


class Category(BaseModel):
    """A top-level group of the category mega-menu."""

    name: str
    slug: str
    href: str
    subcategories: list[str] = Field(default_factory=list)


class Banner(BaseModel):
    """A banner carousel slide."""

    id: int
    title: str
    subtitle: str
    image: str
    video: str | None = None
    cta_text: str = Field(alias="ctaText")
    cta_link: str = Field(alias="ctaLink")

    model_config = {"populate_by_name": True}


class HomeResponse(BaseModel):
    """Response payload for GET /v1/ui/home."""

    categories: list[Category]
    banners: list[Banner]
    featured_products: list[dict[str, Any]] = Field(alias="featuredProducts", default_factory=list)

    model_config = {"populate_by_name": True}


class CategoriesResponse(BaseModel):
    """Response payload for GET /v1/ui/categories."""

    categories: list[Category]
