"""Schemas for the scrape-and-import API (/api/scrape-and-import)."""

from pydantic import BaseModel, Field


class ScrapeRequest(BaseModel):
    """Request body for POST /api/scrape-and-import.

    `url` is optional here so that a missing URL can be answered with the
    storefront's own 400 envelope instead of a validation error.
    """

    url: str | None = None
    import_to_sanity: bool = Field(alias="importToSanity", default=False)
    category_id: str | None = Field(alias="categoryId", default=None)

    model_config = {"populate_by_name": True}
