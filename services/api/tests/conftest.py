"""Shared fixtures: ASGI client and DB/CMS stand-ins (no Postgres, Redis or network)."""

from contextlib import asynccontextmanager

import pytest
from httpx import ASGITransport, AsyncClient

from storefront.main import app


@pytest.fixture
async def client():
    """Create test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@asynccontextmanager
async def fake_get_session():
    """Stand-in for stores.postgres.get_session; services are patched too."""
    yield object()


class FakeCms:
    """In-memory stand-in for SanityClient."""

    def __init__(self, query_results=None, fail_uploads_for=(), fail_patch=False):
        self.query_results = query_results or {}
        self.fail_uploads_for = set(fail_uploads_for)
        self.fail_patch = fail_patch
        self.created: list[dict] = []
        self.patches: list[tuple[str, dict]] = []
        self.uploads: list[bytes] = []
        self.queries: list[tuple[str, dict | None]] = []

    async def fetch(self, query, params=None):
        self.queries.append((query, params))
        for needle, result in self.query_results.items():
            if needle in query:
                if isinstance(result, Exception):
                    raise result
                return result
        return []

    async def create(self, document):
        doc_id = f"product-{len(self.created) + 1}"
        self.created.append(document)
        return {**document, "_id": doc_id}

    async def patch_set(self, document_id, fields):
        from storefront.services.cms_client import CmsError

        if self.fail_patch:
            raise CmsError("patch rejected")
        self.patches.append((document_id, fields))
        return {"_id": document_id, **fields}

    async def upload_image(self, data, filename, content_type="image/jpeg"):
        from storefront.services.cms_client import CmsError

        if data in self.fail_uploads_for:
            raise CmsError("upload rejected")
        self.uploads.append(data)
        return {"_id": f"image-asset-{len(self.uploads)}", "_type": "sanity.imageAsset"}


@pytest.fixture
def fake_cms() -> FakeCms:
    return FakeCms()


@pytest.fixture
def make_cms():
    """Factory for FakeCms with custom query results or failures."""
    return FakeCms


@pytest.fixture
def fake_session_factory():
    """Replacement for get_session in route modules."""
    return fake_get_session
