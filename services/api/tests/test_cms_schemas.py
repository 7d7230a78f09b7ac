import pytest

from storefront.services.cms_schemas import (
    SchemaValidationError,
    invalid_option_fields,
    missing_required_fields,
    validate_document,
)


def test_product_requires_title_price_and_slug():
    assert missing_required_fields("product", {"_type": "product"}) == ["title", "price", "slug"]


def test_empty_slug_counts_as_missing():
    doc = {"_type": "product", "title": "Serum", "price": 0, "slug": {"_type": "slug", "current": ""}}
    assert missing_required_fields("product", doc) == ["slug"]


def test_zero_price_is_present():
    doc = {"_type": "product", "title": "Serum", "price": 0.0, "slug": {"_type": "slug", "current": "serum"}}
    validate_document(doc)


def test_unknown_type_raises():
    with pytest.raises(SchemaValidationError) as exc_info:
        validate_document({"_type": "coupon"})
    assert exc_info.value.missing == ["_type"]


def test_user_role_must_be_known_option():
    doc = {"_type": "user", "email": "a@b.c", "name": "Ann", "role": "owner"}
    assert invalid_option_fields("user", doc) == ["role"]
    with pytest.raises(SchemaValidationError):
        validate_document(doc)


def test_user_permissions_checked_per_item():
    doc = {
        "_type": "user",
        "email": "a@b.c",
        "name": "Ann",
        "role": "editor",
        "permissions": ["manage_products", "delete_everything"],
    }
    assert invalid_option_fields("user", doc) == ["permissions"]


def test_category_document_valid():
    validate_document({"_type": "productCategory", "title": "Skincare", "slug": {"_type": "slug", "current": "skincare"}})
