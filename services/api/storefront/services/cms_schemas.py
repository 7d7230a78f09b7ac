"""CMS document type definitions.

Field sets of the document types the storefront reads and writes in Sanity.
The Studio owns the real schema; these mirrors let the API check documents
before sending mutations.
"""

from dataclasses import dataclass
from typing import Any


class SchemaValidationError(ValueError):
    """Raised when a document misses required fields or uses an unknown type."""

    def __init__(self, doc_type: str, missing: list[str]):
        self.doc_type = doc_type
        self.missing = missing
        super().__init__(f"{doc_type} document missing required fields: {', '.join(missing)}")


@dataclass(frozen=True)
class FieldDef:
    """One field of a document type."""

    name: str
    type: str
    required: bool = False
    options: tuple[str, ...] = ()


PRODUCT_FIELDS = (
    FieldDef("title", "string", required=True),
    FieldDef("description", "text"),
    FieldDef("price", "number", required=True),
    FieldDef("image", "image"),
    FieldDef("images", "array"),
    FieldDef("category", "reference"),
    FieldDef("supplierUrl", "url"),
    FieldDef("supplierName", "string"),
    FieldDef("stock", "number"),
    FieldDef("isActive", "boolean"),
    FieldDef("slug", "slug", required=True),
    FieldDef("tags", "array"),
    FieldDef("source", "object"),
    FieldDef("importMetadata", "object"),
    FieldDef("createdAt", "datetime"),
    FieldDef("updatedAt", "datetime"),
)

CATEGORY_FIELDS = (
    FieldDef("title", "string", required=True),
    FieldDef("slug", "slug", required=True),
    FieldDef("description", "text"),
)

USER_FIELDS = (
    FieldDef("email", "string", required=True),
    FieldDef("name", "string", required=True),
    FieldDef("role", "string", required=True, options=("admin", "editor", "viewer")),
    FieldDef("isActive", "boolean"),
    FieldDef(
        "permissions",
        "array",
        options=(
            "manage_products",
            "manage_orders",
            "import_alibaba",
            "view_supplier_info",
            "manage_users",
            "access_analytics",
        ),
    ),
    FieldDef("lastLogin", "datetime"),
)

DOCUMENT_TYPES: dict[str, tuple[FieldDef, ...]] = {
    "product": PRODUCT_FIELDS,
    "productCategory": CATEGORY_FIELDS,
    "user": USER_FIELDS,
}


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, dict) and value.get("_type") == "slug":
        return not str(value.get("current") or "").strip()
    return False


def missing_required_fields(doc_type: str, document: dict[str, Any]) -> list[str]:
    """List required fields of `doc_type` that are absent or blank in `document`."""
    fields = DOCUMENT_TYPES.get(doc_type)
    if fields is None:
        raise SchemaValidationError(doc_type, ["_type"])
    return [f.name for f in fields if f.required and _is_empty(document.get(f.name))]


def invalid_option_fields(doc_type: str, document: dict[str, Any]) -> list[str]:
    """List fields whose value is outside the field's option list."""
    invalid: list[str] = []
    for f in DOCUMENT_TYPES.get(doc_type, ()):
        if not f.options or f.name not in document:
            continue
        value = document[f.name]
        values = value if isinstance(value, list) else [value]
        if any(v not in f.options for v in values):
            invalid.append(f.name)
    return invalid


def validate_document(document: dict[str, Any]) -> None:
    """Check a document against its `_type` definition.

    Raises:
        SchemaValidationError: Unknown type, missing required fields or bad option values.
    """
    doc_type = str(document.get("_type") or "")
    problems = missing_required_fields(doc_type, document) + invalid_option_fields(doc_type, document)
    if problems:
        raise SchemaValidationError(doc_type, problems)
