"""Catalog-driven pricing engine shared by every vertical."""

from .engine import BASE_PRICE_LABEL, base_amount, compute_quote, round_money
from .overrides import apply_overrides
from .validation import (
    FieldError,
    catalog_violations,
    check_selection,
    find_missing_fields,
    normalize_promo_code,
    normalized_promo_table,
    validate_catalog,
)

__all__ = [
    "BASE_PRICE_LABEL",
    "FieldError",
    "apply_overrides",
    "base_amount",
    "catalog_violations",
    "check_selection",
    "compute_quote",
    "find_missing_fields",
    "normalize_promo_code",
    "normalized_promo_table",
    "round_money",
    "validate_catalog",
]
