"""Catalog invariants and selection membership checks."""

from decimal import Decimal

from beartype import beartype
from pydantic import Field

from ...core.exceptions import CatalogMismatchError, MalformedCatalogError
from ...models.base import BaseModelConfig
from ...models.catalog import (
    MAX_EFFECT_VALUE,
    EffectKind,
    FieldId,
    OptionCatalog,
    OptionGroup,
)
from ...models.selection import Selection


@beartype
class FieldError(BaseModelConfig):
    """A per-field validation message for the UI."""

    field_id: FieldId = Field(..., description="Field the message belongs to")
    message: str = Field(..., min_length=1, description="User-facing message")


@beartype
def normalize_promo_code(code: str) -> str:
    """Promo codes match case-insensitively, ignoring surrounding blanks."""
    return code.strip().lower()


@beartype
def normalized_promo_table(catalog: OptionCatalog) -> dict[str, Decimal]:
    """Promo table keyed by normalized code."""
    return {
        normalize_promo_code(code): percentage
        for code, percentage in catalog.promo_codes.items()
    }


def _group_violations(field_id: FieldId, group: OptionGroup) -> list[str]:
    violations: list[str] = []

    seen: set[str] = set()
    for option_id in group.option_ids:
        if option_id in seen:
            violations.append(f"{field_id}: duplicate option id '{option_id}'")
        seen.add(option_id)

    kinds = {option.effect.kind for option in group.options}
    if EffectKind.BASE_FACTOR in kinds and len(kinds) > 1:
        violations.append(f"{field_id}: base_factor options mixed with other effects")
    if EffectKind.BASE_FACTOR in kinds and not group.required:
        violations.append(f"{field_id}: base_factor groups must be required")
    if group.multi_select and kinds != {EffectKind.FLAT}:
        violations.append(f"{field_id}: add-on group may only hold flat effects")

    for option in group.options:
        effect = option.effect
        where = f"{field_id}.{option.id}"
        if effect.kind == EffectKind.FLAT and effect.value < 0:
            violations.append(f"{where}: flat amount must not be negative")
        elif effect.kind == EffectKind.MULTIPLIER_ON_BASE and effect.value < 1:
            violations.append(f"{where}: multiplier must be at least 1")
        elif (
            effect.kind == EffectKind.PERCENTAGE_OF_RUNNING_TOTAL
            and effect.value < -1
        ):
            violations.append(f"{where}: percentage must not be below -100%")
        elif effect.kind == EffectKind.BASE_FACTOR and effect.value <= 0:
            violations.append(f"{where}: base factor must be positive")
        if effect.value > MAX_EFFECT_VALUE:
            violations.append(f"{where}: value must not exceed {MAX_EFFECT_VALUE}")

    return violations


@beartype
def catalog_violations(catalog: OptionCatalog) -> list[str]:
    """List every violated catalog invariant (empty when well-formed)."""
    violations: list[str] = []

    for field_id, group in catalog.groups.items():
        violations.extend(_group_violations(field_id, group))

    multi_select = [f for f, g in catalog.groups.items() if g.multi_select]
    if len(multi_select) > 1:
        violations.append(
            f"only one add-on group allowed, found {', '.join(multi_select)}"
        )

    has_factors = any(g.is_base_factor_group for g in catalog.groups.values())
    if catalog.base_rate is None and not has_factors:
        violations.append("base_rate is required when no base_factor group exists")
    if catalog.base_rate is not None and has_factors:
        violations.append("base_rate and base_factor groups are mutually exclusive")
    if catalog.base_rate is not None and catalog.base_rate > MAX_EFFECT_VALUE:
        violations.append(f"base_rate must not exceed {MAX_EFFECT_VALUE}")

    normalized: dict[str, str] = {}
    for code, percentage in catalog.promo_codes.items():
        key = normalize_promo_code(code)
        if not key:
            violations.append("promo code must not be blank")
        elif key in normalized:
            violations.append(
                f"promo codes '{normalized[key]}' and '{code}' collide"
            )
        else:
            normalized[key] = code
        if percentage < 0:
            violations.append(f"promo code '{code}': percentage must not be negative")
        elif percentage > MAX_EFFECT_VALUE:
            violations.append(f"promo code '{code}': percentage is out of range")

    return violations


@beartype
def validate_catalog(catalog: OptionCatalog) -> None:
    """Raise MalformedCatalogError when any invariant is violated."""
    violations = catalog_violations(catalog)
    if violations:
        raise MalformedCatalogError(catalog.vertical, violations)


@beartype
def check_selection(catalog: OptionCatalog, selection: Selection) -> None:
    """Raise CatalogMismatchError when the selection does not fit the catalog."""
    problems: list[str] = []

    for field_id, value in selection.field_values.items():
        group = catalog.groups.get(field_id)
        if group is None:
            problems.append(f"unknown field '{field_id}'")
            continue

        if group.multi_select:
            if isinstance(value, str):
                problems.append(f"{field_id}: expected a set of option ids")
                continue
            chosen = sorted(value)
        else:
            if not isinstance(value, str):
                problems.append(f"{field_id}: expected a single option id")
                continue
            chosen = [value] if value else []

        for option_id in chosen:
            if group.get_option(option_id) is None:
                problems.append(f"{field_id}: unknown option '{option_id}'")

    if problems:
        raise CatalogMismatchError(
            catalog.vertical,
            "Selection does not match the current catalog; reload the calculator",
            problems,
        )


@beartype
def find_missing_fields(
    catalog: OptionCatalog, selection: Selection
) -> list[FieldError]:
    """Required fields without a value, in catalog order."""
    return [
        FieldError(field_id=field_id, message=f"Please select {group.label.lower()}")
        for field_id, group in catalog.groups.items()
        if group.required and not selection.is_set(field_id)
    ]
