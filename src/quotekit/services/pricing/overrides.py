"""Per-instance price customisation of a vertical catalog."""

from beartype import beartype

from ...core.result_types import Err, Ok, Result
from ...models.calculator import CatalogOverrides
from ...models.catalog import (
    EFFECT_VALUE_ATTRIBUTE,
    OptionCatalog,
    OptionGroup,
)
from .validation import catalog_violations


@beartype
def apply_overrides(
    catalog: OptionCatalog, overrides: CatalogOverrides
) -> Result[OptionCatalog, str]:
    """Return the effective catalog for a calculator instance.

    Overridden option values replace the value of the option's existing
    effect; the effect kind never changes. The result is re-checked against
    the catalog invariants so an instance cannot configure a malformed price
    list.
    """
    if overrides.is_empty:
        return Ok(catalog)

    if overrides.base_rate is not None and catalog.base_rate is None:
        return Err(
            f"Catalog '{catalog.vertical}' derives its base price; "
            "base_rate cannot be overridden"
        )

    groups: dict[str, OptionGroup] = dict(catalog.groups)
    for field_id, amounts in overrides.option_amounts.items():
        group = groups.get(field_id)
        if group is None:
            return Err(f"Unknown field '{field_id}' in overrides")
        options = list(group.options)
        for option_id, value in amounts.items():
            index = next(
                (i for i, o in enumerate(options) if o.id == option_id), None
            )
            if index is None:
                return Err(f"Unknown option '{field_id}.{option_id}' in overrides")
            option = options[index]
            effect = option.effect.model_copy(
                update={EFFECT_VALUE_ATTRIBUTE[option.effect.kind]: value}
            )
            options[index] = option.model_copy(update={"effect": effect})
        groups[field_id] = group.model_copy(update={"options": options})

    promo_codes = dict(catalog.promo_codes)
    promo_codes.update(overrides.promo_codes)

    update: dict[str, object] = {"groups": groups, "promo_codes": promo_codes}
    if overrides.base_rate is not None:
        update["base_rate"] = overrides.base_rate
    effective = catalog.model_copy(update=update)

    violations = catalog_violations(effective)
    if violations:
        return Err("Invalid overrides: " + "; ".join(violations))
    return Ok(effective)
