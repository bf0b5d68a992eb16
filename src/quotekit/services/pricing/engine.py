"""Catalog-driven quote pricing.

``compute_quote`` is a pure function of its inputs: no I/O and no state, so
it may be called concurrently from any number of sessions.

Evaluation order:

1. base price (fixed ``base_rate`` or the product of base factors)
2. single-select groups in catalog order
3. the add-on group, options in catalog order
4. promo discount on the pre-discount subtotal

All arithmetic runs at full precision; amounts are rounded half-up to cents
only when the breakdown is built.
"""

from decimal import ROUND_HALF_UP, Decimal, localcontext

from beartype import beartype

from ...core.logging_utils import get_logger
from ...models.catalog import EffectKind, OptionCatalog
from ...models.quote import LineItem, LineItemKind, QuoteBreakdown
from ...models.selection import Selection
from .validation import (
    check_selection,
    normalize_promo_code,
    normalized_promo_table,
    validate_catalog,
)

logger = get_logger(__name__)

BASE_PRICE_LABEL = "Base price"

_CENT = Decimal("0.01")
_ZERO = Decimal("0")
_ONE = Decimal("1")
_PRECISION = 28


@beartype
def round_money(amount: Decimal) -> Decimal:
    """Round to cents, half-up."""
    return amount.quantize(_CENT, rounding=ROUND_HALF_UP)


@beartype
def format_percentage(fraction: Decimal) -> str:
    """0.15 -> '15%', 0.125 -> '12.5%'."""
    text = f"{round_money(fraction * 100):f}".rstrip("0").rstrip(".")
    return f"{text}%"


@beartype
def base_amount(catalog: OptionCatalog, selection: Selection) -> Decimal:
    """Base price before any option effect.

    For catalogs without a fixed base rate this is the product of the
    selected base factors; it stays zero until every factor group is set.
    """
    if catalog.base_rate is not None:
        return catalog.base_rate

    base = _ONE
    for field_id, group in catalog.groups.items():
        if not group.is_base_factor_group:
            continue
        option_id = selection.field_values.get(field_id)
        option = group.get_option(option_id) if isinstance(option_id, str) else None
        if option is None:
            return _ZERO
        base *= option.effect.value
    return base


@beartype
def compute_quote(catalog: OptionCatalog, selection: Selection) -> QuoteBreakdown:
    """Compute the price breakdown for a selection.

    Unset fields contribute nothing, so partial selections give a live
    preview price.

    Raises:
        MalformedCatalogError: the catalog violates its invariants.
        CatalogMismatchError: the selection references unknown fields or
            options.
    """
    validate_catalog(catalog)
    check_selection(catalog, selection)

    with localcontext() as ctx:
        ctx.prec = _PRECISION

        base = base_amount(catalog, selection)
        running = base
        items: list[tuple[str, Decimal, LineItemKind, str | None]] = [
            (BASE_PRICE_LABEL, base, LineItemKind.BASE, None)
        ]

        for field_id, group in catalog.groups.items():
            if group.multi_select or group.is_base_factor_group:
                continue
            option_id = selection.field_values.get(field_id)
            if not option_id:
                continue
            option = group.get_option(option_id)
            if option is None:
                continue
            effect = option.effect

            if effect.kind == EffectKind.FLAT:
                delta = effect.value
                if delta > 0:
                    items.append((option.label, delta, LineItemKind.OPTION, field_id))
            elif effect.kind == EffectKind.MULTIPLIER_ON_BASE:
                delta = base * (effect.value - _ONE)
                if delta > 0:
                    items.append((option.label, delta, LineItemKind.OPTION, field_id))
            else:
                delta = running * effect.value
                label = f"{option.label} ({format_percentage(effect.value)})"
                items.append((label, delta, LineItemKind.SURCHARGE, field_id))
            running += delta

        add_on_field = catalog.add_on_field
        if add_on_field is not None:
            chosen = selection.field_values.get(add_on_field) or frozenset()
            for option in catalog.groups[add_on_field].options:
                if option.id not in chosen:
                    continue
                amount = option.effect.value
                running += amount
                if amount > 0:
                    items.append(
                        (option.label, amount, LineItemKind.ADD_ON, add_on_field)
                    )

        subtotal = running
        discount = _ZERO
        if selection.promo_code:
            code = normalize_promo_code(selection.promo_code)
            percentage = normalized_promo_table(catalog).get(code)
            if percentage is not None:
                discount = subtotal * percentage
                if discount > 0:
                    label = f"Promo code {code} ({format_percentage(percentage)})"
                    items.append((label, -discount, LineItemKind.DISCOUNT, None))
            else:
                logger.debug(
                    "Unknown promo code for %s: %r", catalog.vertical, code
                )

        total = max(_ZERO, subtotal - discount)

        return QuoteBreakdown(
            line_items=[
                LineItem(
                    label=label,
                    amount=round_money(amount),
                    kind=kind,
                    field_id=field_id,
                )
                for label, amount, kind, field_id in items
            ],
            subtotal=round_money(subtotal),
            discount=round_money(discount),
            total=round_money(total),
            currency=catalog.currency,
        )
