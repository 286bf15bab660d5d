"""
Copy block rendering.

A copy block is the plain-text summary of one base product that gets
pasted into a listing:

    Base Product Name: <label>
    Base Product Code: <code>
    Retail Price: $<price>
    Tier: <tier label>
    Tags used: <tag, tag>

    <description>
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Optional

from config.settings import CatalogConfig
from src.transformers.catalog_transformer import BaseProduct
from src.transformers.feature_tags import tier_label
from src.transformers.text_normalizer import normalize_description

_CENTS = Decimal("0.01")


def format_price(price: float) -> str:
    """
    Two-decimal price string.

    Rounds half away from zero on the shortest decimal repr of the float,
    so 19.995 -> "20.00" even though the binary value sits just below.
    """
    try:
        value = Decimal(str(price))
    except InvalidOperation:
        return "0.00"
    if not value.is_finite():
        return "0.00"
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the cents
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return str(value.quantize(_CENTS, rounding=ROUND_HALF_UP))


def fallback_description(base: BaseProduct, catalog_config: Optional[CatalogConfig] = None) -> str:
    """
    Description used when there is no authored override.

    Codes listed in CatalogConfig.fixed_descriptions get their fixed copy;
    everything else gets a two-line bullet summary.
    """
    catalog_config = catalog_config or CatalogConfig()

    fixed = catalog_config.fixed_descriptions.get(base.code)
    if fixed:
        return normalize_description(fixed)

    fit = base.fit_notes.strip() or catalog_config.default_fit_phrase
    blank = " ".join(part for part in (base.brand.strip(), base.model_name.strip()) if part)
    lines = [f"- {fit}"]
    if blank:
        lines.append(f"- {blank} blank")
    return "\n".join(lines)


def resolve_description(
    base: BaseProduct,
    overrides: Optional[dict[str, str]] = None,
    catalog_config: Optional[CatalogConfig] = None,
) -> str:
    """Authored override (normalized) when non-empty, else the fallback."""
    override = normalize_description((overrides or {}).get(base.code, ""))
    if override:
        return override
    return fallback_description(base, catalog_config)


def render_copy_block(
    base: BaseProduct,
    tags: list[str],
    description: str,
    tier_labels: Optional[dict] = None,
) -> str:
    """
    Render the copy block for one base product.

    Args:
        base: Selected base product
        tags: Merged tag list (see feature_tags.merge_tags)
        description: Body text, already resolved
        tier_labels: Tier key -> display label (defaults to CatalogConfig)

    Returns:
        Block text; every line ends with a newline
    """
    lines = [
        f"Base Product Name: {base.label}",
        f"Base Product Code: {base.code}",
        f"Retail Price: ${format_price(base.retail_price)}",
        f"Tier: {tier_label(base.tier, tier_labels)}",
        f"Tags used: {', '.join(tags)}",
        "",
    ]
    lines.extend(description.split("\n"))
    return "".join(line + "\n" for line in lines)
