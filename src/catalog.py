"""
In-memory catalog snapshot shared by the CLI and the web viewer.
"""

from dataclasses import dataclass, field
from typing import Optional

from src.transformers.catalog_transformer import BaseProduct, CatalogMeta, ProductVariant


@dataclass(frozen=True)
class CatalogSnapshot:
    """Everything loaded for one session. Never mutated after load."""

    base_products: tuple[BaseProduct, ...] = ()
    variants: tuple[ProductVariant, ...] = ()
    descriptions: dict = field(default_factory=dict)
    meta: CatalogMeta = field(default_factory=CatalogMeta)

    @property
    def active_base_products(self) -> list[BaseProduct]:
        return [b for b in self.base_products if b.active]

    def get_base(self, code: str) -> Optional[BaseProduct]:
        """Look up a base product by code (active or not)."""
        for base in self.base_products:
            if base.code == code:
                return base
        return None

    def categories(self) -> list[str]:
        """Distinct categories of active bases, in first-seen order."""
        seen: list[str] = []
        for base in self.active_base_products:
            if base.category not in seen:
                seen.append(base.category)
        return seen

    def bases_for_category(self, category: Optional[str]) -> list[BaseProduct]:
        return [b for b in self.active_base_products if b.category == category]

    def active_variants(self, base_code: Optional[str] = None, query: str = "") -> list[ProductVariant]:
        """
        Variants that can be sold: enabled themselves and attached to an
        active base. Variants pointing at unknown bases are dropped.

        Args:
            base_code: Only variants of this base
            query: Case-insensitive text matched against SKU, title, color
                and the parent base's brand and model
        """
        active = {b.code: b for b in self.active_base_products}
        needle = (query or "").strip().lower()
        variants = []
        for v in self.variants:
            base = active.get(v.base_code)
            if not v.enabled or base is None:
                continue
            if base_code is not None and v.base_code != base_code:
                continue
            if needle and needle not in f"{v.sku} {v.title} {v.color} {base.brand} {base.model_name}".lower():
                continue
            variants.append(v)
        return variants
