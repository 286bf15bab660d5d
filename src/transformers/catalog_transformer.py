"""
Catalog transformer for turning parsed CSV rows into typed records.

Base products get their tier resolved through a fixed precedence chain:
explicit row tier -> per-code override -> per-brand default -> "".
Dirty fields never fail a load: booleans fall back to False and prices
to 0. Row-level exclusions are reported as RowOutcome values.
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from rich.console import Console

from src.extractors.csv_reader import get_field, header_index, is_blank_row

console = Console()

# plain decimal or exponent notation; no underscores, hex or inf/nan words
PRICE_PATTERN = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


BASE_PRODUCT_COLUMNS = [
    "code",
    "brand",
    "model_name",
    "label",
    "category",
    "tier",
    "organic",
    "usa_made",
    "active",
    "retail_price",
    "fit_notes",
]

PRODUCT_COLUMNS = ["sku", "base_code", "title", "color", "size", "image_src", "enabled"]


def to_bool(value: Any) -> bool:
    """Only a case-insensitive literal "true" counts as True."""
    if value is None:
        return False
    return str(value).strip().lower() == "true"


def to_price(value: Any) -> float:
    """Parse a price; blank, non-finite, negative or unparseable input becomes 0."""
    if value is None:
        return 0.0
    text = str(value).strip()
    if not PRICE_PATTERN.fullmatch(text):
        return 0.0
    number = float(text)
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


class BaseProduct(BaseModel):
    """A garment base/blank with its tier resolved."""

    model_config = ConfigDict(frozen=True)

    code: str
    brand: str = ""
    model_name: str = ""
    label: str = ""
    category: str = ""
    tier: str = ""
    organic: bool = False
    usa_made: bool = False
    active: bool = False
    retail_price: float = Field(default=0.0, ge=0)
    fit_notes: str = ""

    @field_validator("retail_price", mode="before")
    @classmethod
    def clean_price(cls, v: Any) -> float:
        """Coerce anything unusable to 0."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return float(v) if math.isfinite(v) and v >= 0 else 0.0
        return to_price(v)


class ProductVariant(BaseModel):
    """One sellable SKU of a base product."""

    model_config = ConfigDict(frozen=True)

    sku: str
    base_code: str = ""
    title: str = ""
    color: str = ""
    size: str = ""
    image_src: str = ""
    enabled: bool = False


class CatalogMeta(BaseModel):
    """Display-only metadata about the data snapshot."""

    model_config = ConfigDict(frozen=True)

    last_updated: Optional[datetime] = None

    def display(self) -> str:
        """Human readable "Last updated" line, or "" when unknown."""
        if self.last_updated is None:
            return ""
        local = self.last_updated.astimezone() if self.last_updated.tzinfo else self.last_updated
        return f"Last updated: {local.strftime('%Y-%m-%d %H:%M:%S')}"


@dataclass(frozen=True)
class RowOutcome:
    """Result of validating one source row: a record, or why it was excluded."""

    record: Optional[BaseModel] = None
    reason: Optional[str] = None
    line: int = 0

    @property
    def ok(self) -> bool:
        return self.record is not None


def resolve_tier(
    row_tier: str,
    code: str,
    brand: str,
    tier_overrides: Optional[dict[str, str]] = None,
    brand_defaults: Optional[dict[str, str]] = None,
) -> str:
    """First non-blank of: row tier, per-code override, per-brand default, ""."""
    return (
        (row_tier or "").strip()
        or (tier_overrides or {}).get(code, "")
        or (brand_defaults or {}).get(brand, "")
        or ""
    )


def build_lookup(rows: Optional[list[list[str]]], key_column: str, value_column: str) -> dict[str, str]:
    """
    Build a sparse key -> value table from parsed rows (header first).

    Rows with a blank key are skipped; a later row for the same key wins.
    A missing source (None) gives an empty table.
    """
    if not rows:
        return {}
    index = header_index(rows[0])
    lookup: dict[str, str] = {}
    for row in rows[1:]:
        key = get_field(row, index, key_column)
        if key:
            lookup[key] = get_field(row, index, value_column)
    return lookup


def validate_base_row(
    row: list[str],
    index: dict[str, int],
    tier_overrides: Optional[dict[str, str]] = None,
    brand_defaults: Optional[dict[str, str]] = None,
    line: int = 0,
) -> RowOutcome:
    """Validate and coerce one base_products.csv row."""
    if is_blank_row(row):
        return RowOutcome(reason="blank row", line=line)

    code = get_field(row, index, "code")
    if not code:
        return RowOutcome(reason="blank code", line=line)

    brand = get_field(row, index, "brand")
    record = BaseProduct(
        code=code,
        brand=brand,
        model_name=get_field(row, index, "model_name"),
        label=get_field(row, index, "label"),
        category=get_field(row, index, "category"),
        tier=resolve_tier(
            get_field(row, index, "tier"), code, brand, tier_overrides, brand_defaults
        ),
        organic=to_bool(get_field(row, index, "organic")),
        usa_made=to_bool(get_field(row, index, "usa_made")),
        active=to_bool(get_field(row, index, "active")),
        retail_price=to_price(get_field(row, index, "retail_price")),
        fit_notes=get_field(row, index, "fit_notes"),
    )
    return RowOutcome(record=record, line=line)


def validate_variant_row(row: list[str], index: dict[str, int], line: int = 0) -> RowOutcome:
    """Validate and coerce one products.csv row."""
    if is_blank_row(row):
        return RowOutcome(reason="blank row", line=line)

    sku = get_field(row, index, "sku")
    if not sku:
        return RowOutcome(reason="blank sku", line=line)

    record = ProductVariant(
        sku=sku,
        base_code=get_field(row, index, "base_code"),
        title=get_field(row, index, "title"),
        color=get_field(row, index, "color"),
        size=get_field(row, index, "size"),
        image_src=get_field(row, index, "image_src"),
        enabled=to_bool(get_field(row, index, "enabled")),
    )
    return RowOutcome(record=record, line=line)


class CatalogTransformer:
    """Transforms parsed source rows into typed, joined catalog records."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self.excluded: list[RowOutcome] = []

    def transform_base_products(
        self,
        rows: list[list[str]],
        tier_rows: Optional[list[list[str]]] = None,
        brand_rows: Optional[list[list[str]]] = None,
    ) -> list[BaseProduct]:
        """
        Join base product rows with the tier tables.

        Args:
            rows: Parsed base_products.csv (header first)
            tier_rows: Parsed tier_map.csv (code, tier), optional
            brand_rows: Parsed brand_tier_map.csv (brand, tier), optional

        Returns:
            Resolved records in source order; duplicate codes keep the first row
        """
        if not rows:
            return []

        tier_overrides = build_lookup(tier_rows, "code", "tier")
        brand_defaults = build_lookup(brand_rows, "brand", "tier")
        index = header_index(rows[0])

        products: list[BaseProduct] = []
        seen: set[str] = set()
        # row numbers are 1-based and count the header
        for line, row in enumerate(rows[1:], start=2):
            outcome = validate_base_row(row, index, tier_overrides, brand_defaults, line)
            if outcome.ok and outcome.record.code in seen:
                outcome = RowOutcome(reason=f"duplicate code {outcome.record.code}", line=line)
            if not outcome.ok:
                self._exclude(outcome, "base_products")
                continue
            seen.add(outcome.record.code)
            products.append(outcome.record)
        return products

    def transform_variants(self, rows: Optional[list[list[str]]]) -> list[ProductVariant]:
        """Parse product variant rows (header first); duplicate SKUs keep the first row."""
        if not rows:
            return []
        index = header_index(rows[0])
        variants: list[ProductVariant] = []
        seen: set[str] = set()
        for line, row in enumerate(rows[1:], start=2):
            outcome = validate_variant_row(row, index, line)
            if outcome.ok and outcome.record.sku in seen:
                outcome = RowOutcome(reason=f"duplicate sku {outcome.record.sku}", line=line)
            if not outcome.ok:
                self._exclude(outcome, "products")
                continue
            seen.add(outcome.record.sku)
            variants.append(outcome.record)
        return variants

    def transform_descriptions(self, payload: Any) -> dict[str, str]:
        """Keep only string entries of a code -> text JSON object."""
        if not isinstance(payload, dict):
            if payload is not None:
                console.print("[yellow]Warning: descriptions source is not an object, ignoring[/yellow]")
            return {}
        return {
            str(code).strip(): text
            for code, text in payload.items()
            if isinstance(text, str) and str(code).strip()
        }

    def transform_meta(self, payload: Any) -> CatalogMeta:
        """Read last_updated from the meta JSON; anything unparseable is dropped."""
        if not isinstance(payload, dict):
            return CatalogMeta()
        raw = payload.get("last_updated")
        if not isinstance(raw, str) or not raw.strip():
            return CatalogMeta()
        try:
            # fromisoformat does not accept a trailing "Z" before 3.11
            return CatalogMeta(last_updated=datetime.fromisoformat(raw.strip().replace("Z", "+00:00")))
        except ValueError:
            return CatalogMeta()

    def _exclude(self, outcome: RowOutcome, source: str) -> None:
        self.excluded.append(outcome)
        # blank rows are routine (trailing separators), only report the rest
        if self.verbose and outcome.reason != "blank row":
            console.print(f"[dim]Skipping {source} row {outcome.line}: {outcome.reason}[/dim]")
