"""
Catalog load pipeline: read the static sources, parse and join them.
"""

import asyncio
from typing import Optional

import httpx
from rich.console import Console

from config.settings import PipelineConfig, config
from src.catalog import CatalogSnapshot
from src.extractors.csv_reader import header_index, parse_csv
from src.extractors.source_reader import SourceReader
from src.transformers.catalog_transformer import (
    BASE_PRODUCT_COLUMNS,
    PRODUCT_COLUMNS,
    CatalogTransformer,
)

console = Console()


class CatalogPipeline:
    """
    Loads a CatalogSnapshot.

    Orchestrates:
    - Extract: read every source concurrently
    - Transform: parse CSV, resolve tiers, coerce fields

    A missing required source fails the whole load with SourceUnavailable;
    optional sources degrade to "nothing to apply".
    """

    def __init__(
        self,
        pipeline_config: Optional[PipelineConfig] = None,
        include_variants: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = pipeline_config or config
        self.include_variants = include_variants
        self.transport = transport
        self.transformer = CatalogTransformer(verbose=self.config.logging.verbose)

    async def load(self) -> CatalogSnapshot:
        """Run extract + transform and return the snapshot."""
        # exclusions describe the latest load only
        self.transformer.excluded.clear()
        sources = self.config.sources

        text_sources = {
            sources.base_products: True,
            sources.tier_map: False,
            sources.brand_tier_map: False,
        }
        if self.include_variants:
            text_sources[sources.products] = True

        async with SourceReader(sources, transport=self.transport) as reader:
            # let every read finish before the client closes, then fail on the first error
            results = await asyncio.gather(
                reader.read_many(text_sources),
                reader.read_json(sources.descriptions),
                reader.read_json(sources.meta),
                return_exceptions=True,
            )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        texts, descriptions, meta = results

        base_rows = parse_csv(texts[sources.base_products])
        self._check_columns(sources.base_products, base_rows, BASE_PRODUCT_COLUMNS)

        products = self.transformer.transform_base_products(
            base_rows,
            tier_rows=self._parse_optional(texts.get(sources.tier_map)),
            brand_rows=self._parse_optional(texts.get(sources.brand_tier_map)),
        )

        variants = []
        if self.include_variants:
            variant_rows = parse_csv(texts[sources.products])
            self._check_columns(sources.products, variant_rows, PRODUCT_COLUMNS)
            variants = self.transformer.transform_variants(variant_rows)

        snapshot = CatalogSnapshot(
            base_products=tuple(products),
            variants=tuple(variants),
            descriptions=self.transformer.transform_descriptions(descriptions),
            meta=self.transformer.transform_meta(meta),
        )
        self._print_summary(snapshot)
        return snapshot

    @staticmethod
    def _parse_optional(text: Optional[str]) -> Optional[list[list[str]]]:
        return parse_csv(text) if text is not None else None

    def _check_columns(self, source: str, rows: list[list[str]], expected: list[str]) -> None:
        if not rows:
            console.print(f"[yellow]Warning: {source} is empty[/yellow]")
            return
        missing = [c for c in expected if c not in header_index(rows[0])]
        if missing:
            console.print(
                f"[yellow]Warning: {source} is missing columns: {', '.join(missing)}[/yellow]"
            )

    def _print_summary(self, snapshot: CatalogSnapshot) -> None:
        if self.config.logging.quiet:
            return
        console.print(
            f"[green]✓ Loaded {len(snapshot.base_products)} base products "
            f"({len(snapshot.active_base_products)} active), "
            f"{len(snapshot.variants)} variants, "
            f"{len(snapshot.descriptions)} descriptions[/green]"
        )
        if self.transformer.excluded and self.config.logging.verbose:
            console.print(f"[dim]Excluded {len(self.transformer.excluded)} rows[/dim]")


def load_catalog(
    pipeline_config: Optional[PipelineConfig] = None,
    include_variants: bool = True,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> CatalogSnapshot:
    """Synchronous wrapper around CatalogPipeline.load()."""
    pipeline = CatalogPipeline(pipeline_config, include_variants=include_variants, transport=transport)
    return asyncio.run(pipeline.load())
