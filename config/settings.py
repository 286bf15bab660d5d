"""
Configuration settings for the base-product catalog tool.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file from project root
load_dotenv(Path(__file__).parent.parent / ".env")


@dataclass
class SourceConfig:
    """Configuration for the static data sources."""

    # Local directory holding the CSV/JSON files
    data_dir: Path = field(
        default_factory=lambda: Path(
            os.getenv("CATALOG_DATA_DIR") or Path(__file__).parent.parent / "data"
        )
    )

    # When set, sources are fetched over HTTP instead of read from data_dir
    base_url: Optional[str] = field(
        default_factory=lambda: os.getenv("CATALOG_BASE_URL") or None
    )

    # Source file names
    base_products: str = "base_products.csv"
    tier_map: str = "tier_map.csv"
    brand_tier_map: str = "brand_tier_map.csv"
    products: str = "products.csv"
    descriptions: str = "descriptions.json"
    meta: str = "meta.json"

    timeout_seconds: float = 15.0


@dataclass
class CatalogConfig:
    """Display tables and copy-block text used when rendering."""

    # Human labels for the category codes in base_products.csv
    category_labels: dict = field(
        default_factory=lambda: {
            "short_tee": "Short Sleeve",
            "long_tee": "Long Sleeve",
            "hoodie": "Unisex Hoodie",
            "crew": "Sweatshirt",
            "tank": "Tank",
            "crop": "Crop Tee",
        }
    )

    # Internal tier key -> display label (unknown keys pass through)
    tier_labels: dict = field(
        default_factory=lambda: {
            "std": "Std",
            "mid": "Mid",
            "premium": "Premium",
            "core": "Core",
        }
    )

    # Base codes whose description is fixed marketing copy
    fixed_descriptions: dict = field(
        default_factory=lambda: {
            "4062": (
                "A modern twist on the classic tee, this cropped style is cut for a "
                "relaxed silhouette with just the right amount of edge. Soft yet "
                "structured, it pairs effortlessly with high-waisted jeans, skirts, "
                "or joggers.\n"
                "\n"
                "- Midweight 100% combed cotton (heathers include viscose)\n"
                "- Relaxed fit, cropped length\n"
                "- Crew neck, ribbed collar\n"
                "- Dropped shoulders\n"
                "- Side-seamed\n"
                "- Preshrunk\n"
                "\n"
                "Made on demand to reduce waste, thanks for choosing small-batch."
            ),
        }
    )

    default_fit_phrase: str = "Comfortable everyday fit"

    def category_label(self, category: str) -> str:
        """Get the display label for a category code."""
        return self.category_labels.get(category, category)


@dataclass
class LoggingConfig:
    """Configuration for console output."""

    log_level: str = field(
        default_factory=lambda: (os.getenv("CATALOG_LOG_LEVEL") or "INFO").upper()
    )

    @property
    def verbose(self) -> bool:
        """Whether [dim] detail lines should be printed."""
        return self.log_level == "DEBUG"

    @property
    def quiet(self) -> bool:
        """Whether only warnings and errors should be printed."""
        return self.log_level in ("WARNING", "ERROR")


@dataclass
class PipelineConfig:
    """Main configuration combining all settings."""

    sources: SourceConfig = field(default_factory=SourceConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Default configuration instance
config = PipelineConfig()
