#!/usr/bin/env python3
"""
Base Product Catalog - Main Entry Point

Loads the base product, tier and variant CSVs, then lists categories and
bases or renders the copy block for one base product.

Usage:
    python main.py --categories             # List garment categories
    python main.py --bases short_tee        # Bases for one category
    python main.py --render 3001U           # Copy block for a base
    python main.py --render 3001U -f triblend --copy
"""
import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from config.settings import PipelineConfig, SourceConfig
from src.catalog import CatalogSnapshot
from src.errors import ClipboardWriteFailed, SourceUnavailable
from src.loaders.clipboard_loader import ClipboardLoader
from src.pipeline import load_catalog
from src.state import SelectionState, copy_text, feature_options, select_base, select_category, toggle_feature
from src.transformers.copy_block import format_price
from src.transformers.feature_tags import FEATURE_LABELS, Feature, tier_label

console = Console()


class CustomHelpFormatter(argparse.RawDescriptionHelpFormatter):
    """Custom formatter that preserves formatting and adds width."""

    def __init__(self, prog):
        super().__init__(prog, max_help_position=40, width=100)


def parse_args(argv=None):
    """Parse command line arguments."""

    feature_list = "\n".join(
        f"    {f.value:<14} {FEATURE_LABELS[f]}" for f in Feature
    )

    epilog = f"""
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
FEATURES
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
{feature_list}

━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
EXAMPLES
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    python main.py --categories                 Active garment categories
    python main.py --bases hoodie               Hoodie bases with price and tier
    python main.py --render 3001U               Copy block for base 3001U
    python main.py --render 3001U -f usa_made   ...with the made-in-USA tag
    python main.py --render 3001U --copy        ...and send it to the clipboard
    python main.py --variants 3001U             Sellable SKUs of base 3001U
    python main.py --variants --search bauhaus  Sellable SKUs matching "bauhaus"
    python main.py --base-url https://host/data --categories
"""

    parser = argparse.ArgumentParser(
        prog="python main.py",
        description="""
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
                          BASE PRODUCT CATALOG
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
Browse garment base products and render copy-ready listing blocks.
""",
        epilog=epilog,
        formatter_class=CustomHelpFormatter,
    )

    view_group = parser.add_argument_group("View Options", "What to show")
    view_group.add_argument(
        "--categories",
        action="store_true",
        help="List active garment categories",
    )
    view_group.add_argument(
        "--bases",
        type=str,
        metavar="CATEGORY",
        help="List active bases in a category",
    )
    view_group.add_argument(
        "--render",
        "-r",
        type=str,
        metavar="CODE",
        help="Render the copy block for a base product",
    )
    view_group.add_argument(
        "--feature",
        "-f",
        type=str,
        action="append",
        default=[],
        choices=[f.value for f in Feature],
        help="Feature toggle to add to the rendered tags (repeatable)",
    )
    view_group.add_argument(
        "--copy",
        action="store_true",
        help="Copy the rendered block to the clipboard",
    )
    view_group.add_argument(
        "--variants",
        type=str,
        nargs="?",
        const="",
        metavar="CODE",
        help="List sellable variants (optionally for one base)",
    )
    view_group.add_argument(
        "--search",
        "-s",
        type=str,
        default="",
        metavar="TEXT",
        help="With --variants: only SKUs whose SKU, title, color, brand or model contain TEXT",
    )
    view_group.add_argument(
        "--meta",
        action="store_true",
        help="Show when the data was last updated",
    )

    source_group = parser.add_argument_group("Source Options", "Where the data comes from")
    source_group.add_argument(
        "--data-dir",
        type=str,
        metavar="DIR",
        help="Directory containing the CSV/JSON sources",
    )
    source_group.add_argument(
        "--base-url",
        type=str,
        metavar="URL",
        help="Fetch sources over HTTP from this URL instead",
    )

    return parser.parse_args(argv)


def create_config(args) -> PipelineConfig:
    """Create pipeline configuration from arguments."""
    source_config = SourceConfig()
    if args.data_dir:
        source_config.data_dir = Path(args.data_dir)
    if args.base_url:
        source_config.base_url = args.base_url
    return PipelineConfig(sources=source_config)


def print_categories(snapshot: CatalogSnapshot, config: PipelineConfig) -> None:
    table = Table(title="Garment Categories")
    table.add_column("Code", style="cyan")
    table.add_column("Label")
    table.add_column("Bases", justify="right")
    for category in snapshot.categories():
        table.add_row(
            category,
            config.catalog.category_label(category),
            str(len(snapshot.bases_for_category(category))),
        )
    console.print(table)


def print_bases(snapshot: CatalogSnapshot, config: PipelineConfig, category: str) -> int:
    bases = snapshot.bases_for_category(category)
    if not bases:
        console.print(f"[yellow]No active base products in category '{category}'[/yellow]")
        return 1

    table = Table(title=f"Base options for {config.catalog.category_label(category)}")
    table.add_column("Code", style="cyan")
    table.add_column("Label")
    table.add_column("Brand")
    table.add_column("Tier")
    table.add_column("Price", justify="right")
    for base in bases:
        table.add_row(
            base.code,
            base.label,
            base.brand,
            tier_label(base.tier, config.catalog.tier_labels),
            f"${format_price(base.retail_price)}",
        )
    console.print(table)
    return 0


def render_base(snapshot: CatalogSnapshot, config: PipelineConfig, args) -> int:
    base = snapshot.get_base(args.render)
    if base is None or not base.active:
        console.print(f"[red]No active base product with code '{args.render}'[/red]")
        return 1

    state = select_category(SelectionState(), snapshot, base.category)
    state = select_base(state, snapshot, base.code)
    options = feature_options(state, snapshot)
    for feature in dict.fromkeys(args.feature):
        if not options[feature]["available"]:
            console.print(
                f"[yellow]Warning: '{feature}' is not offered for "
                f"{config.catalog.category_label(base.category)}, ignoring[/yellow]"
            )
            continue
        if not options[feature]["on"]:
            state = toggle_feature(state, snapshot, feature)

    text = copy_text(state, snapshot, config.catalog)
    console.print(Panel(Text(text.rstrip("\n")), title=base.label, expand=False))

    if args.copy:
        try:
            ClipboardLoader().copy(text)
        except ClipboardWriteFailed as e:
            console.print(f"[red]{e}[/red]")
            return 1
    return 0


def print_variants(snapshot: CatalogSnapshot, base_code: str, query: str = "") -> None:
    variants = snapshot.active_variants(base_code or None, query=query)
    table = Table(title="Sellable Variants")
    table.add_column("SKU", style="cyan")
    table.add_column("Base")
    table.add_column("Title")
    table.add_column("Color")
    table.add_column("Size")
    for v in variants:
        table.add_row(v.sku, v.base_code, v.title, v.color, v.size)
    console.print(table)
    console.print(f"[dim]{len(variants)} variants[/dim]")


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    config = create_config(args)

    try:
        snapshot = load_catalog(config, include_variants=args.variants is not None)
    except SourceUnavailable as e:
        console.print(f"\n[bold red]Error: {e}[/bold red]")
        return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled by user[/yellow]")
        return 130

    if not snapshot.categories():
        console.print("[yellow]No active base products found.[/yellow]")
        return 1

    if args.meta:
        console.print(snapshot.meta.display() or "[dim]No last-updated timestamp[/dim]")

    if args.render:
        return render_base(snapshot, config, args)
    if args.bases:
        return print_bases(snapshot, config, args.bases)
    if args.variants is not None:
        print_variants(snapshot, args.variants, args.search)
        return 0

    print_categories(snapshot, config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
