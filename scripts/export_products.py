#!/usr/bin/env python3
"""
Export commerce variants to PickHero as products.

Creates each variant in PickHero (matched by product code = SKU) or updates
the existing product. Variants are read from the commerce catalog file
(``COMMERCE_CATALOG_FILE`` or ``--catalog``).

Usage:
    # Preview what would be exported
    python scripts/export_products.py --dry-run

    # Export the first 100 variants, only creating missing products
    python scripts/export_products.py --limit 100 --only-new

    # Stop at the first error and show the traceback
    python scripts/export_products.py --debug
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Dict

from rich.console import Console
from rich.table import Table

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.core.config import get_settings  # noqa: E402
from app.db.pickhero_clients import PickHeroAPI  # noqa: E402
from app.services.commerce.memory_store import InMemoryCommerceStore  # noqa: E402
from app.services.product_sync import ProductSync  # noqa: E402
from app.services.products.field_mapping import FieldMappingEvaluator  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)
console = Console()

MAX_ERRORS_SHOWN = 10


def print_summary(results: Dict[str, Any], dry_run: bool, verbose: bool) -> None:
    """Print the export counters and, unless verbose, the first unique errors."""
    mode = "DRY-RUN" if dry_run else "EXECUTION"

    table = Table(title=f"Product Export - {mode}")
    table.add_column("Result", style="cyan")
    table.add_column("Count", style="green", justify="right")
    table.add_row("Created", str(results["created"]))
    table.add_row("Updated", str(results["updated"]))
    table.add_row("Skipped", str(results["skipped"]))
    table.add_row("Errors", f"[red]{results['errors']}[/red]" if results["errors"] else "0")
    console.print(table)

    error_messages = results.get("error_messages") or []
    if error_messages and not verbose:
        console.print("\n[bold red]Errors:[/bold red]")
        for message in error_messages[:MAX_ERRORS_SHOWN]:
            console.print(f"  [red]{message}[/red]")
        if len(error_messages) > MAX_ERRORS_SHOWN:
            console.print(f"  ... and {len(error_messages) - MAX_ERRORS_SHOWN} more unique errors")

    if dry_run:
        console.print("\n[yellow]⚠️  This was a DRY-RUN. Nothing was sent to PickHero.[/yellow]")


async def main():
    """Main execution function."""
    parser = argparse.ArgumentParser(
        description="Export commerce variants to PickHero",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/export_products.py --dry-run
  python scripts/export_products.py --limit 100 --offset 200
  python scripts/export_products.py --only-new --catalog catalog.json
        """,
    )
    parser.add_argument("--limit", type=int, help="Maximum number of variants to export")
    parser.add_argument("--offset", type=int, default=0, help="Number of variants to skip")
    parser.add_argument("--only-new", action="store_true", help="Only create products missing in PickHero")
    parser.add_argument("--dry-run", action="store_true", help="Do not send anything to PickHero")
    parser.add_argument("--debug", action="store_true", help="Stop at the first error")
    parser.add_argument("--verbose", action="store_true", help="Log every product instead of an error summary")
    parser.add_argument("--catalog", type=str, help="Commerce catalog JSON file (default: COMMERCE_CATALOG_FILE)")

    args = parser.parse_args()

    if args.verbose or args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    settings = get_settings()
    catalog = args.catalog or settings.COMMERCE_CATALOG_FILE
    if not catalog:
        logger.error("No commerce catalog configured. Use --catalog or set COMMERCE_CATALOG_FILE.")
        sys.exit(1)

    api = None
    try:
        store = InMemoryCommerceStore.from_catalog_file(catalog)
        api = PickHeroAPI.from_settings(settings)
        await api.open()

        product_sync = ProductSync(
            api, store, FieldMappingEvaluator.from_config(settings.PRODUCT_FIELD_MAPPING), settings.SYNC_STOCK
        )
        variants = await store.list_variants(limit=args.limit, offset=args.offset)
        logger.info(f"Exporting {len(variants)} variants to PickHero...")

        results = await product_sync.export_multiple(
            variants, only_new=args.only_new, dry_run=args.dry_run, stop_on_error=args.debug
        )
        print_summary(results, dry_run=args.dry_run, verbose=args.verbose)

        sys.exit(1 if results["errors"] else 0)

    except KeyboardInterrupt:
        logger.warning("\nOperation interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        if api is not None:
            await api.close()


if __name__ == "__main__":
    asyncio.run(main())
