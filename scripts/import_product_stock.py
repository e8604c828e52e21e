#!/usr/bin/env python3
"""
Import stock levels from PickHero into commerce variants.

Reads every PickHero stock record with stock, sums the quantities per
product code and writes the total to the variant with that SKU.
Requires ``SYNC_STOCK=true``.

Usage:
    python scripts/import_product_stock.py
    python scripts/import_product_stock.py --limit 50 --offset 100
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.core.config import get_settings  # noqa: E402
from app.db.pickhero_clients import PickHeroAPI  # noqa: E402
from app.services.commerce.memory_store import InMemoryCommerceStore  # noqa: E402
from app.services.product_sync import ProductSync  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)
console = Console()


async def main():
    """Main execution function."""
    parser = argparse.ArgumentParser(
        description="Import product stock from PickHero",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--limit", type=int, help="Maximum number of SKUs to update")
    parser.add_argument("--offset", type=int, help="Number of SKUs to skip")
    parser.add_argument("--debug", action="store_true", help="Stop at the first error")
    parser.add_argument("--catalog", type=str, help="Commerce catalog JSON file (default: COMMERCE_CATALOG_FILE)")

    args = parser.parse_args()

    settings = get_settings()
    if not settings.SYNC_STOCK:
        logger.error("Stock synchronization is disabled. Enable SYNC_STOCK.")
        sys.exit(1)

    catalog = args.catalog or settings.COMMERCE_CATALOG_FILE
    api = None
    try:
        store = InMemoryCommerceStore.from_catalog_file(catalog) if catalog else InMemoryCommerceStore()
        api = PickHeroAPI.from_settings(settings)
        await api.open()

        product_sync = ProductSync(api, store, sync_stock=settings.SYNC_STOCK)
        results = await product_sync.import_stock(limit=args.limit, offset=args.offset, stop_on_error=args.debug)

        table = Table(title="Stock Import")
        table.add_column("Result", style="cyan")
        table.add_column("Count", style="green", justify="right")
        table.add_row("Processed", str(results["processed"]))
        table.add_row("Skipped", str(results["skipped"]))
        table.add_row("Errors", str(results["errors"]))
        console.print(table)
        for message in results["error_messages"]:
            console.print(f"  [red]{message}[/red]")

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
