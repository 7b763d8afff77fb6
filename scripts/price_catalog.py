#!/usr/bin/env python
"""
Price a catalog CSV and write the pricing report.

Usage:
    python scripts/price_catalog.py [catalog.csv] [-o report.csv] [--no-bundles]
"""
import argparse
import json
import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / 'src'))

from merch_pricing.config import get_pricing_config
from merch_pricing.config.logging_setup import setup_logging
from merch_pricing.config.settings import get_settings
from merch_pricing.engine import PricingEngine
from merch_pricing.services import load_catalog, price_catalog


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Price a product catalog")
    parser.add_argument('catalog', nargs='?', type=Path, default=settings.catalog_csv)
    parser.add_argument('-o', '--output', type=Path, default=settings.report_csv)
    parser.add_argument('--no-bundles', action='store_true', help="Skip bundle search")
    args = parser.parse_args()

    setup_logging(settings.log_level)

    try:
        loaded = load_catalog(args.catalog)
    except FileNotFoundError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    for error in loaded.errors:
        print(f"  ⚠️ {error}")

    engine = PricingEngine(get_pricing_config())
    report = price_catalog(engine, loaded.products, with_bundles=not args.no_bundles)
    report.to_csv(args.output)

    print("=" * 60)
    print("PRICING REPORT")
    print("=" * 60)
    print(json.dumps(report.summary(), indent=2))
    print(f"\nReport written to {args.output}")

    if report.errors or loaded.errors:
        sys.exit(2)


if __name__ == "__main__":
    main()
