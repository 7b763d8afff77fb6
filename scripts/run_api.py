#!/usr/bin/env python
"""
Run the pricing API with uvicorn.

Usage:
    python scripts/run_api.py [--port 8000] [--no-reload]
"""
import argparse
import os
import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / 'src'))

import uvicorn

from merch_pricing.config.logging_setup import setup_logging
from merch_pricing.config.settings import get_settings


def main():
    parser = argparse.ArgumentParser(description="Run the merch pricing API")
    parser.add_argument('--host', default='0.0.0.0')
    parser.add_argument('--port', type=int, default=8000)
    parser.add_argument('--no-reload', action='store_true')
    args = parser.parse_args()

    os.chdir(project_root)
    setup_logging(get_settings().log_level)

    print("Starting Merch Pricing API (FastAPI)...")
    try:
        uvicorn.run(
            "merch_pricing.api.main:app",
            host=args.host,
            port=args.port,
            reload=not args.no_reload,
        )
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
