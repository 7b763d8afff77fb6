#!/usr/bin/env python
"""
Run the Streamlit pricing UI.

Usage:
    python scripts/run_app.py [--port 8501] [--config path/to/pricing.json]
"""
import argparse
import os
import subprocess
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
UI_PATH = PROJECT_ROOT / 'src' / 'merch_pricing' / 'ui' / 'app_streamlit.py'


def build_command(ui_path: Path, port: int = None) -> list[str]:
    cmd = [sys.executable, '-m', 'streamlit', 'run', str(ui_path)]
    if port:
        cmd += ['--server.port', str(port)]
    return cmd


def build_env(config_path: str = None) -> dict:
    """Child environment; a config path overrides MERCH_PRICING_CONFIG."""
    env = dict(os.environ)
    if config_path:
        env['MERCH_PRICING_CONFIG'] = str(Path(config_path).resolve())
    return env


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run the merch pricing UI")
    parser.add_argument('--port', type=int, default=None)
    parser.add_argument('--config', default=None, help="Pricing config JSON")
    args = parser.parse_args(argv)

    if not UI_PATH.exists():
        print(f"ERROR: UI module not found at {UI_PATH}")
        sys.exit(1)

    cmd = build_command(UI_PATH, args.port)
    print(f"Starting Streamlit: {' '.join(cmd)}")

    try:
        subprocess.run(cmd, cwd=str(PROJECT_ROOT), env=build_env(args.config))
    except KeyboardInterrupt:
        print("\nApplication stopped.")


if __name__ == "__main__":
    main()
