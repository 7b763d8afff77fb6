"""
Centralized settings and path configuration for the pricing engine.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


PACKAGE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_PRICING_CONFIG = PACKAGE_DIR / 'config' / 'default_pricing.json'


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Input files
    pricing_config: Path
    catalog_csv: Path

    # Output files
    report_csv: Path

    log_level: str = 'INFO'

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the environment and the project structure."""
        root = project_root or get_project_root()

        config_override = os.getenv('MERCH_PRICING_CONFIG', '').strip()
        catalog_override = os.getenv('MERCH_PRICING_CATALOG', '').strip()

        return cls(
            project_root=root,
            pricing_config=Path(config_override) if config_override else DEFAULT_PRICING_CONFIG,
            catalog_csv=Path(catalog_override) if catalog_override else root / 'data' / 'catalog.csv',
            report_csv=root / 'data' / 'outputs' / 'pricing_report.csv',
            log_level=os.getenv('MERCH_PRICING_LOG_LEVEL', 'INFO').upper(),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
