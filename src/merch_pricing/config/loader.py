"""
Pricing config loader.

The configuration is loaded once per process and shared read-only.
Entry points receive it explicitly (PricingEngine(config)); the cached
instance here is only a convenience for the API, UI and scripts.
"""
import json
import logging
import threading
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .exceptions import ConfigurationError
from .model import PricingConfig
from .settings import get_settings

logger = logging.getLogger(__name__)

_config: Optional[PricingConfig] = None
_config_lock = threading.Lock()


def load_pricing_config(path: Path) -> PricingConfig:
    """Read and validate a pricing configuration document."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Pricing config not found at {path}.")

    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    try:
        config = PricingConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid pricing config {path}: {e}") from e

    logger.info(
        "Loaded pricing config v%s from %s (%d lines, %d channels)",
        config.version, path, len(config.product_lines), len(config.channels),
    )
    return config


def get_pricing_config() -> PricingConfig:
    """Get the process-wide pricing config, loading it exactly once."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = load_pricing_config(get_settings().pricing_config)
    return _config


def reset_pricing_config() -> None:
    """Drop the cached config so the next call reloads it from disk."""
    global _config
    with _config_lock:
        _config = None
