"""
Shared API state - one PricingEngine per process.
"""
import threading

from ..engine.pricing_engine import PricingEngine

_engine = None
_engine_lock = threading.Lock()


def get_engine() -> PricingEngine:
    """FastAPI dependency; tests override it with a fixture engine."""
    global _engine
    if _engine is None:
        with _engine_lock:
            if _engine is None:
                _engine = PricingEngine.from_default_config()
    return _engine
