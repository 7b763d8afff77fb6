"""Engine subpackage - core pricing, guardrail and bundling logic."""
from .pricing_engine import PricingEngine
from .models import (
    ProductDescription,
    PricingResult,
    Guardrail,
    GuardrailStatus,
    AutotuneAction,
    BundleProposal,
    OrderLine,
    QuoteResult,
    InvalidProductError,
)

__all__ = [
    'PricingEngine',
    'ProductDescription',
    'PricingResult',
    'Guardrail',
    'GuardrailStatus',
    'AutotuneAction',
    'BundleProposal',
    'OrderLine',
    'QuoteResult',
    'InvalidProductError',
]
