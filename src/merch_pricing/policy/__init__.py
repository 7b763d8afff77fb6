"""Policy subpackage - partner discounts, quotes and compliance checks."""
from .discounts import DiscountResolver
from .quote_builder import QuoteBuilder
from .compliance import ComplianceResult, check_map_compliance, check_margin_floor

__all__ = [
    'DiscountResolver',
    'QuoteBuilder',
    'ComplianceResult',
    'check_map_compliance',
    'check_margin_floor',
]
