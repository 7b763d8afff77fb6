"""
Cost Calculator - landed unit cost, floor price and gift/box allocations.
"""
import logging
from decimal import Decimal

from ..config.model import PricingConfig
from .models import ProductDescription, CostBreakdown, ADDITIVE_COST_FIELDS
from .money import D, ONE

logger = logging.getLogger(__name__)


class CostCalculator:
    """Derives per-unit costs from a product description. No error paths."""

    def __init__(self, config: PricingConfig):
        self.config = config

    def base_factory_unit(self, product: ProductDescription) -> Decimal:
        """Manual factory cost, else carton total / units per carton, else 0."""
        if product.factory_unit_manual and product.factory_unit_manual > 0:
            return D(product.factory_unit_manual)
        if product.total_factory_carton and product.units_per_carton and product.units_per_carton > 0:
            return D(product.total_factory_carton) / D(product.units_per_carton)
        return Decimal('0')

    def factory_unit_final(self, factory_unit: Decimal) -> Decimal:
        return factory_unit * (ONE + D(self.config.fx_buffer_pct))

    def full_cost(self, product: ProductDescription, factory_final: Decimal) -> Decimal:
        return factory_final + sum((D(getattr(product, name)) for name in ADDITIVE_COST_FIELDS), Decimal('0'))

    def gift_cost(self, product: ProductDescription) -> Decimal:
        """Expected gift cost per unit, scaled by attach rate."""
        defaults = self.config.gwp_defaults
        attach_rate = product.gift_attach_rate if product.gift_attach_rate is not None else defaults.attach_rate
        if not product.gift_sku_cost or not attach_rate:
            return Decimal('0')

        funding = product.gift_funding_pct if product.gift_funding_pct is not None else defaults.funding_pct
        per_gift = D(product.gift_sku_cost) * (ONE - D(funding)) + D(product.gift_shipping_increment)
        return per_gift * D(attach_rate)

    def box_cost(self, product: ProductDescription, order_type: str = 'B2C') -> Decimal:
        """Box cost spread over the average units per order."""
        if not product.box_size:
            return Decimal('0')

        box_cost = self.config.box_costs.get(product.box_size)
        if box_cost is None:
            logger.debug("SKU %s: no box cost configured for size %r", product.sku, product.box_size)
            return Decimal('0')

        avg_units = getattr(self.config.avg_units_per_order, order_type)
        return D(box_cost) / max(ONE, D(avg_units))

    def compute(self, product: ProductDescription, floor_mult: float, order_type: str = 'B2C') -> CostBreakdown:
        factory_unit = self.base_factory_unit(product)
        factory_final = self.factory_unit_final(factory_unit)
        full_cost = self.full_cost(product, factory_final)

        return CostBreakdown(
            factory_unit=factory_unit,
            factory_unit_final=factory_final,
            full_cost=full_cost,
            floor_net=full_cost * D(floor_mult),
            gift_cost_expected=self.gift_cost(product),
            box_cost_per_unit=self.box_cost(product, order_type),
        )
