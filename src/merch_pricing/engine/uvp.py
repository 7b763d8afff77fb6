"""
UVP Calculator - recommended consumer price from target margin or manual override.
"""
from decimal import Decimal

from ..config.model import PricingConfig
from .models import ProductDescription, CostBreakdown, UvpQuote, PriceFloorFlag
from .money import D, ONE, to_cents, round_consumer

MIN_MARGIN_HEADROOM = Decimal('0.01')


class UVPCalculator:
    """Derives the tax-inclusive consumer price and its .99 rounding."""

    def __init__(self, config: PricingConfig):
        self.config = config
        self.vat_factor = ONE + D(config.vat)
        self.ending_cents = to_cents(config.consumer_round_to)

    def round_consumer(self, amount) -> int:
        return round_consumer(amount, self.ending_cents)

    def compute(self, product: ProductDescription, costs: CostBreakdown) -> UvpQuote:
        """
        Raises UnknownProductLineError if the product line is not configured.
        """
        _, line_config = self.config.line(product.line)

        manual = product.manual_uvp_inc is not None and product.manual_uvp_inc > 0
        if manual:
            uvp_inc = D(product.manual_uvp_inc)
            uvp_net = uvp_inc / self.vat_factor
        else:
            uvp_net = costs.full_cost / max(MIN_MARGIN_HEADROOM, ONE - D(line_config.gm_uvp))
            uvp_inc = uvp_net * self.vat_factor

        flag = PriceFloorFlag.OK if uvp_net >= costs.floor_net else PriceFloorFlag.RAISE_NEEDED

        return UvpQuote(
            uvp_net=uvp_net,
            uvp_inc=uvp_inc,
            uvp_inc_99_cents=self.round_consumer(uvp_inc),
            price_vs_floor=flag,
            manual_override=manual,
        )
