"""
Discount Resolver - partner net prices from role, quantity and order brackets.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal

from ..config.model import PricingConfig
from ..engine.money import D, ONE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PartnerPrice:
    """Partner unit net price and the constraint that set it."""
    unit_net: Decimal
    basis: str  # "discount", "cap", "floor" or "min_margin"
    role_discount_pct: Decimal
    qty_discount_pct: Decimal
    candidates: dict


class DiscountResolver:
    """
    Resolves discounts for partner orders.

    Partner net price is the maximum of:
    1. UVP net less role discount, less quantity discount (unless exempt)
    2. UVP net less the role's maximum discount (cap)
    3. The product's floor price
    4. Full cost plus the role's minimum margin
    so stacked discounts can never undercut cost or policy floors.
    """

    def __init__(self, config: PricingConfig):
        self.config = config

    def quantity_discount(self, qty: int) -> Decimal:
        """First bracket with min <= qty <= max."""
        for bracket in self.config.quantity_discounts:
            if bracket.min <= qty <= bracket.max:
                return D(bracket.pct)
        return Decimal('0')

    def order_discount(self, subtotal_net: Decimal) -> Decimal:
        """Bracket with the highest threshold the subtotal reaches; not cumulative."""
        best = None
        for bracket in self.config.order_discounts:
            if subtotal_net >= D(bracket.min_subtotal_net):
                if best is None or bracket.min_subtotal_net > best.min_subtotal_net:
                    best = bracket
        return D(best.pct) if best else Decimal('0')

    def partner_unit_net(
        self,
        uvp_net: Decimal,
        floor_net: Decimal,
        full_cost: Decimal,
        role: str,
        qty: int,
    ) -> PartnerPrice:
        """
        Raises UnknownRoleError if the role is not configured.
        """
        role_config = self.config.role(role)
        role_pct = D(role_config.discount)
        qty_pct = Decimal('0') if role_config.qty_discount_exempt else self.quantity_discount(qty)

        candidates = {
            "discount": uvp_net * (ONE - role_pct) * (ONE - qty_pct),
            "cap": uvp_net * (ONE - D(role_config.cap)),
            "floor": floor_net,
            "min_margin": full_cost + D(role_config.min_eur),
        }
        # Ties resolve in insertion order
        basis = max(candidates, key=lambda k: candidates[k])
        logger.debug("Partner price for %s x%d: %s (%s)", role, qty, candidates[basis], basis)

        return PartnerPrice(
            unit_net=candidates[basis],
            basis=basis,
            role_discount_pct=role_pct,
            qty_discount_pct=qty_pct,
            candidates=candidates,
        )
