"""
Quote Builder - multi-line partner quotes on top of engine pricing.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from ..engine.models import OrderLine, QuoteLine, QuoteResult
from ..engine.money import D, quantize, format_eur, to_cents
from ..engine.pricing_engine import PricingEngine
from .discounts import DiscountResolver

logger = logging.getLogger(__name__)


class QuoteBuilder:
    """
    Builds partner quotes.

    Steps:
    1. Price each product with the engine (UVP after autotune)
    2. Partner unit net per line (role/quantity discounts, cap and floors)
    3. Order-level discount on the subtotal
    4. Tax, shipping, loyalty points and role commission
    """

    def __init__(self, engine: PricingEngine, resolver: Optional[DiscountResolver] = None):
        self.engine = engine
        self.config = engine.config
        self.resolver = resolver or DiscountResolver(engine.config)

    def build(
        self,
        items: list[OrderLine],
        role: str,
        shipping_eur=0,
        apply_tax: bool = True,
    ) -> QuoteResult:
        """
        Raises UnknownRoleError / UnknownProductLineError on config mismatches.
        """
        role_config = self.config.role(role)

        lines = []
        guardrails = {}
        warnings = []
        subtotal = Decimal('0')

        for item in items:
            pricing = self.engine.price_product(item.product, with_bundles=False)
            partner = self.resolver.partner_unit_net(
                uvp_net=pricing.uvp_net,
                floor_net=pricing.floor_net,
                full_cost=pricing.full_cost,
                role=role,
                qty=item.qty,
            )
            unit_net = quantize(partner.unit_net)
            line_net = unit_net * item.qty
            subtotal += line_net

            line = QuoteLine(
                sku=item.product.sku,
                qty=item.qty,
                unit_net=unit_net,
                line_net=line_net,
                uvp_inc_99_cents=pricing.uvp_inc_99_cents,
                role_discount_pct=partner.role_discount_pct,
                qty_discount_pct=partner.qty_discount_pct,
                price_basis=partner.basis,
            )
            line.add_trace("UVP Net", "Consumer price net of tax", f"€{pricing.uvp_net:.2f}")
            for name, amount in partner.candidates.items():
                line.add_trace("Candidate", name, f"€{amount:.2f}")
            line.add_trace("Unit Net", f"Maximum of candidates ({partner.basis})", f"€{unit_net:.2f}")
            line.add_trace("Extension", f"Quantity {item.qty} × €{unit_net:.2f}", f"€{line_net:.2f}")
            lines.append(line)

            guardrails[item.product.sku] = {c: g.price_cents for c, g in pricing.guardrails.items()}
            for warning in pricing.warnings:
                if warning not in warnings:
                    warnings.append(warning)

        order_pct = self.resolver.order_discount(subtotal)
        order_discount = quantize(subtotal * order_pct)
        after_discount = subtotal - order_discount

        vat = quantize(after_discount * D(self.config.vat)) if apply_tax else Decimal('0.00')
        shipping = quantize(D(shipping_eur))
        total = after_discount + vat + shipping

        if role_config.loyalty_eligible:
            points = int((after_discount * D(self.config.loyalty.points_per_euro))
                         .quantize(Decimal('1'), rounding=ROUND_HALF_UP))
        else:
            points = 0

        commissions = {}
        if role_config.commission_pct > 0:
            commissions[role] = quantize(after_discount * D(role_config.commission_pct))

        logger.info(
            "Quote for %s: %d lines, subtotal €%s, order discount %s%%, total %s",
            role, len(lines), subtotal, order_pct * 100, format_eur(to_cents(total)),
        )

        return QuoteResult(
            role=role,
            lines=lines,
            subtotal_net=subtotal,
            order_discount_pct=order_pct,
            order_discount_eur=order_discount,
            subtotal_net_after_discount=after_discount,
            vat_eur=vat,
            shipping_eur=shipping,
            total_gross=total,
            loyalty_points=points,
            commissions=commissions,
            guardrails=guardrails,
            warnings=warnings,
        )
