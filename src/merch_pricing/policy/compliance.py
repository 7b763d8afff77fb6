"""
Compliance checks for proposed prices.

- MAP: consumer prices must not undercut the minimum advertised price
  (the .99 UVP) by more than the allowed tolerance
- Margin floor: net prices must stay at or above the product floor
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal

from ..engine.models import PricingResult
from ..engine.money import D, from_cents, format_eur, to_cents

logger = logging.getLogger(__name__)


@dataclass
class ComplianceResult:
    passed: bool = True
    violations: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def fail(self, message: str):
        self.passed = False
        self.violations.append(message)


def check_map_compliance(result: PricingResult, advertised_inc, tolerance_pct=0) -> ComplianceResult:
    """Advertised consumer price (inc. VAT) vs the product's UVP."""
    check = ComplianceResult()
    advertised_cents = to_cents(advertised_inc)
    minimum = from_cents(result.uvp_inc_99_cents) * (Decimal('1') - D(tolerance_pct))
    minimum_cents = to_cents(minimum)

    if advertised_cents < minimum_cents:
        check.fail(
            f"{result.sku}: advertised {format_eur(advertised_cents)} below MAP {format_eur(minimum_cents)}"
        )
    elif advertised_cents < result.uvp_inc_99_cents:
        check.warnings.append(f"{result.sku}: advertised below UVP within tolerance")

    if not check.passed:
        logger.warning("MAP violation: %s", check.violations[-1])
    return check


def check_margin_floor(result: PricingResult, net_price) -> ComplianceResult:
    """Net selling price vs floor and full cost."""
    check = ComplianceResult()
    net = D(net_price)

    if net < result.full_cost:
        check.fail(f"{result.sku}: net €{net:.2f} below full cost €{result.full_cost:.2f}")
    elif net < result.floor_net:
        check.fail(f"{result.sku}: net €{net:.2f} below floor €{result.floor_net:.2f}")

    if result.needs_manual_review:
        check.warnings.append(f"{result.sku}: pricing flagged for manual review")

    if not check.passed:
        logger.warning("Margin floor violation: %s", check.violations[-1])
    return check
