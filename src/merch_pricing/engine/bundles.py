"""
Bundle Optimizer - multi-unit packs for products whose single-unit price
cannot clear the channel guardrails.

Tries N units in [min_units, max_units], scales the per-unit costs by N,
prices the pack on the ladder and stops at the first N that covers every
channel. Fixed per-shipment costs (box, fulfillment fees, label) are spread
across N units, which is what makes larger packs viable.
"""
import logging
from dataclasses import replace
from decimal import Decimal
from typing import Iterable, Mapping, Optional

from ..config.model import PricingConfig, BundlingConfig
from .costs import CostCalculator
from .guardrails import GuardrailSolver
from .models import ProductDescription, BundleProposal, Guardrail, ADDITIVE_COST_FIELDS
from .money import D, ONE, HUNDRED, to_cents, from_cents, ceil_to_unit, grundpreis, format_eur
from .uvp import UVPCalculator

logger = logging.getLogger(__name__)

# (max units, classification); larger bundles fall through to the last entry
BOX_SIZE_BY_UNITS = ((2, 'Small'), (4, 'Medium'), (None, 'Large'))
SIZE_TIER_BY_UNITS = ((2, 'Std_Parcel_S'), (4, 'Std_Parcel_M'), (None, 'Std_Parcel_L'))


def _classify(units: int, table) -> str:
    for max_units, key in table:
        if max_units is None or units <= max_units:
            return key
    return table[-1][1]


def candidate_sizes(bundling: BundlingConfig) -> list[int]:
    """Bundle sizes to try, in order. Odd sizes are skipped when even sizes
    are preferred, except max_units so at least one candidate exists."""
    sizes = []
    for units in range(bundling.min_units, bundling.max_units + 1):
        if bundling.prefer_even_units and units % 2 == 1 and units < bundling.max_units:
            continue
        sizes.append(units)
    return sizes


def rank_proposals(proposals: Iterable) -> list:
    """Full coverage first, then more channels, lower price, fewer units."""
    return sorted(
        proposals,
        key=lambda p: (
            not p.all_channels_covered,
            -p.covered_count,
            p.proposed_price_cents,
            p.units,
        ),
    )


class BundleOptimizer:

    def __init__(
        self,
        config: PricingConfig,
        cost_calculator: Optional[CostCalculator] = None,
        uvp_calculator: Optional[UVPCalculator] = None,
        solver: Optional[GuardrailSolver] = None,
    ):
        self.config = config
        self.bundling = config.bundling
        self.costs = cost_calculator or CostCalculator(config)
        self.uvp = uvp_calculator or UVPCalculator(config)
        self.solver = solver or GuardrailSolver(config)
        self.vat_factor = ONE + D(config.vat)
        self.ladder_cents = [to_cents(p) for p in self.bundling.price_ladder_inc]

    def scale_product(self, product: ProductDescription, units: int) -> ProductDescription:
        """A bundle of N units as one sellable product."""
        scaled = {name: D(getattr(product, name)) * units for name in ADDITIVE_COST_FIELDS}
        return replace(
            product,
            sku=f"{product.sku}-BUNDLE-{units}",
            factory_unit_manual=self.costs.base_factory_unit(product) * units,
            total_factory_carton=0.0,
            units_per_carton=0,
            # At most one gift per bundle
            gift_sku_cost=0.0,
            gift_attach_rate=0.0,
            manual_uvp_inc=None,
            box_size=_classify(units, BOX_SIZE_BY_UNITS),
            amazon_tier_key=_classify(units, SIZE_TIER_BY_UNITS),
            net_content=(D(product.net_content) * units) if product.net_content else None,
            **scaled,
        )

    def ladder_price(self, max_guardrail_cents: int) -> int:
        """Smallest ladder price clearing the guardrail, else its whole-unit ceiling."""
        for price in self.ladder_cents:
            if price >= max_guardrail_cents:
                return price
        return ceil_to_unit(max_guardrail_cents)

    def evaluate(
        self,
        product: ProductDescription,
        units: int,
        single_unit_price_cents: int,
        single_unit_guardrails: Mapping[str, Guardrail],
    ) -> BundleProposal:
        _, line_config = self.config.line(product.line)
        bundle = self.scale_product(product, units)

        costs = self.costs.compute(bundle, line_config.floor_mult)
        uvp = self.uvp.compute(bundle, costs)
        guardrails = {
            channel: self.solver.solve(channel, costs, bundle.line, uvp.uvp_inc, bundle.amazon_tier_key)
            for channel in self.bundling.channels_considered
        }

        max_guardrail = max((g.price_cents for g in guardrails.values() if g.feasible), default=0)
        proposed = self.ladder_price(max_guardrail)
        coverage = {channel: g.covers(proposed) for channel, g in guardrails.items()}

        bundle_cost = costs.full_cost + costs.box_cost_per_unit + costs.gift_cost_expected
        if bundle_cost > 0:
            margin_pct = (from_cents(proposed) / self.vat_factor - bundle_cost) / bundle_cost * HUNDRED
        else:
            margin_pct = Decimal('0')

        gp, gp_unit = grundpreis(proposed, bundle.net_content, product.net_content_unit)

        return BundleProposal(
            base_sku=product.sku,
            units=units,
            proposed_price_cents=proposed,
            guardrails=guardrails,
            coverage=coverage,
            all_channels_covered=all(coverage.values()),
            full_cost_bundle=costs.full_cost,
            full_cost_unit=costs.full_cost / units,
            box_cost_bundle=costs.box_cost_per_unit,
            box_cost_unit=costs.box_cost_per_unit / units,
            margin_pct=margin_pct,
            single_unit_price_cents=single_unit_price_cents,
            single_unit_guardrails=dict(single_unit_guardrails),
            total_net_content=bundle.net_content,
            grundpreis=gp,
            grundpreis_unit=gp_unit,
        )

    def optimize(
        self,
        product: ProductDescription,
        single_unit_price_cents: int,
        single_unit_guardrails: Mapping[str, Guardrail],
    ) -> list[BundleProposal]:
        """Evaluate bundle sizes until one covers every channel; best first."""
        proposals = []
        for units in candidate_sizes(self.bundling):
            proposal = self.evaluate(product, units, single_unit_price_cents, single_unit_guardrails)
            proposals.append(proposal)
            logger.debug(
                "SKU %s x%d: %s covers %d/%d channels",
                product.sku, units, format_eur(proposal.proposed_price_cents),
                proposal.covered_count, len(proposal.coverage),
            )
            if proposal.all_channels_covered:
                break

        ranked = rank_proposals(proposals)
        if ranked and not ranked[0].all_channels_covered:
            logger.warning("SKU %s: no bundle size covers every channel", product.sku)
        return ranked
