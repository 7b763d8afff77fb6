"""
Pricing Engine - product pricing pipeline with traceability.

Pipeline:
1. CostCalculator: factory cost (+FX buffer), full cost, floor, gift and box costs
2. UVPCalculator: target-margin or manual consumer price, .99 rounding
3. GuardrailSolver: minimum consumer price per channel
4. AutotuneAdvisor: OK / RAISE_UVP / BUNDLE_RECOMMENDED
5. BundleOptimizer: multi-unit proposals when bundling is recommended

The engine holds only the (immutable) configuration, so one instance can
serve concurrent callers.
"""
import logging

from ..config.model import PricingConfig
from .autotune import AutotuneAdvisor
from .bundles import BundleOptimizer
from .costs import CostCalculator
from .guardrails import GuardrailSolver
from .models import ProductDescription, PricingResult, BundleProposal, AutotuneAction, PriceFloorFlag
from .money import D, ONE, from_cents, grundpreis, format_eur
from .uvp import UVPCalculator

logger = logging.getLogger(__name__)


class PricingEngine:
    """
    Core pricing engine for a configured market.

    Usage:
        engine = PricingEngine(load_pricing_config(path))
        result = engine.price_product(product)
    """

    def __init__(self, config: PricingConfig):
        self.config = config
        self.costs = CostCalculator(config)
        self.uvp = UVPCalculator(config)
        self.solver = GuardrailSolver(config)
        self.autotune = AutotuneAdvisor(config)
        self.bundles = BundleOptimizer(config, self.costs, self.uvp, self.solver)
        self.vat_factor = ONE + D(config.vat)

    @classmethod
    def from_default_config(cls) -> 'PricingEngine':
        from ..config.loader import get_pricing_config
        return cls(get_pricing_config())

    @property
    def channels(self) -> list[str]:
        return list(self.config.channels.keys())

    def price_product(self, product: ProductDescription, with_bundles: bool = True) -> PricingResult:
        """
        Price a single unit.

        Raises UnknownProductLineError if the product line is not configured.
        Infeasible or non-converged guardrails are reported as warnings.
        """
        line, line_config = self.config.line(product.line)

        costs = self.costs.compute(product, line_config.floor_mult)
        uvp = self.uvp.compute(product, costs)
        guardrails = {
            channel: self.solver.solve(channel, costs, line, uvp.uvp_inc, product.amazon_tier_key)
            for channel in self.channels
        }
        outcome = self.autotune.advise(uvp.uvp_inc_99_cents, guardrails)

        final_cents = outcome.uvp_inc_99_cents
        gp, gp_unit = grundpreis(final_cents, product.net_content, product.net_content_unit)

        result = PricingResult(
            sku=product.sku,
            line=line,
            factory_unit=costs.factory_unit,
            factory_unit_final=costs.factory_unit_final,
            full_cost=costs.full_cost,
            floor_net=costs.floor_net,
            uvp_net=from_cents(final_cents) / self.vat_factor,
            uvp_inc=uvp.uvp_inc,
            uvp_inc_99_cents=final_cents,
            price_vs_floor=uvp.price_vs_floor,
            gift_cost_expected=costs.gift_cost_expected,
            box_cost_per_unit=costs.box_cost_per_unit,
            guardrails=guardrails,
            autotune=outcome,
            ad_pct=D(line_config.ad_pct),
            target_margin=D(line_config.gm_uvp),
            grundpreis=gp,
            grundpreis_unit=gp_unit,
        )

        result.add_trace("Line", "Resolved product line", line)
        result.add_trace("Full Cost", "Factory (+FX buffer) plus per-unit costs", f"€{costs.full_cost:.4f}")
        result.add_trace("Floor", f"Full cost × {line_config.floor_mult}", f"€{costs.floor_net:.4f}")
        source = "manual override" if uvp.manual_override else f"target margin {line_config.gm_uvp:.0%}"
        result.add_trace("UVP", f"Consumer price from {source}", format_eur(uvp.uvp_inc_99_cents))

        for channel, guardrail in guardrails.items():
            result.add_trace("Guardrail", channel, guardrail.label())
            if not guardrail.feasible:
                result.add_warning(f"Guardrail infeasible for {channel}: needs manual pricing review")
            elif not guardrail.converged:
                kind = "diverging" if guardrail.diverging else "not converged"
                result.add_warning(f"Guardrail for {channel} {kind} after {guardrail.iterations} iterations")

        if uvp.price_vs_floor == PriceFloorFlag.RAISE_NEEDED:
            result.add_warning(f"UVP net below floor for SKU {product.sku}")

        if outcome.action == AutotuneAction.RAISE_UVP:
            result.add_trace(
                "Autotune", f"UVP raised by {outcome.pct_increase:.1f}%",
                f"{format_eur(outcome.original_uvp_inc_99_cents)} → {format_eur(final_cents)}",
            )
        elif outcome.action == AutotuneAction.BUNDLE_RECOMMENDED:
            reason = ("Infeasible channel, bundling and manual review recommended"
                      if outcome.needs_manual_review else "Gap exceeds raise cap, bundling recommended")
            result.add_trace("Autotune", reason,
                             f"{outcome.pct_increase:.1f}%" if outcome.pct_increase is not None else None)
            if with_bundles:
                result.bundle_proposals = self.bundles.optimize(product, final_cents, guardrails)
                best = result.best_bundle
                if best:
                    result.add_trace("Bundle", f"Best bundle {best.units} units",
                                     format_eur(best.proposed_price_cents))
        else:
            result.add_trace("Autotune", "UVP clears all guardrails")

        return result

    def recommend_bundles(self, product: ProductDescription) -> list[BundleProposal]:
        """Bundle proposals for a product; empty when a single unit clears every channel."""
        single = self.price_product(product, with_bundles=False)
        if all(g.covers(single.uvp_inc_99_cents) for g in single.guardrails.values()):
            return []
        return self.bundles.optimize(product, single.uvp_inc_99_cents, single.guardrails)
