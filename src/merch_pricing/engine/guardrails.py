"""
Guardrail Solver - minimum consumer price per sales channel.

Guardrail net price = fixed costs / (1 - variable cost rate - target margin)

Channels with price-tiered referral fees make the referral rate depend on
the guardrail itself. Those are solved by fixed-point iteration seeded with
the current UVP, capped at MAX_ITERATIONS.
"""
import logging
from decimal import Decimal
from typing import Optional

from ..config.model import PricingConfig, ChannelConfig
from .models import CostBreakdown, Guardrail, GuardrailStatus
from .money import CENT, D, ONE, from_cents, to_cents, round_consumer, format_eur

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 5
MIN_DENOMINATOR = Decimal('0.01')


class GuardrailSolver:
    """Computes channel guardrails; infeasible channels yield a tagged result."""

    def __init__(self, config: PricingConfig):
        self.config = config
        self.vat_factor = ONE + D(config.vat)
        self.ending_cents = to_cents(config.consumer_round_to)
        self.target_margin = D(config.target_post_channel_margin)

    def referral_pct_for(self, channel: ChannelConfig, price_inc: Decimal) -> Decimal:
        """First tier whose threshold is >= price, else the open-ended tier."""
        price_inc = D(price_inc)
        for tier in channel.tiered_referral:
            if tier.max_inc is None or price_inc <= D(tier.max_inc):
                return D(tier.pct)
        return D(channel.referral_pct)

    def fixed_costs(self, channel: ChannelConfig, costs: CostBreakdown, tier_key: Optional[str]) -> Decimal:
        fixed = costs.full_cost + costs.box_cost_per_unit + costs.gift_cost_expected + D(channel.label_fee)
        if channel.marketplace_fulfillment:
            fixed += D(self.config.size_tier_fees(tier_key))
        return fixed

    def base_variable_rate(self, channel: ChannelConfig, line: str, tier_key: Optional[str] = None) -> Decimal:
        """Variable cost share excluding the referral fee."""
        line_key, line_config = self.config.line(line)
        ad_pct = channel.ad_pct_override.get(line_key, line_config.ad_pct)

        rate = D(ad_pct) + D(channel.platform_pct)
        if channel.apply_payment_fee:
            rate += D(self.config.payment_fee_pct)
        if channel.apply_return_costs:
            rate += D(self.config.returns_pct) + D(self.config.loyalty.cost_pct)
        if channel.marketplace_fulfillment:
            tier = self.config.size_tier(tier_key)
            if tier is not None:
                rate += D(tier.returns_pct)
        return rate

    def solve(
        self,
        channel_key: str,
        costs: CostBreakdown,
        line: str,
        seed_inc: Decimal,
        tier_key: Optional[str] = None,
    ) -> Guardrail:
        """
        Guardrail for one channel.

        seed_inc is the unrounded tax-inclusive UVP; it only matters for
        channels with tiered referral fees.
        """
        channel = self.config.channel(channel_key)
        fixed = self.fixed_costs(channel, costs, tier_key)
        base_rate = self.base_variable_rate(channel, line, tier_key)

        if channel.is_tiered:
            return self._solve_tiered(channel_key, channel, fixed, base_rate, seed_inc)

        referral_pct = D(channel.referral_pct)
        price_cents, min_fee_applied = self._price_for(channel, fixed, base_rate, referral_pct)
        if price_cents is None:
            return self._infeasible(channel_key, base_rate + referral_pct)

        return Guardrail(
            channel=channel_key,
            status=GuardrailStatus.COMPUTED,
            price_cents=price_cents,
            referral_pct=referral_pct,
            min_referral_fee_applied=min_fee_applied,
        )

    def _price_for(
        self,
        channel: ChannelConfig,
        fixed: Decimal,
        base_rate: Decimal,
        referral_pct: Decimal,
    ) -> tuple[Optional[int], bool]:
        """One guardrail evaluation; (None, False) when infeasible."""
        denominator = ONE - base_rate - referral_pct - self.target_margin
        if denominator <= MIN_DENOMINATOR:
            return None, False

        min_net = fixed / denominator
        min_fee_applied = False

        # Below the minimum referral fee the fee is a fixed charge, not a share
        if channel.min_referral_fee and referral_pct > 0:
            min_fee = D(channel.min_referral_fee)
            if referral_pct * min_net < min_fee:
                min_net = (fixed + min_fee) / (ONE - base_rate - self.target_margin)
                min_fee_applied = True

        return round_consumer(min_net * self.vat_factor, self.ending_cents), min_fee_applied

    def _solve_tiered(
        self,
        channel_key: str,
        channel: ChannelConfig,
        fixed: Decimal,
        base_rate: Decimal,
        seed_inc: Decimal,
    ) -> Guardrail:
        # Unrounded seed, so a seed of 10.004 lands above a 10.00 tier threshold
        guess = D(seed_inc)
        history: list[int] = []
        referral_pct = self.referral_pct_for(channel, guess)
        min_fee_applied = False

        for iteration in range(1, MAX_ITERATIONS + 1):
            referral_pct = self.referral_pct_for(channel, guess)
            price_cents, min_fee_applied = self._price_for(channel, fixed, base_rate, referral_pct)
            if price_cents is None:
                return self._infeasible(channel_key, base_rate + referral_pct, iteration)

            history.append(price_cents)
            if abs(from_cents(price_cents) - guess) < CENT:
                return Guardrail(
                    channel=channel_key,
                    status=GuardrailStatus.COMPUTED,
                    price_cents=price_cents,
                    referral_pct=referral_pct,
                    min_referral_fee_applied=min_fee_applied,
                    iterations=iteration,
                )
            guess = from_cents(price_cents)

        iterates = [D(seed_inc)] + [from_cents(c) for c in history]
        deltas = [abs(b - a) for a, b in zip(iterates, iterates[1:])]
        diverging = any(later >= earlier for earlier, later in zip(deltas, deltas[1:]))

        logger.warning(
            "Tiered referral guardrail for %s did not converge in %d iterations "
            "(iterates: %s)%s; using last value %s",
            channel_key, MAX_ITERATIONS,
            ", ".join(format_eur(c) for c in history),
            " and is diverging" if diverging else "",
            format_eur(history[-1]),
        )
        return Guardrail(
            channel=channel_key,
            status=GuardrailStatus.COMPUTED,
            price_cents=history[-1],
            referral_pct=referral_pct,
            min_referral_fee_applied=min_fee_applied,
            iterations=MAX_ITERATIONS,
            converged=False,
            diverging=diverging,
        )

    def _infeasible(self, channel_key: str, variable_rate: Decimal, iterations: int = 1) -> Guardrail:
        reason = (
            f"variable costs {variable_rate * 100:.1f}% + target margin "
            f"{self.target_margin * 100:.1f}% leave no price headroom"
        )
        logger.warning("Infeasible guardrail for channel %s: %s", channel_key, reason)
        return Guardrail.infeasible(channel_key, reason, iterations)
