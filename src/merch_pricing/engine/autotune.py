"""
Autotune Advisor - closes small gaps between UVP and the channel guardrails.

Three terminal states:
- OK: the UVP already clears every guardrail
- RAISE_UVP: the required increase is within the raise cap; the UVP is
  raised to the max guardrail's .99 value
- BUNDLE_RECOMMENDED: the gap is larger than the cap; the UVP is left
  unchanged and bundling must be evaluated. Also returned whenever a
  channel is infeasible: the UVP cannot be shown to clear it, so the
  product goes to bundling and manual review.
"""
from decimal import Decimal
from typing import Mapping

from ..config.model import PricingConfig
from .models import Guardrail, AutotuneOutcome, AutotuneAction
from .money import D, ONE, HUNDRED, to_cents


class AutotuneAdvisor:

    def __init__(self, config: PricingConfig):
        self.raise_cap = D(config.bundling.autotune_raise_cap)
        self.ending_cents = to_cents(config.consumer_round_to)

    def advise(self, uvp_inc_99_cents: int, guardrails: Mapping[str, Guardrail]) -> AutotuneOutcome:
        feasible = [g.price_cents for g in guardrails.values() if g.feasible]
        needs_review = len(feasible) < len(guardrails)
        max_guardrail = max(feasible, default=0)

        if needs_review:
            pct = None
            if max_guardrail > uvp_inc_99_cents > 0:
                pct = (Decimal(max_guardrail) / Decimal(uvp_inc_99_cents) - ONE) * HUNDRED
            return AutotuneOutcome(
                action=AutotuneAction.BUNDLE_RECOMMENDED,
                uvp_inc_99_cents=uvp_inc_99_cents,
                original_uvp_inc_99_cents=uvp_inc_99_cents,
                pct_increase=pct,
                max_guardrail_cents=max_guardrail or None,
                needs_manual_review=True,
            )

        if uvp_inc_99_cents >= max_guardrail:
            return AutotuneOutcome(
                action=AutotuneAction.OK,
                uvp_inc_99_cents=uvp_inc_99_cents,
                max_guardrail_cents=max_guardrail or None,
            )

        if uvp_inc_99_cents <= 0:
            return AutotuneOutcome(
                action=AutotuneAction.BUNDLE_RECOMMENDED,
                uvp_inc_99_cents=uvp_inc_99_cents,
                original_uvp_inc_99_cents=uvp_inc_99_cents,
                max_guardrail_cents=max_guardrail,
                needs_manual_review=True,
            )

        needed = Decimal(max_guardrail) / Decimal(uvp_inc_99_cents) - ONE

        if needed <= self.raise_cap:
            raised = (max_guardrail // 100) * 100 + self.ending_cents
            return AutotuneOutcome(
                action=AutotuneAction.RAISE_UVP,
                uvp_inc_99_cents=raised,
                original_uvp_inc_99_cents=uvp_inc_99_cents,
                pct_increase=(Decimal(raised) / Decimal(uvp_inc_99_cents) - ONE) * HUNDRED,
                max_guardrail_cents=max_guardrail,
            )

        return AutotuneOutcome(
            action=AutotuneAction.BUNDLE_RECOMMENDED,
            uvp_inc_99_cents=uvp_inc_99_cents,
            original_uvp_inc_99_cents=uvp_inc_99_cents,
            pct_increase=needed * HUNDRED,
            max_guardrail_cents=max_guardrail,
        )
