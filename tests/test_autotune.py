from decimal import Decimal

import pytest

from merch_pricing.engine.autotune import AutotuneAdvisor
from merch_pricing.engine.models import Guardrail, GuardrailStatus, AutotuneAction


def computed(channel, cents):
    return Guardrail(channel=channel, status=GuardrailStatus.COMPUTED, price_cents=cents)


@pytest.fixture
def advisor(config):
    return AutotuneAdvisor(config)


def test_uvp_clearing_all_guardrails_is_ok(advisor):
    outcome = advisor.advise(2099, {"A": computed("A", 1999), "B": computed("B", 2099)})

    assert outcome.action == AutotuneAction.OK
    assert outcome.uvp_inc_99_cents == 2099
    assert outcome.max_guardrail_cents == 2099
    assert not outcome.bundle_needed


def test_increase_of_exactly_the_cap_raises_uvp(advisor):
    outcome = advisor.advise(1600, {"A": computed("A", 2000)})

    assert outcome.action == AutotuneAction.RAISE_UVP
    assert outcome.uvp_inc_99_cents == 2099
    assert outcome.original_uvp_inc_99_cents == 1600


def test_gap_above_cap_recommends_bundle(advisor):
    outcome = advisor.advise(1000, {"A": computed("A", 1300)})

    assert outcome.action == AutotuneAction.BUNDLE_RECOMMENDED
    assert outcome.bundle_needed
    assert outcome.uvp_inc_99_cents == 1000
    assert outcome.pct_increase == Decimal("30")


def test_infeasible_channel_forces_bundling_and_review(advisor):
    guardrails = {
        "A": computed("A", 1500),
        "B": Guardrail.infeasible("B", "no headroom"),
    }
    outcome = advisor.advise(1599, guardrails)

    assert outcome.action == AutotuneAction.BUNDLE_RECOMMENDED
    assert outcome.uvp_inc_99_cents == 1599
    assert outcome.max_guardrail_cents == 1500
    assert outcome.pct_increase is None
    assert outcome.needs_manual_review


def test_infeasible_channel_with_gap_reports_increase(advisor):
    outcome = advisor.advise(999, {"A": computed("A", 500), "C": computed("C", 1199),
                                   "B": Guardrail.infeasible("B", "no headroom")})

    assert outcome.action == AutotuneAction.BUNDLE_RECOMMENDED
    assert outcome.uvp_inc_99_cents == 999
    assert outcome.max_guardrail_cents == 1199
    assert outcome.pct_increase.quantize(Decimal("0.01")) == Decimal("20.02")
    assert outcome.needs_manual_review


def test_all_guardrails_infeasible(advisor):
    outcome = advisor.advise(999, {"B": Guardrail.infeasible("B", "no headroom")})

    assert outcome.action == AutotuneAction.BUNDLE_RECOMMENDED
    assert outcome.max_guardrail_cents is None
    assert outcome.needs_manual_review


def test_raised_uvp_covers_every_guardrail(advisor):
    guardrails = {"A": computed("A", 1799), "B": computed("B", 1650)}
    outcome = advisor.advise(1499, guardrails)

    assert outcome.action == AutotuneAction.RAISE_UVP
    assert all(g.covers(outcome.uvp_inc_99_cents) for g in guardrails.values())
