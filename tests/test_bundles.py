"""
Bundle search and ranking.
"""
import logging
from decimal import Decimal
from types import SimpleNamespace

import pytest

from merch_pricing.config import PricingConfig
from merch_pricing.config.model import BundlingConfig
from merch_pricing.engine import PricingEngine
from merch_pricing.engine.bundles import BundleOptimizer, candidate_sizes, rank_proposals
from merch_pricing.engine.models import ProductDescription, AutotuneAction


@pytest.fixture
def optimizer(config):
    return BundleOptimizer(config)


@pytest.fixture
def cheap_product():
    return ProductDescription(sku="CHEAP", line="Basic", factory_unit_manual=0.80,
                              box_size="Small", amazon_tier_key="Std_Parcel_S", net_content=50)


@pytest.mark.parametrize("bundling, expected", [
    (dict(min_units=2, max_units=6, prefer_even_units=True), [2, 4, 6]),
    (dict(min_units=2, max_units=5, prefer_even_units=True), [2, 4, 5]),
    (dict(min_units=2, max_units=6, prefer_even_units=False), [2, 3, 4, 5, 6]),
    (dict(min_units=3, max_units=3, prefer_even_units=True), [3]),
])
def test_candidate_sizes(bundling, expected):
    assert candidate_sizes(BundlingConfig(**bundling)) == expected


def test_rank_prefers_coverage_then_price_then_units():
    proposals = [
        SimpleNamespace(units=2, all_channels_covered=False, covered_count=2, proposed_price_cents=1499),
        SimpleNamespace(units=6, all_channels_covered=True, covered_count=3, proposed_price_cents=2999),
        SimpleNamespace(units=4, all_channels_covered=True, covered_count=3, proposed_price_cents=1999),
        SimpleNamespace(units=3, all_channels_covered=True, covered_count=3, proposed_price_cents=1999),
    ]
    assert [p.units for p in rank_proposals(proposals)] == [3, 4, 6, 2]


def test_ladder_price(optimizer):
    assert optimizer.ladder_price(1299) == 1499
    assert optimizer.ladder_price(1499) == 1499
    # Beyond the ladder: next whole euro
    assert optimizer.ladder_price(3050) == 3100


def test_scale_product(optimizer):
    product = ProductDescription(sku="P", line="Basic", factory_unit_manual=0.80, epr_fee=0.10,
                                 net_content=50, gift_sku_cost=2.0, gift_attach_rate=1.0,
                                 manual_uvp_inc=9.99, box_size="Small")
    bundle = optimizer.scale_product(product, 3)

    assert bundle.sku == "P-BUNDLE-3"
    assert bundle.factory_unit_manual == Decimal("2.40")
    assert bundle.epr_fee == Decimal("0.30")
    assert bundle.net_content == Decimal("150")
    assert bundle.gift_sku_cost == 0
    assert bundle.manual_uvp_inc is None
    assert bundle.box_size == "Medium"
    assert bundle.amazon_tier_key == "Std_Parcel_M"


def test_scale_product_uses_carton_cost(optimizer):
    product = ProductDescription(sku="C", line="Basic", total_factory_carton=12.0, units_per_carton=12)
    bundle = optimizer.scale_product(product, 2)

    assert bundle.factory_unit_manual == Decimal("2")
    assert bundle.total_factory_carton == 0


def test_cheap_product_is_bundled(engine, cheap_product):
    """Single unit: 2.99 / 3.99 / 8.99 guardrails vs 1.99 UVP; a 2-pack on the ladder covers all."""
    result = engine.price_product(cheap_product)

    assert result.autotune.action == AutotuneAction.BUNDLE_RECOMMENDED
    assert {c: g.price_cents for c, g in result.guardrails.items()} == {
        "OwnStore": 299, "Amazon_FBM": 399, "Amazon_FBA": 899,
    }

    # First size covers every channel, so the search stops there
    assert len(result.bundle_proposals) == 1
    best = result.best_bundle
    assert best.units == 2
    assert best.proposed_price_cents == 1499
    assert best.all_channels_covered
    assert {c: g.price_cents for c, g in best.guardrails.items()} == {
        "Amazon_FBA": 1299, "Amazon_FBM": 599, "OwnStore": 399,
    }
    assert best.single_unit_price_cents == 199
    assert best.margin_pct > 0
    assert best.total_net_content == Decimal("100")
    assert best.grundpreis == Decimal("149.90")


def test_no_full_coverage_keeps_searching_and_sorts(config_data, cheap_product, caplog):
    config_data["channels"]["Greedy"] = {"referral_pct": 0.40, "platform_pct": 0.30}
    config_data["bundling"]["channels_considered"].append("Greedy")
    optimizer = BundleOptimizer(PricingConfig.model_validate(config_data))

    with caplog.at_level(logging.WARNING):
        proposals = optimizer.optimize(cheap_product, 199, {})

    assert [p.units for p in proposals] == [2, 4, 6]
    assert [p.proposed_price_cents for p in proposals] == [1499, 1999, 2499]
    assert all(not p.all_channels_covered for p in proposals)
    assert all(p.covered_count == 3 for p in proposals)
    assert "no bundle size covers every channel" in caplog.text


def test_no_bundles_when_single_unit_covers(engine):
    product = ProductDescription(sku="OK", line="Basic", factory_unit_manual=2.0, manual_uvp_inc=29.99)
    assert engine.recommend_bundles(product) == []


def test_recommend_bundles_for_cheap_product(engine, cheap_product):
    proposals = engine.recommend_bundles(cheap_product)
    assert proposals and proposals[0].units == 2


def test_infeasible_channel_sends_covered_product_to_bundling(config_data):
    config_data["channels"]["Greedy"] = {"referral_pct": 0.40, "platform_pct": 0.30}
    config_data["bundling"]["channels_considered"].append("Greedy")
    engine = PricingEngine(PricingConfig.model_validate(config_data))
    product = ProductDescription(sku="OK", line="Basic", factory_unit_manual=2.0, manual_uvp_inc=29.99)

    result = engine.price_product(product)

    assert result.autotune.action == AutotuneAction.BUNDLE_RECOMMENDED
    assert result.autotune.needs_manual_review
    assert result.uvp_inc_99_cents == 2999
    assert result.bundle_proposals
    assert not result.best_bundle.all_channels_covered
    assert "Guardrail infeasible for Greedy: needs manual pricing review" in result.warnings
    assert "Infeasible channel" in result.get_trace_text()
