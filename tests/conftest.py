import sys
import os

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from merch_pricing.config.model import PricingConfig
from merch_pricing.engine import PricingEngine


def base_config_data() -> dict:
    """
    Small config with round numbers so expected prices can be worked by hand.

    OwnStore (Basic line): variable rate = ad .05 + payment .03 + returns .02
    + loyalty .005 = .105; with target margin .30 the denominator is .595,
    so guardrail inc = fixed * 1.19 / .595 = 2 * fixed.
    Marketplaces: variable rate .075 plus the tiered referral fee.
    """
    return {
        "version": "test",
        "vat": 0.19,
        "fx_buffer_pct": 0.0,
        "target_post_channel_margin": 0.30,
        "returns_pct": 0.02,
        "payment_fee_pct": 0.03,
        "consumer_round_to": 0.99,
        "loyalty": {"points_per_euro": 1, "point_value_eur": 0.01, "expected_redemption": 0.5},
        "product_lines": {
            "Basic": {"gm_uvp": 0.48, "ad_pct": 0.05, "floor_mult": 2.2},
            "Premium": {"gm_uvp": 0.60, "ad_pct": 0.10, "floor_mult": 2.6},
        },
        "partner_roles": {
            "Retail Customer": {"discount": 0.0, "cap": 0.0},
            "Stand Program": {"discount": 0.20, "cap": 0.30, "min_eur": 0.50,
                              "commission_pct": 0.05, "loyalty_eligible": False},
            "Dealer Basic": {"discount": 0.30, "cap": 0.40, "min_eur": 0.50},
            "Distributor": {"discount": 0.45, "cap": 0.60, "min_eur": 0.50,
                            "qty_discount_exempt": True, "loyalty_eligible": False},
        },
        "quantity_discounts": [
            {"min": 1, "max": 9, "pct": 0.0},
            {"min": 10, "max": 24, "pct": 0.05},
            {"min": 25, "max": 99999, "pct": 0.08},
        ],
        "order_discounts": [
            {"min_subtotal_net": 500, "pct": 0.02},
            {"min_subtotal_net": 1000, "pct": 0.04},
        ],
        "channels": {
            "OwnStore": {"apply_payment_fee": True, "apply_return_costs": True},
            "Amazon_FBM": {
                "referral_pct": 0.15, "label_fee": 0.50, "min_referral_fee": 0.30,
                "tiered_referral": [{"max_inc": 10.0, "pct": 0.08}, {"max_inc": None, "pct": 0.15}],
                "apply_return_costs": True,
            },
            "Amazon_FBA": {
                "referral_pct": 0.15, "label_fee": 0.0, "min_referral_fee": 0.30,
                "tiered_referral": [{"max_inc": 10.0, "pct": 0.08}, {"max_inc": None, "pct": 0.15}],
                "apply_return_costs": True, "marketplace_fulfillment": True,
            },
        },
        "amazon_size_tiers": {
            "Std_Parcel_S": {"pick_pack": 3.00},
            "Std_Parcel_M": {"pick_pack": 3.50},
            "Std_Parcel_L": {"pick_pack": 4.50},
        },
        "box_costs": {"Small": 0.40, "Medium": 0.60, "Large": 0.80},
        "avg_units_per_order": {"B2C": 2, "B2B": 10},
        "bundling": {
            "autotune_raise_cap": 0.25,
            "min_units": 2,
            "max_units": 6,
            "prefer_even_units": True,
            "price_ladder_inc": [14.99, 19.99, 24.99, 29.99],
            "channels_considered": ["Amazon_FBA", "Amazon_FBM", "OwnStore"],
        },
    }


@pytest.fixture
def config_data():
    return base_config_data()


@pytest.fixture
def config():
    return PricingConfig.model_validate(base_config_data())


@pytest.fixture
def engine(config):
    return PricingEngine(config)
