"""
Config loading and validation.
"""
import json
import threading

import pytest
from pydantic import ValidationError

from merch_pricing.config import (
    ConfigurationError,
    PricingConfig,
    UnknownProductLineError,
    UnknownRoleError,
    load_pricing_config,
    get_pricing_config,
    normalize_line_name,
)
from merch_pricing.config.loader import reset_pricing_config
from merch_pricing.config.settings import DEFAULT_PRICING_CONFIG, Settings


def write_config(tmp_path, data):
    path = tmp_path / "pricing.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_default_config_loads():
    config = load_pricing_config(DEFAULT_PRICING_CONFIG)

    assert config.vat == pytest.approx(0.19)
    assert set(config.bundling.channels_considered) <= set(config.channels)
    assert config.line("pro")[0] == "Professional"
    assert config.role("Distributor").qty_discount_exempt


def test_config_round_trips_through_file(tmp_path, config_data):
    config = load_pricing_config(write_config(tmp_path, config_data))
    assert config == PricingConfig.model_validate(config_data)


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_pricing_config(tmp_path / "nope.json")


@pytest.mark.parametrize("mutate", [
    lambda d: d.update(vat=1.5),
    lambda d: d["bundling"].update(price_ladder_inc=[19.99, 14.99]),
    lambda d: d["bundling"].update(min_units=5, max_units=3),
    lambda d: d["bundling"].update(channels_considered=["Nowhere"]),
    lambda d: d["quantity_discounts"].append({"min": 10, "max": 5, "pct": 0.1}),
    lambda d: d["channels"]["Amazon_FBM"].update(
        tiered_referral=[{"max_inc": 20.0, "pct": 0.1}, {"max_inc": 10.0, "pct": 0.2}]),
    lambda d: d.update(unexpected_key=True),
])
def test_invalid_config_rejected(tmp_path, config_data, mutate):
    mutate(config_data)
    with pytest.raises(ConfigurationError):
        load_pricing_config(write_config(tmp_path, config_data))


def test_model_is_frozen(config):
    with pytest.raises(ValidationError):
        config.vat = 0.07


def test_duplicate_lines_after_normalization(config_data):
    config_data["product_lines"]["BASIC"] = config_data["product_lines"]["Basic"]
    with pytest.raises(ValidationError):
        PricingConfig.model_validate(config_data)


@pytest.mark.parametrize("raw, expected", [
    ("premium", "Premium"),
    ("  BASIC ", "Basic"),
    ("Pro", "Professional"),
    ("", ""),
    (None, ""),
])
def test_normalize_line_name(raw, expected):
    assert normalize_line_name(raw) == expected


def test_lookup_errors(config):
    with pytest.raises(UnknownProductLineError):
        config.line("Luxury")
    with pytest.raises(UnknownRoleError):
        config.role("Nobody")


def test_size_tier_fees(config):
    assert config.size_tier_fees("Std_Parcel_S") == pytest.approx(3.00)
    assert config.size_tier_fees(None) == 0.0
    assert config.size_tier_fees("Oversize") == 0.0


def test_loyalty_cost(config):
    assert config.loyalty.cost_pct == pytest.approx(0.005)


def test_settings_from_environment(monkeypatch, tmp_path):
    override = tmp_path / "custom.json"
    monkeypatch.setenv("MERCH_PRICING_CONFIG", str(override))
    monkeypatch.setenv("MERCH_PRICING_LOG_LEVEL", "debug")

    settings = Settings.load(project_root=tmp_path)

    assert settings.pricing_config == override
    assert settings.catalog_csv == tmp_path / "data" / "catalog.csv"
    assert settings.log_level == "DEBUG"


def test_settings_defaults(monkeypatch, tmp_path):
    monkeypatch.delenv("MERCH_PRICING_CONFIG", raising=False)
    assert Settings.load(project_root=tmp_path).pricing_config == DEFAULT_PRICING_CONFIG


def test_shared_config_loaded_once():
    reset_pricing_config()
    results = []

    def load():
        results.append(get_pricing_config())

    threads = [threading.Thread(target=load) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 8
    assert all(r is results[0] for r in results)
    reset_pricing_config()
