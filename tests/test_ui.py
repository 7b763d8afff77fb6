"""
Streamlit UI smoke tests with the default shipped config.
"""
from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

from merch_pricing.config import get_pricing_config

APP_PATH = Path(__file__).parent.parent / 'src' / 'merch_pricing' / 'ui' / 'app_streamlit.py'


@pytest.fixture
def app():
    at = AppTest.from_file(str(APP_PATH), default_timeout=30)
    at.run()
    return at


def selectbox(at, label):
    return next(s for s in at.selectbox if s.label == label)


def test_app_renders_without_exception(app):
    assert not app.exception
    assert app.title[0].value == "Merch Pricing"


def test_size_tier_and_role_choices_come_from_config(app):
    config = get_pricing_config()

    tiers = selectbox(app, "Marketplace size tier").options
    assert set(config.amazon_size_tiers) <= set(tiers)
    assert selectbox(app, "Role").options == list(config.partner_roles)


def test_selecting_size_tier_and_role_reruns_cleanly(app):
    selectbox(app, "Marketplace size tier").set_value("Std_Parcel_M")
    selectbox(app, "Role").set_value("Distributor")
    app.run()

    assert not app.exception
