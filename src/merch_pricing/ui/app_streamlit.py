"""
Streamlit UI for the merch pricing engine.

Features:
- Single product pricing with channel guardrails and trace
- Bundle proposals when autotune recommends bundling
- Partner quote builder
- Catalog CSV report with export
"""
import streamlit as st
import pandas as pd
import sys
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from merch_pricing.config import get_pricing_config, ConfigurationError
from merch_pricing.config.logging_setup import setup_logging
from merch_pricing.config.settings import get_settings
from merch_pricing.engine import PricingEngine
from merch_pricing.engine.models import ProductDescription, OrderLine, InvalidProductError
from merch_pricing.engine.money import format_eur
from merch_pricing.policy import QuoteBuilder
from merch_pricing.services import products_from_frame, price_catalog


st.set_page_config(
    page_title="Merch Pricing",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_engine():
    """Get cached engine instance."""
    setup_logging(get_settings().log_level)
    return PricingEngine(get_pricing_config())


try:
    engine = get_engine()
    config = engine.config
except (ConfigurationError, FileNotFoundError) as e:
    st.error(f"System Error: {e}")
    st.stop()


# ============================================================================
# SIDEBAR: Product inputs
# ============================================================================
with st.sidebar:
    st.header("📦 Product")

    sku = st.text_input("SKU", value="SKU-001")
    line = st.selectbox("Product Line", list(config.product_lines.keys()))
    factory_unit = st.number_input("Factory unit cost (€)", min_value=0.0, value=1.50, step=0.05)

    with st.expander("Per-unit costs"):
        shipping_inbound = st.number_input("Inbound shipping", min_value=0.0, value=0.10, step=0.01)
        packaging = st.number_input("Retail packaging", min_value=0.0, value=0.20, step=0.01)
        epr = st.number_input("EPR fee", min_value=0.0, value=0.02, step=0.01)
        operations = st.number_input("Operations", min_value=0.0, value=0.15, step=0.01)
        marketing = st.number_input("Marketing", min_value=0.0, value=0.0, step=0.01)

    with st.expander("Pack & fulfilment"):
        net_content = st.number_input("Net content", min_value=0.0, value=50.0, step=5.0)
        unit = st.radio("Unit", ["ml", "g"], horizontal=True)
        box_size = st.selectbox("Box size", [None] + list(config.box_costs.keys()))
        tier_key = st.selectbox("Marketplace size tier", [None] + list(config.amazon_size_tiers.keys()))

    manual = st.number_input("Manual UVP inc. VAT (0 = none)", min_value=0.0, value=0.0, step=1.0)

try:
    product = ProductDescription(
        sku=sku,
        line=line,
        factory_unit_manual=factory_unit,
        shipping_inbound_per_unit=shipping_inbound,
        retail_packaging=packaging,
        epr_fee=epr,
        operations=operations,
        marketing=marketing,
        net_content=net_content or None,
        net_content_unit=unit,
        box_size=box_size,
        amazon_tier_key=tier_key,
        manual_uvp_inc=manual or None,
    )
except InvalidProductError as e:
    st.error(str(e))
    st.stop()


st.title("Merch Pricing")

tab_price, tab_quote, tab_catalog = st.tabs(["💶 Pricing", "🧾 Partner Quote", "📋 Catalog Report"])

# ============================================================================
# TAB 1: Pricing
# ============================================================================
with tab_price:
    result = engine.price_product(product)

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Full cost", f"€{result.full_cost:.2f}")
    c2.metric("Floor net", f"€{result.floor_net:.2f}")
    c3.metric("UVP inc. VAT", format_eur(result.uvp_inc_99_cents))
    c4.metric("Autotune", result.autotune.action.value)

    if result.grundpreis is not None:
        st.caption(f"Grundpreis: €{result.grundpreis:.2f} / {result.grundpreis_unit}")

    for warning in result.warnings:
        st.warning(warning)

    st.subheader("Channel guardrails")
    st.dataframe(pd.DataFrame([
        {
            "Channel": channel,
            "Guardrail": g.label(),
            "Referral %": float(g.referral_pct) if g.referral_pct is not None else None,
            "Min fee": g.min_referral_fee_applied,
            "Iterations": g.iterations,
            "Converged": g.converged,
            "Covered": g.covers(result.uvp_inc_99_cents),
        }
        for channel, g in result.guardrails.items()
    ]), use_container_width=True, hide_index=True)

    if result.bundle_proposals:
        st.subheader("Bundle proposals")
        st.dataframe(pd.DataFrame([
            {
                "Units": b.units,
                "Price": format_eur(b.proposed_price_cents),
                "All covered": b.all_channels_covered,
                "Covered": b.covered_count,
                "Margin %": float(b.margin_pct),
                "Grundpreis": float(b.grundpreis) if b.grundpreis is not None else None,
            }
            for b in result.bundle_proposals
        ]), use_container_width=True, hide_index=True)

    with st.expander("🔍 Calculation trace"):
        st.text(result.get_trace_text())

# ============================================================================
# TAB 2: Partner quote
# ============================================================================
with tab_quote:
    col_role, col_qty, col_ship = st.columns(3)
    role = col_role.selectbox("Role", list(config.partner_roles.keys()))
    qty = col_qty.number_input("Quantity", min_value=1, value=12, step=1)
    shipping = col_ship.number_input("Shipping (€)", min_value=0.0, value=0.0, step=1.0)
    apply_tax = st.checkbox("Apply VAT", value=True)

    quote = QuoteBuilder(engine).build(
        [OrderLine(product=product, qty=int(qty))], role=role, shipping_eur=shipping, apply_tax=apply_tax,
    )
    quote_line = quote.lines[0]

    q1, q2, q3 = st.columns(3)
    q1.metric("Unit net", f"€{quote_line.unit_net:.2f}", help=f"Set by: {quote_line.price_basis}")
    q2.metric("Subtotal net", f"€{quote.subtotal_net_after_discount:.2f}",
              delta=f"-€{quote.order_discount_eur:.2f}" if quote.order_discount_eur else None)
    q3.metric("Total gross", f"€{quote.total_gross:.2f}")

    st.caption(f"Loyalty points: {quote.loyalty_points} · Commission: €{quote.commission_eur:.2f}")
    with st.expander("🔍 Line trace"):
        for t in quote_line.trace:
            st.caption(f"**{t.step}**: {t.description} = `{t.value}`" if t.value else f"**{t.step}**: {t.description}")

# ============================================================================
# TAB 3: Catalog report
# ============================================================================
with tab_catalog:
    uploaded = st.file_uploader("Catalog CSV", type=["csv"])
    if uploaded is not None:
        loaded = products_from_frame(pd.read_csv(uploaded, dtype=str, keep_default_na=False))
        for error in loaded.errors:
            st.warning(error)

        report = price_catalog(engine, loaded.products)
        summary = report.summary()

        m1, m2, m3 = st.columns(3)
        m1.metric("Priced", summary["priced"])
        m2.metric("Failed", summary["failed"])
        m3.metric("Bundles needed", summary["bundles_needed"])

        st.bar_chart(pd.Series(summary["channel_coverage"], name="Covered SKUs"))

        df = report.to_dataframe()
        st.dataframe(df, use_container_width=True, hide_index=True)
        st.download_button(
            "Download CSV",
            df.to_csv(index=False).encode("utf-8"),
            file_name="pricing_report.csv",
            mime="text/csv",
        )
