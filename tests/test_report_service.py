import pandas as pd

from merch_pricing.engine.models import ProductDescription, AutotuneAction
from merch_pricing.services import price_catalog


def catalog():
    return [
        ProductDescription(sku="CHEAP", line="Basic", factory_unit_manual=0.80,
                           box_size="Small", amazon_tier_key="Std_Parcel_S"),
        ProductDescription(sku="STAND", line="Basic", factory_unit_manual=2.0, manual_uvp_inc=23.99),
        ProductDescription(sku="GHOST", line="Luxury", factory_unit_manual=1.0),
    ]


def test_errors_are_isolated_per_product(engine):
    report = price_catalog(engine, catalog())

    assert report.priced_count == 2
    assert list(report.errors) == ["GHOST"]
    assert "Luxury" in report.errors["GHOST"]


def test_tallies(engine):
    report = price_catalog(engine, catalog())
    summary = report.summary()

    assert summary["actions"] == {
        AutotuneAction.BUNDLE_RECOMMENDED.value: 1,
        AutotuneAction.OK.value: 1,
    }
    assert summary["bundles_needed"] == 1
    # The bundled product counts with its best bundle's coverage
    assert summary["channel_coverage"] == {"OwnStore": 2, "Amazon_FBM": 2, "Amazon_FBA": 2}
    assert summary["manual_review"] == []


def test_coverage_without_bundles(engine):
    report = price_catalog(engine, catalog(), with_bundles=False)
    assert report.channel_coverage == {"OwnStore": 1, "Amazon_FBM": 1, "Amazon_FBA": 1}


def test_export(engine, tmp_path):
    report = price_catalog(engine, catalog())
    df = report.to_dataframe()

    assert list(df["SKU"]) == ["CHEAP", "STAND", "GHOST"]
    assert df.loc[df["SKU"] == "CHEAP", "Bundle Units"].iloc[0] == 2
    assert df.loc[df["SKU"] == "GHOST", "Error"].notna().all()

    path = report.to_csv(tmp_path / "out" / "report.csv")
    assert len(pd.read_csv(path)) == 3
