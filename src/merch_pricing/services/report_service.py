"""
Report Service - prices a whole catalog and aggregates the results.

Each product is priced independently; a configuration or product error
on one SKU is recorded and the run continues.
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from ..config.exceptions import ConfigurationError
from ..engine.models import ProductDescription, PricingResult, InvalidProductError, AutotuneAction
from ..engine.pricing_engine import PricingEngine

logger = logging.getLogger(__name__)


@dataclass
class CatalogReport:
    results: list[PricingResult] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)
    actions: Counter = field(default_factory=Counter)
    channel_coverage: dict[str, int] = field(default_factory=dict)
    manual_review: list[str] = field(default_factory=list)

    @property
    def priced_count(self) -> int:
        return len(self.results)

    @property
    def bundles_needed(self) -> int:
        return self.actions[AutotuneAction.BUNDLE_RECOMMENDED.value]

    def summary(self) -> dict:
        return {
            "priced": self.priced_count,
            "failed": len(self.errors),
            "actions": dict(self.actions),
            "bundles_needed": self.bundles_needed,
            "channel_coverage": dict(self.channel_coverage),
            "manual_review": list(self.manual_review),
        }

    def to_dataframe(self) -> pd.DataFrame:
        rows = [r.to_summary_dict() for r in self.results]
        rows += [{"SKU": sku, "Error": msg} for sku, msg in self.errors.items()]
        return pd.DataFrame(rows)

    def to_csv(self, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.to_dataframe().to_csv(path, index=False)
        logger.info("Wrote pricing report (%d rows) to %s", self.priced_count + len(self.errors), path)
        return path


def _covered_channels(result: PricingResult) -> dict[str, bool]:
    """Per-channel coverage, using the best bundle when one was proposed."""
    best = result.best_bundle
    if best is not None:
        return dict(best.coverage)
    return {c: g.covers(result.uvp_inc_99_cents) for c, g in result.guardrails.items()}


def price_catalog(
    engine: PricingEngine,
    products: Iterable[ProductDescription],
    with_bundles: bool = True,
    report: Optional[CatalogReport] = None,
) -> CatalogReport:
    report = report or CatalogReport()
    report.channel_coverage = {c: report.channel_coverage.get(c, 0) for c in engine.channels}

    for product in products:
        try:
            result = engine.price_product(product, with_bundles=with_bundles)
        except (ConfigurationError, InvalidProductError) as e:
            logger.warning("Skipping SKU %s: %s", product.sku, e)
            report.errors[product.sku] = str(e)
            continue

        report.results.append(result)
        report.actions[result.autotune.action.value] += 1
        for channel, covered in _covered_channels(result).items():
            if covered:
                report.channel_coverage[channel] = report.channel_coverage.get(channel, 0) + 1
        if result.needs_manual_review:
            report.manual_review.append(product.sku)

    logger.info(
        "Priced %d products (%d failed, %d need bundling)",
        report.priced_count, len(report.errors), report.bundles_needed,
    )
    return report
