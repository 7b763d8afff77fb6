"""
Catalog Service - loads product cost sheets into ProductDescriptions.

Cost sheets come from spreadsheets, so cells are normalized first:
- currency symbols and whitespace stripped
- a lone comma is a decimal point ("1,25" -> 1.25, "1,234" -> 1.234)
- with both separators the last one is the decimal point and the other
  is a thousands separator ("1.234,56" and "1,234.56" -> 1234.56)
- blank cells become 0 for costs and None for optional fields
Rows that still fail validation are collected in the load result.
"""
import logging
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import pandas as pd

from ..config.settings import get_settings
from ..engine.models import ProductDescription, InvalidProductError

logger = logging.getLogger(__name__)

# Spreadsheet headers seen in exports -> ProductDescription fields
COLUMN_ALIASES = {
    'SKU': 'sku',
    'Line': 'line',
    'Product Line': 'line',
    'Factory Unit': 'factory_unit_manual',
    'Factory Carton': 'total_factory_carton',
    'Units per Carton': 'units_per_carton',
    'Inbound Shipping': 'shipping_inbound_per_unit',
    'EPR': 'epr_fee',
    'GS1': 'gs1_fee',
    'Packaging': 'retail_packaging',
    'QC/PIF': 'qc_pif',
    'Operations': 'operations',
    'Marketing': 'marketing',
    'Net Content': 'net_content',
    'Unit': 'net_content_unit',
    'Gift Cost': 'gift_sku_cost',
    'Gift Attach Rate': 'gift_attach_rate',
    'Gift Funding': 'gift_funding_pct',
    'Gift Shipping': 'gift_shipping_increment',
    'Box Size': 'box_size',
    'Amazon Tier': 'amazon_tier_key',
    'Manual UVP': 'manual_uvp_inc',
}

PRODUCT_FIELDS = {f.name: f for f in fields(ProductDescription)}
TEXT_FIELDS = {'sku', 'line', 'net_content_unit', 'box_size', 'amazon_tier_key'}
INT_FIELDS = {'units_per_carton'}
OPTIONAL_NUMERIC_FIELDS = {'net_content', 'gift_attach_rate', 'gift_funding_pct', 'manual_uvp_inc'}

_NUMBER_JUNK = re.compile(r'[€$\s ]')


def parse_number(value) -> Optional[float]:
    """
    Spreadsheet cell -> float, or None when blank.

    Cost sheets use decimal commas, so a comma without a dot is never read
    as a thousands separator.
    """
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return None if pd.isna(value) else float(value)

    text = _NUMBER_JUNK.sub('', str(value))
    if not text or text.lower() in ('nan', 'none', '-'):
        return None
    if ',' in text and '.' in text:
        # 1.234,56 or 1,234.56: the last separator is the decimal point
        if text.rfind(',') > text.rfind('.'):
            text = text.replace('.', '').replace(',', '.')
        else:
            text = text.replace(',', '')
    else:
        text = text.replace(',', '.')
    return float(text)


def _clean_text(value) -> Optional[str]:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    text = str(value).strip()
    return text or None


@dataclass
class CatalogLoadResult:
    products: list[ProductDescription] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def normalize_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Rename known headers and drop columns no product field uses."""
    df = df.rename(columns={c: COLUMN_ALIASES.get(str(c).strip(), str(c).strip()) for c in df.columns})
    unknown = [c for c in df.columns if c not in PRODUCT_FIELDS]
    if unknown:
        logger.debug("Ignoring catalog columns: %s", ", ".join(unknown))
    return df[[c for c in df.columns if c in PRODUCT_FIELDS]]


def row_to_product(row: dict) -> ProductDescription:
    """Build a ProductDescription from a normalized row; raises InvalidProductError."""
    kwargs = {}
    for name, value in row.items():
        if name in TEXT_FIELDS:
            text = _clean_text(value)
            if text is not None:
                kwargs[name] = text
            continue

        try:
            number = parse_number(value)
        except ValueError as e:
            raise InvalidProductError(f"{name}: cannot parse {value!r}") from e

        if number is None:
            if name not in OPTIONAL_NUMERIC_FIELDS:
                kwargs[name] = 0 if name in INT_FIELDS else 0.0
            continue
        kwargs[name] = int(number) if name in INT_FIELDS else number

    if not kwargs.get('sku'):
        raise InvalidProductError("missing SKU")
    if not kwargs.get('line'):
        raise InvalidProductError(f"SKU {kwargs['sku']}: missing product line")
    if 'net_content_unit' in kwargs:
        kwargs['net_content_unit'] = kwargs['net_content_unit'].lower()

    return ProductDescription(**kwargs)


def products_from_frame(df: pd.DataFrame) -> CatalogLoadResult:
    result = CatalogLoadResult()
    df = normalize_frame(df)

    if 'sku' not in df.columns or 'line' not in df.columns:
        result.errors.append("Catalog must have SKU and Line columns")
        return result

    seen = set()
    for idx, row in enumerate(df.to_dict(orient="records"), start=2):
        # Blank lines at the end of spreadsheet exports
        if all(_clean_text(v) is None for v in row.values()):
            continue
        try:
            product = row_to_product(row)
        except InvalidProductError as e:
            result.errors.append(f"Row {idx}: {e}")
            continue
        if product.sku in seen:
            result.errors.append(f"Row {idx}: duplicate SKU {product.sku}")
            continue
        seen.add(product.sku)
        result.products.append(product)

    logger.info("Catalog: %d products loaded, %d rows rejected", len(result.products), len(result.errors))
    return result


def load_catalog(path: Optional[Path] = None) -> CatalogLoadResult:
    """
    Load a catalog CSV (default: settings.catalog_csv).

    Raises FileNotFoundError if the file is missing.
    """
    path = Path(path) if path else get_settings().catalog_csv
    if not path.exists():
        raise FileNotFoundError(f"Catalog not found at {path}.")

    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    return products_from_frame(df)
