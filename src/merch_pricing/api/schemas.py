"""
Request models for the pricing API.
"""
from typing import Optional

from pydantic import BaseModel, Field

from ..engine.models import ProductDescription, OrderLine


class ProductPayload(BaseModel):
    """Cost inputs for one product (mirrors ProductDescription)."""
    sku: str
    line: str
    factory_unit_manual: float = 0.0
    total_factory_carton: float = 0.0
    units_per_carton: int = 0
    shipping_inbound_per_unit: float = 0.0
    epr_fee: float = 0.0
    gs1_fee: float = 0.0
    retail_packaging: float = 0.0
    qc_pif: float = 0.0
    operations: float = 0.0
    marketing: float = 0.0
    net_content: Optional[float] = None
    net_content_unit: str = "ml"
    gift_sku_cost: float = 0.0
    gift_attach_rate: Optional[float] = None
    gift_funding_pct: Optional[float] = None
    gift_shipping_increment: float = 0.0
    box_size: Optional[str] = None
    amazon_tier_key: Optional[str] = None
    manual_uvp_inc: Optional[float] = None

    def to_product(self) -> ProductDescription:
        return ProductDescription(**self.model_dump())


class PriceRequest(BaseModel):
    product: ProductPayload
    with_bundles: bool = True


class QuoteItem(BaseModel):
    product: ProductPayload
    qty: int = Field(gt=0)


class QuoteRequest(BaseModel):
    role: str
    items: list[QuoteItem]
    shipping_eur: float = 0.0
    apply_tax: bool = True

    def order_lines(self) -> list[OrderLine]:
        return [OrderLine(product=item.product.to_product(), qty=item.qty) for item in self.items]


class CatalogReportRequest(BaseModel):
    products: list[ProductPayload]
    with_bundles: bool = True
