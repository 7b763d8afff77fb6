"""
Catalog API - FastAPI router for configuration and catalog reports.
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder

from ..engine.models import InvalidProductError
from ..engine.pricing_engine import PricingEngine
from ..services.catalog_service import load_catalog
from ..services.report_service import price_catalog
from .schemas import CatalogReportRequest
from .state import get_engine

router = APIRouter(tags=["catalog"])


@router.get("/config")
async def get_config(engine: PricingEngine = Depends(get_engine)):
    return engine.config.model_dump(mode="json")


@router.post("/catalog/report")
async def catalog_report(req: CatalogReportRequest, engine: PricingEngine = Depends(get_engine)):
    try:
        products = [p.to_product() for p in req.products]
    except InvalidProductError as e:
        raise HTTPException(status_code=400, detail=str(e))

    report = price_catalog(engine, products, with_bundles=req.with_bundles)
    return {
        "summary": report.summary(),
        "errors": report.errors,
        "rows": jsonable_encoder([r.to_summary_dict() for r in report.results]),
    }


@router.get("/catalog/report")
async def default_catalog_report(engine: PricingEngine = Depends(get_engine)):
    """Price the configured catalog CSV."""
    try:
        loaded = load_catalog()
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    report = price_catalog(engine, loaded.products)
    return {
        "summary": report.summary(),
        "errors": report.errors,
        "rejected_rows": loaded.errors,
        "rows": jsonable_encoder([r.to_summary_dict() for r in report.results]),
    }
