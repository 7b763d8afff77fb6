import logging

from fastapi import FastAPI, Depends, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config.exceptions import ConfigurationError
from ..engine.models import InvalidProductError
from ..engine.pricing_engine import PricingEngine
from ..policy.quote_builder import QuoteBuilder
from .catalog_api import router as catalog_router
from .schemas import PriceRequest, ProductPayload, QuoteRequest
from .state import get_engine

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Merch Pricing API",
    description="Consumer pricing, channel guardrails, bundles and partner quotes",
    version=__version__,
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(catalog_router)


def _bad_request(e: Exception) -> HTTPException:
    logger.info("Rejected request: %s", e)
    return HTTPException(status_code=400, detail=str(e))


@app.get("/")
async def root():
    return {"status": "online", "message": "Merch Pricing API Active", "version": __version__}


@app.post("/price")
async def price_product(req: PriceRequest, engine: PricingEngine = Depends(get_engine)):
    try:
        result = engine.price_product(req.product.to_product(), with_bundles=req.with_bundles)
    except (ConfigurationError, InvalidProductError) as e:
        raise _bad_request(e)

    payload = jsonable_encoder(result)
    payload["trace_text"] = result.get_trace_text()
    payload["needs_manual_review"] = result.needs_manual_review
    return payload


@app.post("/bundles")
async def recommend_bundles(product: ProductPayload, engine: PricingEngine = Depends(get_engine)):
    try:
        proposals = engine.recommend_bundles(product.to_product())
    except (ConfigurationError, InvalidProductError) as e:
        raise _bad_request(e)
    return {"sku": product.sku, "proposals": jsonable_encoder(proposals)}


@app.post("/quote")
async def build_quote(req: QuoteRequest, engine: PricingEngine = Depends(get_engine)):
    try:
        quote = QuoteBuilder(engine).build(
            req.order_lines(),
            role=req.role,
            shipping_eur=req.shipping_eur,
            apply_tax=req.apply_tax,
        )
    except (ConfigurationError, InvalidProductError) as e:
        raise _bad_request(e)
    return jsonable_encoder(quote)
