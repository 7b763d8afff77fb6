from .catalog_service import CatalogLoadResult, load_catalog, products_from_frame
from .report_service import CatalogReport, price_catalog

__all__ = [
    'CatalogLoadResult',
    'load_catalog',
    'products_from_frame',
    'CatalogReport',
    'price_catalog',
]
