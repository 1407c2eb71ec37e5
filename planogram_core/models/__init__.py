from .component import PlacedComponent
from .dimensions import Dimensions, to_inches, to_pixels, validate_dimensions
from .fixture import ComponentIndex, Fixture, Row, Section
from .planogram import Planogram, PlanogramStatus
from .product import InMemoryProductCatalog, ProductCatalog, ProductInfo, component_from_product

__all__ = [
    'Dimensions', 'to_pixels', 'to_inches', 'validate_dimensions',
    'PlacedComponent', 'Row', 'Section', 'Fixture', 'ComponentIndex',
    'Planogram', 'PlanogramStatus',
    'ProductInfo', 'ProductCatalog', 'InMemoryProductCatalog', 'component_from_product',
]
