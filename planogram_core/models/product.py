from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .component import PlacedComponent
from .dimensions import Dimensions


@dataclass(frozen=True)
class ProductInfo:
    """Read-only catalog entry for a product.

    Products are owned by an external catalog; the layout core only keeps a
    name/brand cache on each placement.
    """
    product_id: str
    name: str
    brand: str
    dimensions: Dimensions
    category: str = ""
    image_url: Optional[str] = None


class ProductCatalog(ABC):
    """Product catalog lookup consumed by the placement side"""

    @abstractmethod
    def get(self, product_id: str) -> Optional[ProductInfo]:
        """Return the product or None if the catalog does not know it"""
        pass

    def __contains__(self, product_id: str) -> bool:
        return self.get(product_id) is not None


class InMemoryProductCatalog(ProductCatalog):
    """Catalog backed by a dictionary"""

    def __init__(self, products: Iterable[ProductInfo] = ()):
        self._products: Dict[str, ProductInfo] = {p.product_id: p for p in products}

    def get(self, product_id: str) -> Optional[ProductInfo]:
        return self._products.get(product_id)

    def all(self) -> List[ProductInfo]:
        return list(self._products.values())

    def __len__(self) -> int:
        return len(self._products)


def component_from_product(product: ProductInfo, component_id: str, facings: int = 1) -> PlacedComponent:
    """Build an unplaced component, caching name/brand from the catalog"""
    return PlacedComponent(
        id=component_id,
        product_id=product.product_id,
        name=product.name,
        brand=product.brand,
        dimensions=product.dimensions,
        facings=facings,
        image_url=product.image_url
    )
