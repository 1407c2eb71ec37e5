from dataclasses import dataclass
from typing import Dict, Optional

from planogram_core.utils.constants import INCH_TO_PIXEL
from .dimensions import Dimensions, to_pixels


@dataclass
class PlacedComponent:
    """One product occupying space on one row of a section"""
    id: str
    product_id: str  # key into the external product catalog
    name: str
    brand: str
    dimensions: Dimensions
    facings: int = 1  # side-by-side repeats
    row_index: int = 0

    # Derived pixel position within the section, written by the placement engine
    x: float = 0.0
    y: float = 0.0

    image_url: Optional[str] = None

    def occupied_width(self, scale: float = INCH_TO_PIXEL) -> float:
        """Horizontal pixel span taken by all facings"""
        return self.facings * to_pixels(self.dimensions.width, scale)

    def pixel_height(self, scale: float = INCH_TO_PIXEL) -> float:
        return to_pixels(self.dimensions.height, scale)

    def span(self, scale: float = INCH_TO_PIXEL):
        """Half-open pixel span [x, x + occupied_width)"""
        return self.x, self.x + self.occupied_width(scale)

    def to_dict(self) -> Dict:
        data = {
            'id': self.id,
            'productId': self.product_id,
            'name': self.name,
            'brand': self.brand,
            'dimensions': self.dimensions.to_dict(),
            'facings': self.facings,
            'rowIndex': self.row_index,
            'x': self.x,
            'y': self.y,
        }
        if self.image_url is not None:
            data['imageUrl'] = self.image_url
        return data
