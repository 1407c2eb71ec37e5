"""Physical size primitives and the inch/pixel transform.

Every conversion between physical inches and rendering pixels goes through
``to_pixels``/``to_inches`` so the two units can never drift apart.
"""
from dataclasses import dataclass
from typing import Dict

from planogram_core.utils.constants import INCH_TO_PIXEL, UNIT_TOLERANCE
from planogram_core.utils.error_handler import DimensionError, DimensionErrorKind


def _check_scale(scale: float):
    if scale <= 0:
        raise ValueError(f"scale must be positive, got {scale}")


def to_pixels(inches: float, scale: float = INCH_TO_PIXEL) -> float:
    """Convert inches to pixels at ``scale`` pixels per inch"""
    _check_scale(scale)
    return inches * scale


def to_inches(pixels: float, scale: float = INCH_TO_PIXEL) -> float:
    """Convert pixels back to inches at ``scale`` pixels per inch"""
    _check_scale(scale)
    return pixels / scale


def units_equal(a: float, b: float, tolerance: float = UNIT_TOLERANCE) -> bool:
    return abs(a - b) <= tolerance


@dataclass(frozen=True)
class Dimensions:
    """Width, height and depth of a product in inches"""
    width: float
    height: float
    depth: float

    def to_dict(self) -> Dict[str, float]:
        return {'width': self.width, 'height': self.height, 'depth': self.depth}

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> 'Dimensions':
        return cls(
            width=float(data['width']),
            height=float(data['height']),
            depth=float(data['depth'])
        )

    def pixel_size(self, scale: float = INCH_TO_PIXEL) -> Dict[str, float]:
        """Front-facing size in pixels"""
        return {'width': to_pixels(self.width, scale), 'height': to_pixels(self.height, scale)}


def validate_dimensions(d: Dimensions, component_id: str = None) -> None:
    """Raise DimensionError if any of width/height/depth is not positive"""
    for field_name in ('width', 'height', 'depth'):
        value = getattr(d, field_name)
        if value <= 0:
            raise DimensionError(
                DimensionErrorKind.NON_POSITIVE,
                f"{field_name} must be positive, got {value}",
                field=field_name,
                component_id=component_id
            )
