"""Snap and capacity helpers for the interaction layer.

These only suggest coordinates; the placement engine stays the single place
that accepts a position and writes it into the section.
"""
from typing import Dict, List, Optional

from planogram_core.models.dimensions import to_pixels
from planogram_core.models.fixture import Section
from planogram_core.utils.constants import GRID_SIZE, INCH_TO_PIXEL, SNAP_THRESHOLD_PX


def snap_to_grid(value: float, grid_size: float = GRID_SIZE, scale: float = INCH_TO_PIXEL) -> float:
    """Round a pixel value to the nearest grid line"""
    grid_pixels = to_pixels(grid_size, scale)
    return round(value / grid_pixels) * grid_pixels


def row_boundaries(section: Section, scale: float = INCH_TO_PIXEL) -> List[Dict]:
    """Top and bottom pixel edge of each row, measured from the section top"""
    boundaries = []
    current_y = to_pixels(section.header_height + section.row_offset, scale)
    for index, row in enumerate(section.rows):
        row_height = to_pixels(row.height, scale)
        boundaries.append({'row_index': index, 'start': current_y, 'end': current_y + row_height})
        current_y += row_height
    return boundaries


def snap_to_shelf(section: Section, y: float, product_height: float,
                  scale: float = INCH_TO_PIXEL) -> Optional[int]:
    """Row a product dropped at pixel ``y`` belongs to, judged by its vertical center.

    Falls back to the first row when the center misses every row, and returns
    None for a section without rows.
    """
    boundaries = row_boundaries(section, scale)
    if not boundaries:
        return None

    center = y + to_pixels(product_height, scale) / 2
    for boundary in boundaries:
        if boundary['start'] <= center <= boundary['end']:
            return boundary['row_index']
    return 0


def snap_to_adjacent(section: Section, row_index: int, x: float, width: float,
                     threshold: float = SNAP_THRESHOLD_PX, exclude_id: Optional[str] = None,
                     scale: float = INCH_TO_PIXEL) -> float:
    """Magnetize ``x`` to the nearest neighbour edge on the same row.

    ``width`` is the occupied pixel width of the product being dragged.
    Returns ``x`` unchanged when no edge is within ``threshold`` pixels.
    """
    best_x = x
    min_distance = float('inf')

    for component in section.components_on_row(row_index):
        if component.id == exclude_id:
            continue
        component_width = component.occupied_width(scale)

        # Sit to the right of the neighbour
        right_edge = component.x + component_width
        distance = abs(x - right_edge)
        if distance < threshold and distance < min_distance:
            best_x, min_distance = right_edge, distance

        # Sit to the left of the neighbour
        left_edge = component.x - width
        distance = abs(x - left_edge)
        if distance < threshold and distance < min_distance:
            best_x, min_distance = left_edge, distance

    return best_x


def is_within_bounds(section: Section, x: float, y: float, width: float, height: float,
                     scale: float = INCH_TO_PIXEL) -> bool:
    """Whether a pixel box lies inside the section"""
    max_x = to_pixels(section.width, scale)
    max_y = to_pixels(section.height, scale)
    return x >= 0 and y >= 0 and x + width <= max_x and y + height <= max_y


def shelf_capacity(section: Section, row_index: int) -> Dict[str, float]:
    """Used and available width of a row, in inches"""
    used = sum(c.dimensions.width * c.facings for c in section.components_on_row(row_index))
    return {
        'used': used,
        'available': section.width - used,
        'percentage': (used / section.width) * 100 if section.width > 0 else 0.0,
    }
