from .engine import PlacementEngine
from .snapping import (
    is_within_bounds,
    row_boundaries,
    shelf_capacity,
    snap_to_adjacent,
    snap_to_grid,
    snap_to_shelf,
)

__all__ = [
    'PlacementEngine', 'snap_to_grid', 'row_boundaries', 'snap_to_shelf',
    'snap_to_adjacent', 'is_within_bounds', 'shelf_capacity',
]
