"""Placement engine: decides where a component may sit and computes its pixels.

Validation is a pure function of the section's current state and the requested
operation. A rejected call raises before anything is written, so the section is
left exactly as it was.
"""
from dataclasses import replace
from typing import List, Optional, Tuple

import numpy as np

from planogram_core.models.component import PlacedComponent
from planogram_core.models.dimensions import to_pixels, validate_dimensions
from planogram_core.models.fixture import Section
from planogram_core.utils.constants import (
    ENFORCE_SECTION_BOUNDS,
    INCH_TO_PIXEL,
    MIN_FACINGS,
    UNIT_TOLERANCE,
)
from planogram_core.utils.error_handler import (
    DimensionError,
    DimensionErrorKind,
    LayoutError,
    LayoutErrorKind,
    PlacementError,
    PlacementErrorKind,
)
from planogram_core.utils.logger import get_logger


class PlacementEngine:
    """Validates and positions placed components against a section's rows"""

    def __init__(self, scale: float = INCH_TO_PIXEL, enforce_bounds: bool = ENFORCE_SECTION_BOUNDS):
        if scale <= 0:
            raise ValueError(f"scale must be positive, got {scale}")
        self.scale = scale
        self.enforce_bounds = enforce_bounds
        self.logger = get_logger()

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def row_y(self, section: Section, row_index: int) -> float:
        """Pixel offset of a row's top edge within the section"""
        return to_pixels(section.row_top(row_index), self.scale)

    def occupied_width(self, component: PlacedComponent) -> float:
        return to_pixels(component.dimensions.width, self.scale) * component.facings

    def section_width(self, section: Section) -> float:
        return to_pixels(section.width, self.scale)

    def find_conflict(self, section: Section, row_index: int, x: float, width: float,
                      ignore_id: Optional[str] = None) -> Optional[PlacedComponent]:
        """Return the first component on the row whose span intersects [x, x + width).

        Spans that only touch at an edge do not intersect.
        """
        neighbors = [c for c in section.components_on_row(row_index) if c.id != ignore_id]
        if not neighbors:
            return None

        starts = np.array([c.x for c in neighbors], dtype=float)
        ends = starts + np.array([self.occupied_width(c) for c in neighbors], dtype=float)
        hits = np.flatnonzero((x < ends - UNIT_TOLERANCE) & (x + width > starts + UNIT_TOLERANCE))
        if hits.size:
            return neighbors[int(hits[0])]
        return None

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _check_facings(self, section: Section, component_id: str, facings) -> None:
        if isinstance(facings, bool) or not isinstance(facings, int) or facings < MIN_FACINGS:
            raise PlacementError(
                PlacementErrorKind.INVALID_FACINGS,
                f"Facings must be an integer >= {MIN_FACINGS}, got {facings!r}",
                section_id=section.id, component_id=component_id
            )

    def check_placement(self, section: Section, component: PlacedComponent, row_index: int,
                        x: float, ignore_id: Optional[str] = None) -> float:
        """Validate a placement without touching the section.

        Returns the occupied pixel width; raises PlacementError or
        DimensionError when the placement is not allowed.
        """
        # Row must exist
        if not section.has_row(row_index):
            raise PlacementError(
                PlacementErrorKind.INVALID_ROW,
                f"Row {row_index} does not exist in section {section.id} ({len(section.rows)} rows)",
                section_id=section.id, row_index=row_index, component_id=component.id
            )

        self._check_facings(section, component.id, component.facings)
        validate_dimensions(component.dimensions, component_id=component.id)

        # Product must fit under the shelf above
        row = section.rows[row_index]
        if component.dimensions.height > row.height + UNIT_TOLERANCE:
            raise PlacementError(
                PlacementErrorKind.COMPONENT_TOO_TALL,
                f"{component.name} is {component.dimensions.height}in tall but row {row_index} "
                f"is {row.height}in",
                section_id=section.id, row_index=row_index, component_id=component.id
            )

        width = self.occupied_width(component)

        # Horizontal span must be free
        conflict = self.find_conflict(section, row_index, x, width, ignore_id=ignore_id)
        if conflict is not None:
            raise PlacementError(
                PlacementErrorKind.OVERLAP,
                f"{component.name} at x={x} (width {width}px) overlaps {conflict.name} "
                f"at x={conflict.x} on row {row_index}",
                section_id=section.id, row_index=row_index, component_id=component.id,
                conflicting_component_id=conflict.id
            )

        # Span must stay inside the section
        if self.enforce_bounds:
            max_x = self.section_width(section)
            if x < -UNIT_TOLERANCE or x + width > max_x + UNIT_TOLERANCE:
                raise PlacementError(
                    PlacementErrorKind.OUT_OF_BOUNDS,
                    f"{component.name} span [{x}, {x + width}) leaves section {section.id} "
                    f"(width {max_x}px)",
                    section_id=section.id, row_index=row_index, component_id=component.id
                )

        return width

    def check_section(self, section: Section) -> None:
        """Validate the components a section already holds, as if placed one by one"""
        scratch = replace(section, components={})
        for component in section.components.values():
            self.check_placement(scratch, component, component.row_index, component.x)
            scratch.components[component.id] = component

    def _get_component(self, section: Section, component_id: str) -> PlacedComponent:
        component = section.components.get(component_id)
        if component is None:
            raise PlacementError(
                PlacementErrorKind.COMPONENT_NOT_FOUND,
                f"Component {component_id} not found in section {section.id}",
                section_id=section.id, component_id=component_id
            )
        return component

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def place(self, section: Section, component: PlacedComponent, row_index: int,
              desired_x: float) -> PlacedComponent:
        """Place a new component on a row at a horizontal pixel offset"""
        if component.id in section.components:
            raise PlacementError(
                PlacementErrorKind.DUPLICATE_COMPONENT,
                f"Component {component.id} is already placed in section {section.id}",
                section_id=section.id, component_id=component.id
            )
        self.check_placement(section, component, row_index, desired_x)

        placed = replace(
            component,
            row_index=row_index,
            x=float(desired_x),
            y=self.row_y(section, row_index)
        )
        section.components[placed.id] = placed
        self.logger.debug(f"Placed {placed.id} on row {row_index} of {section.id} at x={placed.x}")
        return placed

    def move_component(self, section: Section, component_id: str, new_row_index: int,
                       new_x: float) -> PlacedComponent:
        """Move a component; on rejection the original placement stays untouched"""
        component = self._get_component(section, component_id)
        self.check_placement(section, component, new_row_index, new_x, ignore_id=component_id)

        component.row_index = new_row_index
        component.x = float(new_x)
        component.y = self.row_y(section, new_row_index)
        self.logger.debug(f"Moved {component_id} to row {new_row_index} x={component.x}")
        return component

    def set_facings(self, section: Section, component_id: str, facings: int) -> PlacedComponent:
        """Change facings, keeping the old count if the wider span would overlap"""
        component = self._get_component(section, component_id)
        self._check_facings(section, component_id, facings)

        candidate = replace(component, facings=facings)
        self.check_placement(section, candidate, component.row_index, component.x, ignore_id=component_id)

        component.facings = facings
        self.logger.debug(f"Set facings of {component_id} to {facings}")
        return component

    def remove_component(self, section: Section, component_id: str) -> PlacedComponent:
        component = self._get_component(section, component_id)
        del section.components[component_id]
        self.logger.debug(f"Removed {component_id} from {section.id}")
        return component

    def recompute_row_offsets(self, section: Section):
        """Rewrite every component's y from its row; the only writer of y besides place/move"""
        for component in section.components.values():
            component.y = self.row_y(section, component.row_index)

    def resize_row(self, section: Section, row_index: int, height: float):
        """Change a row's height, rejecting the resize instead of reflowing components"""
        if not section.has_row(row_index):
            raise PlacementError(
                PlacementErrorKind.INVALID_ROW,
                f"Row {row_index} does not exist in section {section.id}",
                section_id=section.id, row_index=row_index
            )
        if height <= 0:
            raise DimensionError(
                DimensionErrorKind.NON_POSITIVE,
                f"Row height must be positive, got {height}",
                field='height', section_id=section.id, row_index=row_index
            )

        row = section.rows[row_index]
        if not section.fits(height - row.height):
            raise LayoutError(
                LayoutErrorKind.CAPACITY_EXCEEDED,
                f"Resizing row {row_index} to {height}in exceeds section {section.id} "
                f"({section.remaining_height:.2f}in left)",
                section_id=section.id, row_index=row_index
            )

        for component in section.components_on_row(row_index):
            if component.dimensions.height > height + UNIT_TOLERANCE:
                raise PlacementError(
                    PlacementErrorKind.COMPONENT_TOO_TALL,
                    f"{component.name} ({component.dimensions.height}in) would not fit "
                    f"under a {height}in row",
                    section_id=section.id, row_index=row_index, component_id=component.id
                )

        row.height = height
        self.recompute_row_offsets(section)
        return row

    def auto_arrange_row(self, section: Section, row_index: int) -> List[PlacedComponent]:
        """Pack a row's components flush from x=0, keeping their left-to-right order"""
        if not section.has_row(row_index):
            raise PlacementError(
                PlacementErrorKind.INVALID_ROW,
                f"Row {row_index} does not exist in section {section.id}",
                section_id=section.id, row_index=row_index
            )

        row_components = sorted(section.components_on_row(row_index), key=lambda c: (c.x, c.id))
        widths = np.array([self.occupied_width(c) for c in row_components], dtype=float)
        offsets = np.concatenate(([0.0], np.cumsum(widths)[:-1])) if row_components else widths

        total = float(widths.sum()) if row_components else 0.0
        if self.enforce_bounds and total > self.section_width(section) + UNIT_TOLERANCE:
            raise PlacementError(
                PlacementErrorKind.OUT_OF_BOUNDS,
                f"Row {row_index} needs {total}px but section {section.id} is "
                f"{self.section_width(section)}px wide",
                section_id=section.id, row_index=row_index
            )

        y = self.row_y(section, row_index)
        for component, offset in zip(row_components, offsets):
            component.x = float(offset)
            component.y = y
        return row_components

    # ------------------------------------------------------------------
    # Audit
    # ------------------------------------------------------------------

    def find_overlaps(self, section: Section) -> List[Tuple[int, str, str]]:
        """Every (row_index, id_a, id_b) pair whose spans intersect"""
        overlaps = []
        for row_index in sorted({c.row_index for c in section.components.values()}):
            row_components = section.components_on_row(row_index)
            if len(row_components) < 2:
                continue
            starts = np.array([c.x for c in row_components], dtype=float)
            ends = starts + np.array([self.occupied_width(c) for c in row_components], dtype=float)
            mask = (starts[:, None] < ends[None, :] - UNIT_TOLERANCE) & \
                   (ends[:, None] > starts[None, :] + UNIT_TOLERANCE)
            first, second = np.nonzero(np.triu(mask, k=1))
            for i, j in zip(first, second):
                overlaps.append((row_index, row_components[int(i)].id, row_components[int(j)].id))
        return overlaps
