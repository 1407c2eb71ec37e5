from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from planogram_core.utils.constants import UNIT_TOLERANCE
from planogram_core.utils.error_handler import (
    DimensionError,
    DimensionErrorKind,
    LayoutError,
    LayoutErrorKind,
    PlacementError,
    PlacementErrorKind,
)
from .component import PlacedComponent


@dataclass
class Row:
    """A single shelf level; its ordinal is its index in Section.rows (0 = topmost)"""
    id: str
    height: float  # inches

    def to_dict(self) -> Dict:
        return {'id': self.id, 'height': self.height}


@dataclass
class Section:
    """A vertical slice of a fixture with its own shelf rows"""
    id: str
    name: str
    width: float  # inches
    height: float  # inches
    header_height: float = 0.0  # label band at the top
    row_offset: float = 0.0  # space before the first row
    rows: List[Row] = field(default_factory=list)
    components: Dict[str, PlacedComponent] = field(default_factory=dict)

    @property
    def used_height(self) -> float:
        return self.header_height + self.row_offset + sum(row.height for row in self.rows)

    @property
    def remaining_height(self) -> float:
        """Vertical inches still available for new rows"""
        return self.height - self.used_height

    def fits(self, extra_height: float = 0.0) -> bool:
        return self.used_height + extra_height <= self.height + UNIT_TOLERANCE

    def validate(self):
        """Raise if the section's own geometry is invalid"""
        for name in ('width', 'height'):
            value = getattr(self, name)
            if value <= 0:
                raise DimensionError(
                    DimensionErrorKind.NON_POSITIVE,
                    f"Section {self.id} {name} must be positive, got {value}",
                    field=name, section_id=self.id
                )
        for name in ('header_height', 'row_offset'):
            value = getattr(self, name)
            if value < 0:
                raise DimensionError(
                    DimensionErrorKind.NON_POSITIVE,
                    f"Section {self.id} {name} cannot be negative, got {value}",
                    field=name, section_id=self.id
                )
        seen_rows = set()
        for index, row in enumerate(self.rows):
            if row.height <= 0:
                raise DimensionError(
                    DimensionErrorKind.NON_POSITIVE,
                    f"Row {row.id} height must be positive, got {row.height}",
                    field='height', section_id=self.id, row_index=index
                )
            if row.id in seen_rows:
                raise LayoutError(
                    LayoutErrorKind.DUPLICATE_ID,
                    f"Row {row.id} appears twice in section {self.id}",
                    section_id=self.id, row_index=index
                )
            seen_rows.add(row.id)
        if not self.fits():
            raise LayoutError(
                LayoutErrorKind.CAPACITY_EXCEEDED,
                f"Section {self.id} needs {self.used_height:.2f}in but is {self.height:.2f}in tall",
                section_id=self.id
            )

    def row_top(self, row_index: int) -> float:
        """Inches from the top of the section to the top of a row"""
        return self.header_height + self.row_offset + sum(row.height for row in self.rows[:row_index])

    def has_row(self, row_index: int) -> bool:
        return 0 <= row_index < len(self.rows)

    def components_on_row(self, row_index: int) -> List[PlacedComponent]:
        return [c for c in self.components.values() if c.row_index == row_index]

    def add_row(self, row: Row):
        """Append a row at the bottom of the section"""
        if row.height <= 0:
            raise DimensionError(
                DimensionErrorKind.NON_POSITIVE,
                f"Row {row.id} height must be positive, got {row.height}",
                field='height', section_id=self.id, row_index=len(self.rows)
            )
        if any(existing.id == row.id for existing in self.rows):
            raise LayoutError(
                LayoutErrorKind.DUPLICATE_ID,
                f"Row {row.id} already exists in section {self.id}",
                section_id=self.id
            )
        if not self.fits(row.height):
            raise LayoutError(
                LayoutErrorKind.CAPACITY_EXCEEDED,
                f"Row {row.id} needs {row.height:.2f}in but section {self.id} "
                f"has {self.remaining_height:.2f}in left",
                section_id=self.id, row_index=len(self.rows)
            )
        self.rows.append(row)

    def remove_last_row(self) -> Row:
        """Remove the bottom row; refused while components still sit on it"""
        if not self.rows:
            raise LayoutError(
                LayoutErrorKind.NOT_FOUND,
                f"Section {self.id} has no rows",
                section_id=self.id
            )
        last_index = len(self.rows) - 1
        occupants = self.components_on_row(last_index)
        if occupants:
            raise LayoutError(
                LayoutErrorKind.ROW_OCCUPIED,
                f"Row {last_index} of section {self.id} still holds {len(occupants)} component(s)",
                section_id=self.id, row_index=last_index, component_id=occupants[0].id
            )
        return self.rows.pop()

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'name': self.name,
            'width': self.width,
            'height': self.height,
            'headerHeight': self.header_height,
            'rowOffset': self.row_offset,
            'rows': [row.to_dict() for row in self.rows],
            'components': [c.to_dict() for c in self.components.values()],
        }


@dataclass
class Fixture:
    """Top-level display unit; the unit of creation, save and deletion"""
    id: str
    name: str
    sections: Dict[str, Section] = field(default_factory=dict)

    # Authorship metadata
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def add_section(self, section: Section):
        """Append a section; later sections render after earlier ones"""
        if section.id in self.sections:
            raise LayoutError(
                LayoutErrorKind.DUPLICATE_ID,
                f"Section {section.id} already exists in fixture {self.id}",
                section_id=section.id
            )
        section.validate()
        for component in section.components.values():
            if not section.has_row(component.row_index):
                raise PlacementError(
                    PlacementErrorKind.INVALID_ROW,
                    f"Component {component.id} sits on row {component.row_index} but section "
                    f"{section.id} has {len(section.rows)} rows",
                    section_id=section.id, row_index=component.row_index, component_id=component.id
                )
            owner = self._section_holding(component.id)
            if owner is not None:
                raise PlacementError(
                    PlacementErrorKind.DUPLICATE_COMPONENT,
                    f"Component {component.id} is already placed in section {owner}",
                    section_id=owner, component_id=component.id
                )
        self.sections[section.id] = section

    def _section_holding(self, component_id: str) -> Optional[str]:
        for section in self.sections.values():
            if component_id in section.components:
                return section.id
        return None

    def remove_section(self, section_id: str) -> Section:
        """Remove a section together with its rows and components"""
        if section_id not in self.sections:
            raise LayoutError(
                LayoutErrorKind.NOT_FOUND,
                f"Section {section_id} not found in fixture {self.id}",
                section_id=section_id
            )
        return self.sections.pop(section_id)

    def get_section(self, section_id: str) -> Section:
        section = self.sections.get(section_id)
        if section is None:
            raise LayoutError(
                LayoutErrorKind.NOT_FOUND,
                f"Section {section_id} not found in fixture {self.id}",
                section_id=section_id
            )
        return section

    def owns(self, section: Section) -> bool:
        return self.sections.get(section.id) is section

    @property
    def section_list(self) -> List[Section]:
        return list(self.sections.values())

    @property
    def component_count(self) -> int:
        return sum(len(s.components) for s in self.sections.values())


class ComponentIndex:
    """Reverse lookup from component id to the section that holds it.

    Built from the fixture tree on demand instead of storing back-references,
    so removing a section or component can never leave a dangling pointer.
    """

    def __init__(self, fixture: Fixture):
        self.fixture = fixture
        self._section_by_component: Dict[str, str] = {}
        self.rebuild()

    def rebuild(self):
        self._section_by_component = {
            component_id: section.id
            for section in self.fixture.sections.values()
            for component_id in section.components
        }

    def section_id_for(self, component_id: str) -> Optional[str]:
        return self._section_by_component.get(component_id)

    def section_for(self, component_id: str) -> Optional[Section]:
        section_id = self.section_id_for(component_id)
        return self.fixture.sections.get(section_id) if section_id else None

    def __contains__(self, component_id: str) -> bool:
        return component_id in self._section_by_component

    def __len__(self) -> int:
        return len(self._section_by_component)
