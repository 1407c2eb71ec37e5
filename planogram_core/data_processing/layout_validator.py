from datetime import datetime
from typing import List, Optional, Tuple

from planogram_core.models.dimensions import units_equal
from planogram_core.models.fixture import Fixture, Section
from planogram_core.models.planogram import Planogram
from planogram_core.models.product import ProductCatalog
from planogram_core.placement.engine import PlacementEngine
from planogram_core.utils.constants import UNIT_TOLERANCE
from planogram_core.utils.error_handler import ValidationError


class LayoutValidator:
    """Audit a whole layout tree against the layout invariants"""

    def __init__(self, engine: Optional[PlacementEngine] = None):
        self.engine = engine or PlacementEngine()
        self.warnings = []
        self.errors = []

    def _reset(self):
        self.warnings = []
        self.errors = []

    def validate_planogram(self, planogram: Planogram) -> Tuple[bool, List[str]]:
        """Validate a planogram and return (is_valid, issues)"""
        self._reset()

        if not planogram.name:
            self.warnings.append(f"Planogram {planogram.id} has no name")

        if len(set(planogram.store_assignments)) != len(planogram.store_assignments):
            self.warnings.append(f"Planogram {planogram.id} lists a store more than once")

        self._validate_fixture(planogram.fixture)

        all_issues = self.errors + self.warnings
        return len(self.errors) == 0, all_issues

    def validate_fixture(self, fixture: Fixture) -> Tuple[bool, List[str]]:
        """Validate a fixture tree and return (is_valid, issues)"""
        self._reset()
        self._validate_fixture(fixture)
        return len(self.errors) == 0, self.errors + self.warnings

    def _validate_fixture(self, fixture: Fixture):
        if not fixture.sections:
            self.warnings.append(f"Fixture {fixture.name} has no sections")

        # Component ids must be unique across the whole fixture
        seen = {}
        for section in fixture.sections.values():
            for component_id in section.components:
                if component_id in seen:
                    self.errors.append(
                        f"Component {component_id} appears in sections {seen[component_id]} and {section.id}"
                    )
                seen[component_id] = section.id

        for section in fixture.sections.values():
            self._validate_section(section)

    def _validate_section(self, section: Section):
        """Validate one section and everything placed in it"""
        try:
            section.validate()
        except ValidationError as e:
            self.errors.append(f"Section {section.name}: {e}")

        for index, row in enumerate(section.rows):
            if row.height <= 0:
                self.errors.append(f"Section {section.name}: row {index} has invalid height ({row.height})")

        if not section.rows:
            self.warnings.append(f"Section {section.name} has no rows")

        for component in section.components.values():
            self._validate_component(section, component)

        for row_index, first, second in self.engine.find_overlaps(section):
            self.errors.append(f"Section {section.name}: {first} and {second} overlap on row {row_index}")

    def _validate_component(self, section: Section, component):
        label = f"Section {section.name}: {component.name} ({component.id})"
        dims = component.dimensions

        if dims.width <= 0 or dims.height <= 0 or dims.depth <= 0:
            self.errors.append(f"{label}: Invalid dimensions")
        if component.facings < 1:
            self.errors.append(f"{label}: Facings must be at least 1 ({component.facings})")

        if not section.has_row(component.row_index):
            self.errors.append(f"{label}: Row {component.row_index} does not exist")
            return

        row = section.rows[component.row_index]
        if dims.height > row.height + UNIT_TOLERANCE:
            self.errors.append(f"{label}: Taller than row {component.row_index} ({dims.height}in > {row.height}in)")

        left, right = component.x, component.x + self.engine.occupied_width(component)
        if left < -UNIT_TOLERANCE or right > self.engine.section_width(section) + UNIT_TOLERANCE:
            message = f"{label}: Extends outside the section ({left:.1f}px to {right:.1f}px)"
            if self.engine.enforce_bounds:
                self.errors.append(message)
            else:
                self.warnings.append(message)

        # Stored y should match the row it sits on
        if not units_equal(component.y, self.engine.row_y(section, component.row_index)):
            self.warnings.append(f"{label}: Stored y ({component.y}) is stale for row {component.row_index}")

    def validate_against_catalog(self, planogram: Planogram, catalog: ProductCatalog) -> Tuple[bool, List[str]]:
        """Check that placed products exist in the catalog and match its dimensions"""
        self._reset()
        for section in planogram.fixture.sections.values():
            for component in section.components.values():
                product = catalog.get(component.product_id)
                if product is None:
                    self.errors.append(f"{component.name}: Unknown product {component.product_id}")
                    continue
                if product.dimensions != component.dimensions:
                    self.warnings.append(f"{component.name}: Dimensions differ from catalog")
                if product.name != component.name or product.brand != component.brand:
                    self.warnings.append(f"{component.name}: Cached name/brand differ from catalog")
        return len(self.errors) == 0, self.errors + self.warnings

    def generate_validation_report(self) -> str:
        """Generate a comprehensive validation report"""
        report = []
        report.append("LAYOUT VALIDATION REPORT")
        report.append("=" * 50)
        report.append(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        report.append("")

        if self.errors:
            report.append(f"ERRORS ({len(self.errors)}):")
            report.append("-" * 30)
            for error in self.errors:
                report.append(f"❌ {error}")
            report.append("")

        if self.warnings:
            report.append(f"WARNINGS ({len(self.warnings)}):")
            report.append("-" * 30)
            for warning in self.warnings:
                report.append(f"⚠️  {warning}")
            report.append("")

        if not self.errors and not self.warnings:
            report.append("✅ All validations passed!")

        return "\n".join(report)
