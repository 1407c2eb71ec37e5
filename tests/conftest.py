"""
Shared fixtures for the planogram layout core tests.

Scale is the default 10 px/inch throughout unless a test says otherwise.
"""

import pytest

from planogram_core.models import Dimensions, Fixture, PlacedComponent, Planogram, Row, Section
from planogram_core.persistence import InMemoryDocumentStore, PlanogramRepository
from planogram_core.placement import PlacementEngine


def _make_component(component_id="c1", width=2.0, height=8.0, depth=3.0, facings=1,
                    product_id=None, name=None, brand="Acme"):
    """Unplaced component with the given physical size."""
    return PlacedComponent(
        id=component_id,
        product_id=product_id or f"sku-{component_id}",
        name=name or f"Product {component_id}",
        brand=brand,
        dimensions=Dimensions(width, height, depth),
        facings=facings,
    )


@pytest.fixture
def make_component():
    """Factory for unplaced components."""
    return _make_component


@pytest.fixture
def engine():
    return PlacementEngine(scale=10.0)


@pytest.fixture
def section():
    """48in wide, 72in tall section with a 4in header, 2in offset and three 10in rows."""
    section = Section(id="s1", name="Bay 1", width=48.0, height=72.0,
                      header_height=4.0, row_offset=2.0)
    for index in range(3):
        section.add_row(Row(id=f"r{index}", height=10.0))
    return section


@pytest.fixture
def single_row_section():
    """48in wide section with a single 10in row."""
    section = Section(id="s1", name="Bay 1", width=48.0, height=20.0)
    section.add_row(Row(id="r0", height=10.0))
    return section


@pytest.fixture
def fixture_tree(section):
    fixture = Fixture(id="fx-1", name="Gondola A", user_id="u-1")
    fixture.add_section(section)
    return fixture


@pytest.fixture
def planogram(fixture_tree):
    return Planogram(id="pog-1", name="Summer Reset", fixture=fixture_tree,
                     store_assignments=["store-1", "store-2"], created_by="u-1")


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def repository(store):
    return PlanogramRepository(store, default_timeout=2.0)
