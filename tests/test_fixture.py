"""
Unit tests for the fixture hierarchy: sections, rows and the component index.
"""

from dataclasses import replace

import pytest

from planogram_core.models import ComponentIndex, Fixture, Row, Section
from planogram_core.utils.error_handler import (
    DimensionError,
    LayoutError,
    LayoutErrorKind,
    PlacementError,
    PlacementErrorKind,
)


class TestSectionRows:
    """Tests for Section.add_row / remove_last_row and the fit invariant."""

    def test_rows_append_in_order(self, section):
        assert [row.id for row in section.rows] == ["r0", "r1", "r2"]
        assert section.used_height == pytest.approx(36.0)
        assert section.remaining_height == pytest.approx(36.0)

    def test_row_top_measures_from_section_top(self, section):
        assert section.row_top(0) == pytest.approx(6.0)
        assert section.row_top(2) == pytest.approx(26.0)

    def test_add_row_exceeding_remaining_space_is_rejected(self):
        """5in left, 6in row -> CapacityExceeded, rows unchanged."""
        section = Section(id="s", name="S", width=24.0, height=25.0, header_height=3.0, row_offset=2.0)
        section.add_row(Row(id="r0", height=15.0))
        assert section.remaining_height == pytest.approx(5.0)

        with pytest.raises(LayoutError) as exc_info:
            section.add_row(Row(id="r1", height=6.0))

        assert exc_info.value.kind == LayoutErrorKind.CAPACITY_EXCEEDED
        assert exc_info.value.section_id == "s"
        assert [row.id for row in section.rows] == ["r0"]

    def test_add_row_exactly_filling_section(self):
        section = Section(id="s", name="S", width=24.0, height=20.0)
        section.add_row(Row(id="r0", height=12.0))
        section.add_row(Row(id="r1", height=8.0))
        assert section.remaining_height == pytest.approx(0.0)

    def test_duplicate_row_id_is_rejected(self, section):
        with pytest.raises(LayoutError) as exc_info:
            section.add_row(Row(id="r1", height=2.0))
        assert exc_info.value.kind == LayoutErrorKind.DUPLICATE_ID
        assert len(section.rows) == 3

    def test_non_positive_row_height_is_rejected(self, section):
        with pytest.raises(DimensionError):
            section.add_row(Row(id="r9", height=0.0))

    def test_remove_last_row(self, section):
        removed = section.remove_last_row()
        assert removed.id == "r2"
        assert len(section.rows) == 2

    def test_remove_last_row_of_empty_section(self):
        section = Section(id="s", name="S", width=24.0, height=20.0)
        with pytest.raises(LayoutError) as exc_info:
            section.remove_last_row()
        assert exc_info.value.kind == LayoutErrorKind.NOT_FOUND

    def test_remove_last_row_refused_while_occupied(self, section, engine, make_component):
        engine.place(section, make_component("c1"), 2, 0.0)
        with pytest.raises(LayoutError) as exc_info:
            section.remove_last_row()
        assert exc_info.value.kind == LayoutErrorKind.ROW_OCCUPIED
        assert exc_info.value.component_id == "c1"
        assert len(section.rows) == 3


class TestFixtureSections:
    """Tests for Fixture.add_section / remove_section."""

    def test_sections_keep_insertion_order(self):
        fixture = Fixture(id="fx", name="Endcap")
        for section_id in ("b", "a", "c"):
            fixture.add_section(Section(id=section_id, name=section_id, width=24.0, height=60.0))
        assert [s.id for s in fixture.section_list] == ["b", "a", "c"]

    def test_duplicate_section_is_rejected(self, fixture_tree):
        with pytest.raises(LayoutError) as exc_info:
            fixture_tree.add_section(Section(id="s1", name="Again", width=10.0, height=10.0))
        assert exc_info.value.kind == LayoutErrorKind.DUPLICATE_ID
        assert len(fixture_tree.sections) == 1

    def test_section_that_does_not_fit_is_rejected(self):
        fixture = Fixture(id="fx", name="Cooler")
        section = Section(id="s", name="S", width=24.0, height=10.0, header_height=4.0,
                          rows=[Row(id="r0", height=8.0)])
        with pytest.raises(LayoutError) as exc_info:
            fixture.add_section(section)
        assert exc_info.value.kind == LayoutErrorKind.CAPACITY_EXCEEDED
        assert not fixture.sections

    def test_rows_of_an_attached_section_are_checked(self):
        fixture = Fixture(id="fx", name="Cooler")
        with pytest.raises(DimensionError):
            fixture.add_section(Section(id="s", name="S", width=24.0, height=40.0,
                                        rows=[Row(id="r0", height=-3.0)]))
        with pytest.raises(LayoutError) as exc_info:
            fixture.add_section(Section(id="s", name="S", width=24.0, height=40.0,
                                        rows=[Row(id="r0", height=5.0), Row(id="r0", height=5.0)]))
        assert exc_info.value.kind == LayoutErrorKind.DUPLICATE_ID
        assert not fixture.sections

    def test_held_components_must_reference_rows_and_be_unique(self, fixture_tree, make_component):
        fixture_tree.sections["s1"].components["a"] = make_component("a")

        stray = Section(id="s2", name="S2", width=24.0, height=40.0, rows=[Row(id="x0", height=10.0)])
        stray.components["z"] = replace(make_component("z"), row_index=4)
        with pytest.raises(PlacementError) as exc_info:
            fixture_tree.add_section(stray)
        assert exc_info.value.kind == PlacementErrorKind.INVALID_ROW
        assert exc_info.value.component_id == "z"

        twin = Section(id="s2", name="S2", width=24.0, height=40.0, rows=[Row(id="x0", height=10.0)])
        twin.components["a"] = make_component("a")
        with pytest.raises(PlacementError) as exc_info:
            fixture_tree.add_section(twin)
        assert exc_info.value.kind == PlacementErrorKind.DUPLICATE_COMPONENT
        assert exc_info.value.section_id == "s1"
        assert list(fixture_tree.sections) == ["s1"]

    def test_negative_header_is_rejected(self):
        fixture = Fixture(id="fx", name="Cooler")
        with pytest.raises(DimensionError):
            fixture.add_section(Section(id="s", name="S", width=24.0, height=10.0, header_height=-1.0))

    def test_remove_section_cascades(self, fixture_tree, section, engine, make_component):
        engine.place(section, make_component("c1"), 0, 0.0)
        removed = fixture_tree.remove_section("s1")
        assert removed is section
        assert fixture_tree.component_count == 0
        assert "s1" not in fixture_tree.sections

    def test_remove_missing_section(self, fixture_tree):
        with pytest.raises(LayoutError) as exc_info:
            fixture_tree.remove_section("nope")
        assert exc_info.value.kind == LayoutErrorKind.NOT_FOUND
        assert exc_info.value.section_id == "nope"

    def test_owns_checks_identity(self, fixture_tree, section):
        assert fixture_tree.owns(section)
        lookalike = Section(id="s1", name="Bay 1", width=48.0, height=72.0)
        assert not fixture_tree.owns(lookalike)


class TestComponentIndex:
    """Tests for the rebuildable component -> section lookup."""

    def test_lookup_and_rebuild(self, fixture_tree, section, engine, make_component):
        engine.place(section, make_component("c1"), 0, 0.0)
        index = ComponentIndex(fixture_tree)
        assert index.section_for("c1") is section
        assert "c1" in index

        fixture_tree.remove_section("s1")
        # Stale until rebuilt, but never a dangling object
        assert index.section_for("c1") is None
        index.rebuild()
        assert "c1" not in index
        assert len(index) == 0
