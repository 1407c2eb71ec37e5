"""
Unit tests for the layout snapshot codec.
"""

import json
from datetime import datetime, timezone

import pytest

from planogram_core.models import PlanogramStatus
from planogram_core.persistence.snapshot import deserialize, serialize, snapshot_id, with_version
from planogram_core.utils.error_handler import SnapshotFormatError


@pytest.fixture
def populated_planogram(planogram, engine, make_component):
    section = planogram.fixture.sections["s1"]
    engine.place(section, make_component("a", width=2.0, facings=3), 0, 0.0)
    engine.place(section, make_component("b", width=1.5), 0, 60.0)
    engine.place(section, make_component("c", height=9.5), 2, 123.4)
    section.components["c"].image_url = "https://cdn.example.com/c.png"
    planogram.fixture.created_at = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
    planogram.description = "Spring endcap"
    return planogram


class TestSerialize:
    """Tests for the persisted snapshot shape."""

    def test_top_level_fields(self, populated_planogram):
        snapshot = serialize(populated_planogram)
        for field in ('fixtureId', 'name', 'sections', 'storeAssignments', 'status', 'version'):
            assert field in snapshot
        assert snapshot['fixtureId'] == "fx-1"
        assert snapshot['name'] == "Summer Reset"
        assert snapshot['status'] == "draft"
        assert snapshot['version'] == 0
        assert snapshot['storeAssignments'] == ["store-1", "store-2"]
        assert snapshot['planogramId'] == "pog-1"

    def test_section_and_component_fields(self, populated_planogram):
        section = serialize(populated_planogram)['sections'][0]
        assert set(section) == {'id', 'name', 'width', 'height', 'headerHeight', 'rowOffset',
                                'rows', 'components'}
        assert section['rows'][0] == {'id': 'r0', 'height': 10.0}

        component = section['components'][0]
        assert set(component) == {'id', 'productId', 'name', 'brand', 'dimensions', 'facings',
                                  'rowIndex', 'x', 'y'}
        assert component['x'] == 0.0
        assert component['y'] == pytest.approx(60.0)
        assert component['dimensions'] == {'width': 2.0, 'height': 8.0, 'depth': 3.0}

    def test_snapshot_is_plain_json(self, populated_planogram):
        snapshot = serialize(populated_planogram)
        assert json.loads(json.dumps(snapshot)) == snapshot

    def test_optional_fields_only_when_set(self, planogram):
        planogram.created_by = None
        planogram.fixture.user_id = None
        snapshot = serialize(planogram)
        assert 'createdBy' not in snapshot
        assert 'description' not in snapshot
        assert 'fixtureMetadata' not in snapshot


class TestRoundTrip:
    """deserialize(serialize(x)) == x, derived x/y included."""

    def test_round_trip_equality(self, populated_planogram):
        assert deserialize(serialize(populated_planogram)) == populated_planogram

    def test_round_trip_through_json_text(self, populated_planogram):
        text = json.dumps(serialize(populated_planogram))
        assert deserialize(json.loads(text)) == populated_planogram

    def test_derived_coordinates_are_not_recomputed(self, populated_planogram):
        """A stale y is carried verbatim rather than recomputed on load."""
        populated_planogram.fixture.sections["s1"].components["a"].y = 999.0
        restored = deserialize(serialize(populated_planogram))
        assert restored.fixture.sections["s1"].components["a"].y == 999.0

    def test_section_order_survives(self, planogram):
        from planogram_core.models import Section
        planogram.fixture.add_section(Section(id="s0", name="Bay 0", width=24.0, height=72.0))
        restored = deserialize(serialize(planogram))
        assert list(restored.fixture.sections) == ["s1", "s0"]

    def test_status_and_version(self, planogram):
        planogram.status = PlanogramStatus.ARCHIVED
        planogram.version = 7
        restored = deserialize(serialize(planogram))
        assert restored.status is PlanogramStatus.ARCHIVED
        assert restored.version == 7


class TestMalformedSnapshots:

    def test_missing_fields(self, planogram):
        snapshot = serialize(planogram)
        del snapshot['sections']
        with pytest.raises(SnapshotFormatError):
            deserialize(snapshot)

    def test_not_a_mapping(self):
        with pytest.raises(SnapshotFormatError):
            deserialize(["not", "a", "snapshot"])

    def test_bad_status(self, planogram):
        snapshot = serialize(planogram)
        snapshot['status'] = 'published'
        with pytest.raises(SnapshotFormatError):
            deserialize(snapshot)

    def test_missing_component_field(self, planogram, engine, make_component):
        engine.place(planogram.fixture.sections["s1"], make_component("a"), 0, 0.0)
        snapshot = serialize(planogram)
        del snapshot['sections'][0]['components'][0]['rowIndex']
        with pytest.raises(SnapshotFormatError):
            deserialize(snapshot)

    def test_newer_protocol_is_rejected(self, planogram):
        snapshot = serialize(planogram)
        snapshot['protocolVersion'] = 99
        with pytest.raises(SnapshotFormatError):
            deserialize(snapshot)

    @pytest.mark.parametrize("protocol", ["1", None, 1.5])
    def test_non_integer_protocol_is_rejected(self, planogram, protocol):
        snapshot = serialize(planogram)
        snapshot['protocolVersion'] = protocol
        with pytest.raises(SnapshotFormatError, match="protocolVersion"):
            deserialize(snapshot)

    def test_unknown_fields_are_ignored(self, planogram):
        snapshot = serialize(planogram)
        snapshot['thumbnail'] = "ignored"
        assert deserialize(snapshot) == planogram


class TestHelpers:

    def test_with_version_copies(self, planogram):
        snapshot = serialize(planogram)
        stamped = with_version(snapshot, 4)
        assert stamped['version'] == 4
        assert snapshot['version'] == 0

    def test_snapshot_id_requires_planogram_id(self, planogram):
        snapshot = serialize(planogram)
        assert snapshot_id(snapshot) == "pog-1"
        del snapshot['planogramId']
        with pytest.raises(SnapshotFormatError):
            snapshot_id(snapshot)
