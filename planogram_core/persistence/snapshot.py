"""Layout snapshot codec.

A snapshot is plain data (dicts, lists, numbers, strings) with the field names
of the persisted document. Derived x/y are written verbatim and read back
verbatim; loading never re-runs placement.
"""
import copy
from datetime import datetime
from enum import Enum
from typing import Any, Dict

from planogram_core.models.component import PlacedComponent
from planogram_core.models.dimensions import Dimensions
from planogram_core.models.fixture import Fixture, Row, Section
from planogram_core.models.planogram import Planogram, PlanogramStatus
from planogram_core.utils.constants import SNAPSHOT_PROTOCOL_VERSION
from planogram_core.utils.error_handler import SnapshotFormatError

LayoutSnapshot = Dict[str, Any]

REQUIRED_FIELDS = ('fixtureId', 'name', 'sections', 'storeAssignments', 'status', 'version')


def _recursive_convert(obj: Any) -> Any:
    """Turn enums and datetimes into JSON-friendly values, recursively"""
    if isinstance(obj, dict):
        return {(k.value if isinstance(k, Enum) else k): _recursive_convert(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_recursive_convert(item) for item in obj]
    elif isinstance(obj, Enum):
        return obj.value
    elif isinstance(obj, datetime):
        return obj.isoformat()
    else:
        return obj


def _fixture_metadata(fixture: Fixture) -> Dict[str, Any]:
    metadata = {
        'userId': fixture.user_id,
        'createdAt': fixture.created_at,
        'updatedAt': fixture.updated_at,
    }
    return {k: v for k, v in metadata.items() if v is not None}


def serialize(planogram: Planogram) -> LayoutSnapshot:
    """Snapshot a planogram and its whole fixture tree"""
    fixture = planogram.fixture
    snapshot = {
        'protocolVersion': SNAPSHOT_PROTOCOL_VERSION,
        'planogramId': planogram.id,
        'fixtureId': fixture.id,
        'fixtureName': fixture.name,
        'name': planogram.name,
        'sections': [section.to_dict() for section in fixture.sections.values()],
        'storeAssignments': list(planogram.store_assignments),
        'status': planogram.status,
        'version': planogram.version,
    }

    # Optional fields are only written when set
    if planogram.created_by is not None:
        snapshot['createdBy'] = planogram.created_by
    if planogram.description is not None:
        snapshot['description'] = planogram.description
    metadata = _fixture_metadata(fixture)
    if metadata:
        snapshot['fixtureMetadata'] = metadata

    return _recursive_convert(snapshot)


def _parse_datetime(value):
    return datetime.fromisoformat(value) if value is not None else None


def _component_from_dict(data: Dict[str, Any]) -> PlacedComponent:
    return PlacedComponent(
        id=data['id'],
        product_id=data['productId'],
        name=data['name'],
        brand=data['brand'],
        dimensions=Dimensions.from_dict(data['dimensions']),
        facings=int(data['facings']),
        row_index=int(data['rowIndex']),
        x=float(data['x']),
        y=float(data['y']),
        image_url=data.get('imageUrl')
    )


def _section_from_dict(data: Dict[str, Any]) -> Section:
    section = Section(
        id=data['id'],
        name=data['name'],
        width=float(data['width']),
        height=float(data['height']),
        header_height=float(data['headerHeight']),
        row_offset=float(data['rowOffset']),
        rows=[Row(id=row['id'], height=float(row['height'])) for row in data['rows']]
    )
    for component_data in data['components']:
        component = _component_from_dict(component_data)
        if component.id in section.components:
            raise SnapshotFormatError(f"Duplicate component {component.id} in section {section.id}")
        section.components[component.id] = component
    return section


def deserialize(snapshot: LayoutSnapshot) -> Planogram:
    """Rebuild a planogram from a snapshot produced by ``serialize``"""
    if not isinstance(snapshot, dict):
        raise SnapshotFormatError(f"Snapshot must be a mapping, got {type(snapshot).__name__}")

    missing = [name for name in REQUIRED_FIELDS if name not in snapshot]
    if missing:
        raise SnapshotFormatError(f"Snapshot is missing fields: {missing}")

    protocol = snapshot.get('protocolVersion', SNAPSHOT_PROTOCOL_VERSION)
    if isinstance(protocol, bool) or not isinstance(protocol, int):
        raise SnapshotFormatError(f"Snapshot protocolVersion must be an integer, got {protocol!r}")
    if protocol > SNAPSHOT_PROTOCOL_VERSION:
        raise SnapshotFormatError(
            f"Snapshot protocol {protocol} is newer than supported ({SNAPSHOT_PROTOCOL_VERSION})"
        )

    try:
        metadata = snapshot.get('fixtureMetadata', {})
        fixture = Fixture(
            id=snapshot['fixtureId'],
            name=snapshot.get('fixtureName', snapshot['name']),
            user_id=metadata.get('userId'),
            created_at=_parse_datetime(metadata.get('createdAt')),
            updated_at=_parse_datetime(metadata.get('updatedAt'))
        )
        for section_data in snapshot['sections']:
            section = _section_from_dict(section_data)
            if section.id in fixture.sections:
                raise SnapshotFormatError(f"Duplicate section {section.id} in fixture {fixture.id}")
            fixture.sections[section.id] = section

        return Planogram(
            id=snapshot.get('planogramId', fixture.id),
            name=snapshot['name'],
            fixture=fixture,
            store_assignments=list(snapshot['storeAssignments']),
            status=PlanogramStatus(snapshot['status']),
            version=int(snapshot['version']),
            created_by=snapshot.get('createdBy'),
            description=snapshot.get('description')
        )
    except (KeyError, TypeError, ValueError) as e:
        raise SnapshotFormatError(f"Malformed snapshot: {e!r}") from e


def with_version(snapshot: LayoutSnapshot, version: int) -> LayoutSnapshot:
    """Copy of a snapshot stamped with a new version"""
    stamped = copy.deepcopy(snapshot)
    stamped['version'] = version
    return stamped


def snapshot_id(snapshot: LayoutSnapshot) -> str:
    """Document key of a snapshot"""
    planogram_id = snapshot.get('planogramId') if isinstance(snapshot, dict) else None
    if not planogram_id:
        raise SnapshotFormatError("Snapshot has no planogramId to key the document by")
    return planogram_id
