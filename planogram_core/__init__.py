from .layout import EditorState, LayoutEditor
from .models import (
    Dimensions,
    Fixture,
    PlacedComponent,
    Planogram,
    PlanogramStatus,
    Row,
    Section,
    to_inches,
    to_pixels,
    validate_dimensions,
)
from .persistence import (
    InMemoryDocumentStore,
    JsonFileDocumentStore,
    PlanogramRepository,
    deserialize,
    serialize,
)
from .placement import PlacementEngine

__version__ = "0.1.0"

__all__ = [
    'Dimensions', 'Fixture', 'PlacedComponent', 'Planogram', 'PlanogramStatus', 'Row', 'Section',
    'to_pixels', 'to_inches', 'validate_dimensions',
    'PlacementEngine', 'LayoutEditor', 'EditorState',
    'InMemoryDocumentStore', 'JsonFileDocumentStore', 'PlanogramRepository', 'serialize', 'deserialize',
]
