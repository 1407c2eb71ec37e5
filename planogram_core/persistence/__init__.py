from .document_store import DocumentStore, InMemoryDocumentStore, JsonFileDocumentStore
from .repository import PlanogramRepository, SavedVersion
from .snapshot import LayoutSnapshot, deserialize, serialize

__all__ = [
    'DocumentStore', 'InMemoryDocumentStore', 'JsonFileDocumentStore',
    'PlanogramRepository', 'SavedVersion', 'LayoutSnapshot', 'serialize', 'deserialize',
]
