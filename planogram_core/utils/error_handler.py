from enum import Enum
from functools import wraps
from typing import Any, Callable, Dict, Optional


class PlanogramError(Exception):
    """Base exception for planogram system"""
    pass


class DataLoadError(PlanogramError):
    """Error loading catalog or template data"""
    pass


class ConfigurationError(PlanogramError):
    """Configuration error"""
    pass


class OwnershipError(PlanogramError):
    """A section or component was handed to an owner that does not hold it.

    This is a programmer error and is always raised, never returned.
    """
    pass


class SnapshotFormatError(PlanogramError):
    """Snapshot document does not match the layout snapshot shape"""
    pass


class DimensionErrorKind(Enum):
    NON_POSITIVE = "non_positive"


class LayoutErrorKind(Enum):
    DUPLICATE_ID = "duplicate_id"
    NOT_FOUND = "not_found"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    ROW_OCCUPIED = "row_occupied"
    INVALID_TRANSITION = "invalid_transition"
    SAVE_IN_PROGRESS = "save_in_progress"


class PlacementErrorKind(Enum):
    INVALID_ROW = "invalid_row"
    COMPONENT_TOO_TALL = "component_too_tall"
    OVERLAP = "overlap"
    INVALID_FACINGS = "invalid_facings"
    OUT_OF_BOUNDS = "out_of_bounds"
    COMPONENT_NOT_FOUND = "component_not_found"
    DUPLICATE_COMPONENT = "duplicate_component"


class SaveErrorKind(Enum):
    VERSION_CONFLICT = "version_conflict"
    TIMEOUT = "timeout"
    STORE_UNAVAILABLE = "store_unavailable"
    SAVE_IN_PROGRESS = "save_in_progress"


class LoadErrorKind(Enum):
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    STORE_UNAVAILABLE = "store_unavailable"


class ValidationError(PlanogramError):
    """Deterministic rejection of a requested layout change.

    Carries the ids of whatever caused the rejection so the editing surface
    can point at the offending row or component.
    """

    def __init__(self, kind: Enum, message: str,
                 section_id: Optional[str] = None,
                 row_index: Optional[int] = None,
                 component_id: Optional[str] = None,
                 conflicting_component_id: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.section_id = section_id
        self.row_index = row_index
        self.component_id = component_id
        self.conflicting_component_id = conflicting_component_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            'error': type(self).__name__,
            'kind': self.kind.value,
            'message': self.message,
            'section_id': self.section_id,
            'row_index': self.row_index,
            'component_id': self.component_id,
            'conflicting_component_id': self.conflicting_component_id,
        }


class DimensionError(ValidationError):
    """Non-positive physical dimension"""

    def __init__(self, kind: DimensionErrorKind, message: str, field: Optional[str] = None, **ids):
        super().__init__(kind, message, **ids)
        self.field = field


class LayoutError(ValidationError):
    """Fixture hierarchy or editor-level rejection"""
    pass


class PlacementError(ValidationError):
    """Component placement rejection"""
    pass


class PersistenceError(PlanogramError):
    """Failure talking to the document store"""

    # Kinds that are safe to retry with backoff
    RETRYABLE = ()

    def __init__(self, kind: Enum, message: str, planogram_id: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.planogram_id = planogram_id

    @property
    def retryable(self) -> bool:
        return self.kind in self.RETRYABLE


class SaveError(PersistenceError):
    RETRYABLE = (SaveErrorKind.TIMEOUT, SaveErrorKind.STORE_UNAVAILABLE)

    def __init__(self, kind: SaveErrorKind, message: str, planogram_id: Optional[str] = None,
                 expected_version: Optional[int] = None, current_version: Optional[int] = None):
        super().__init__(kind, message, planogram_id)
        self.expected_version = expected_version
        self.current_version = current_version


class LoadError(PersistenceError):
    RETRYABLE = (LoadErrorKind.TIMEOUT, LoadErrorKind.STORE_UNAVAILABLE)


class StoreConflictError(PlanogramError):
    """Raised by a document store when the stored version is not the expected one"""

    def __init__(self, document_id: str, expected_version: int, current_version: int):
        super().__init__(
            f"Document {document_id} is at version {current_version}, expected {expected_version}"
        )
        self.document_id = document_id
        self.expected_version = expected_version
        self.current_version = current_version


class DocumentNotFoundError(PlanogramError):
    """Raised by a document store for an unknown id or version"""

    def __init__(self, document_id: str, version: Optional[int] = None):
        suffix = f" (version {version})" if version is not None else ""
        super().__init__(f"Document {document_id} not found{suffix}")
        self.document_id = document_id
        self.version = version


def handle_errors(default_return=None, raise_on_error=True, error_class=PlanogramError):
    """Decorator for error handling at I/O boundaries.

    Unexpected exceptions are re-raised as ``error_class``; planogram errors
    pass through untouched.
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            try:
                return func(*args, **kwargs)
            except PlanogramError:
                if raise_on_error:
                    raise
                return default_return
            except Exception as e:
                if raise_on_error:
                    raise error_class(f"Unexpected error in {func.__name__}: {str(e)}") from e
                return default_return
        return wrapper
    return decorator
