from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from planogram_core.utils.constants import INITIAL_VERSION, STATUS_TRANSITIONS
from planogram_core.utils.error_handler import LayoutError, LayoutErrorKind
from .fixture import Fixture


class PlanogramStatus(Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


@dataclass
class Planogram:
    """Named, versioned container binding a fixture to store assignments"""
    id: str
    name: str
    fixture: Fixture
    store_assignments: List[str] = field(default_factory=list)
    status: PlanogramStatus = PlanogramStatus.DRAFT
    version: int = INITIAL_VERSION  # bumped only by a durable save

    created_by: Optional[str] = None
    description: Optional[str] = None

    @property
    def fixture_id(self) -> str:
        return self.fixture.id

    @property
    def is_saved(self) -> bool:
        return self.version > INITIAL_VERSION

    def can_transition(self, new_status: PlanogramStatus) -> bool:
        return new_status.value in STATUS_TRANSITIONS.get(self.status.value, ())

    def set_status(self, new_status: PlanogramStatus):
        """Move through the draft -> active -> archived lifecycle"""
        if new_status == self.status:
            return
        if not self.can_transition(new_status):
            raise LayoutError(
                LayoutErrorKind.INVALID_TRANSITION,
                f"Planogram {self.id} cannot move from {self.status.value} to {new_status.value}"
            )
        self.status = new_status

    def assign_stores(self, store_ids: Iterable[str]):
        """Replace store assignments, dropping duplicates but keeping order"""
        seen = set()
        assignments = []
        for store_id in store_ids:
            if store_id not in seen:
                seen.add(store_id)
                assignments.append(store_id)
        self.store_assignments = assignments
