"""Layout mutation API.

``LayoutEditor`` is the one entry point the editor UI and import tooling call.
It owns a single planogram for one editing session, applies mutations in the
order they are issued and hands back an ``OperationResult`` for each; expected
validation failures come back as results, only programmer errors raise.
"""
from enum import Enum
from typing import Callable, Iterable, List, Optional, Union

from planogram_core.data_processing.layout_validator import LayoutValidator
from planogram_core.models.component import PlacedComponent
from planogram_core.models.fixture import ComponentIndex, Row, Section
from planogram_core.models.planogram import Planogram, PlanogramStatus
from planogram_core.persistence.repository import PlanogramRepository
from planogram_core.persistence.snapshot import LayoutSnapshot, deserialize, serialize
from planogram_core.placement.engine import PlacementEngine
from planogram_core.utils.config import LayoutSettings
from planogram_core.utils.error_handler import (
    ConfigurationError,
    LayoutError,
    LayoutErrorKind,
    OwnershipError,
    PlacementError,
    PlacementErrorKind,
    SaveError,
    SaveErrorKind,
    ValidationError,
)
from planogram_core.utils.logger import get_logger
from planogram_core.utils.results import OperationResult

SectionRef = Union[str, Section]


class EditorState(Enum):
    EDITING = "editing"
    SAVING = "saving"


class LayoutEditor:
    """Editing session over one planogram"""

    def __init__(self, planogram: Planogram, repository: Optional[PlanogramRepository] = None,
                 engine: Optional[PlacementEngine] = None, settings: Optional[LayoutSettings] = None):
        self.settings = settings or LayoutSettings()
        self.planogram = planogram
        self.repository = repository
        self.engine = engine or PlacementEngine(self.settings.scale, self.settings.enforce_bounds)
        self.state = EditorState.EDITING
        self.dirty = False
        self.last_error = None
        self.index = ComponentIndex(planogram.fixture)
        self.logger = get_logger()

    @classmethod
    async def open(cls, repository: PlanogramRepository, planogram_id: str,
                   settings: Optional[LayoutSettings] = None,
                   timeout: Optional[float] = None) -> OperationResult:
        """Load the latest saved version into a new editing session"""
        result = await repository.load(planogram_id, timeout)
        if not result.success:
            return result
        editor = cls(deserialize(result.value), repository=repository, settings=settings)
        return OperationResult.ok(editor)

    @property
    def fixture(self):
        return self.planogram.fixture

    @property
    def version(self) -> int:
        return self.planogram.version

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve_section(self, section: SectionRef) -> Section:
        if isinstance(section, Section):
            if not self.fixture.owns(section):
                raise OwnershipError(
                    f"Section {section.id} is not owned by fixture {self.fixture.id}"
                )
            return section
        return self.fixture.get_section(section)

    def _mutate(self, action: str, operation: Callable, *args) -> OperationResult:
        if self.state is EditorState.SAVING:
            return OperationResult.fail(LayoutError(
                LayoutErrorKind.SAVE_IN_PROGRESS,
                f"Cannot {action} while planogram {self.planogram.id} is being saved"
            ))
        try:
            value = operation(*args)
        except ValidationError as e:
            self.logger.info(f"Rejected {action}: {e.kind.value} - {e}")
            return OperationResult.fail(e)

        self.index.rebuild()
        self.dirty = True
        self.logger.debug(f"Applied {action}")
        return OperationResult.ok(value)

    # ------------------------------------------------------------------
    # Fixture hierarchy
    # ------------------------------------------------------------------

    def add_section(self, section: Section) -> OperationResult:
        """Attach a section; components it already holds must pass placement checks"""
        def operation():
            section.validate()
            self.engine.check_section(section)
            self.fixture.add_section(section)
            self.engine.recompute_row_offsets(section)
            return section
        return self._mutate(f"add section {section.id}", operation)

    def remove_section(self, section_id: str) -> OperationResult:
        return self._mutate(f"remove section {section_id}", self.fixture.remove_section, section_id)

    def add_row(self, section: SectionRef, row: Row) -> OperationResult:
        def operation():
            self._resolve_section(section).add_row(row)
            return row
        return self._mutate(f"add row {row.id}", operation)

    def remove_last_row(self, section: SectionRef) -> OperationResult:
        return self._mutate(
            "remove last row", lambda: self._resolve_section(section).remove_last_row()
        )

    def resize_row(self, section: SectionRef, row_index: int, height: float) -> OperationResult:
        return self._mutate(
            f"resize row {row_index}",
            lambda: self.engine.resize_row(self._resolve_section(section), row_index, height)
        )

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def place(self, section: SectionRef, component: PlacedComponent, row_index: int,
              desired_x: float) -> OperationResult:
        def operation():
            if component.id in self.index:
                raise PlacementError(
                    PlacementErrorKind.DUPLICATE_COMPONENT,
                    f"Component {component.id} is already placed in section "
                    f"{self.index.section_id_for(component.id)}",
                    component_id=component.id, section_id=self.index.section_id_for(component.id)
                )
            return self.engine.place(self._resolve_section(section), component, row_index, desired_x)
        return self._mutate(f"place {component.id}", operation)

    def move_component(self, section: SectionRef, component_id: str, new_row_index: int,
                       new_x: float) -> OperationResult:
        return self._mutate(
            f"move {component_id}",
            lambda: self.engine.move_component(
                self._resolve_section(section), component_id, new_row_index, new_x
            )
        )

    def set_facings(self, section: SectionRef, component_id: str, facings: int) -> OperationResult:
        return self._mutate(
            f"set facings of {component_id}",
            lambda: self.engine.set_facings(self._resolve_section(section), component_id, facings)
        )

    def remove_component(self, section: SectionRef, component_id: str) -> OperationResult:
        return self._mutate(
            f"remove {component_id}",
            lambda: self.engine.remove_component(self._resolve_section(section), component_id)
        )

    def auto_arrange_row(self, section: SectionRef, row_index: int) -> OperationResult:
        return self._mutate(
            f"auto-arrange row {row_index}",
            lambda: self.engine.auto_arrange_row(self._resolve_section(section), row_index)
        )

    def find_component(self, component_id: str) -> Optional[PlacedComponent]:
        section = self.index.section_for(component_id)
        return section.components.get(component_id) if section else None

    # ------------------------------------------------------------------
    # Planogram attributes
    # ------------------------------------------------------------------

    def assign_stores(self, store_ids: Iterable[str]) -> OperationResult:
        def operation():
            self.planogram.assign_stores(store_ids)
            return list(self.planogram.store_assignments)
        return self._mutate("assign stores", operation)

    def set_status(self, status: Union[str, PlanogramStatus]) -> OperationResult:
        def operation():
            try:
                new_status = PlanogramStatus(status)
            except ValueError:
                raise LayoutError(
                    LayoutErrorKind.INVALID_TRANSITION,
                    f"Unknown status {status!r}; expected one of "
                    f"{[s.value for s in PlanogramStatus]}"
                ) from None
            self.planogram.set_status(new_status)
            return new_status
        return self._mutate(f"set status {status}", operation)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def snapshot(self) -> LayoutSnapshot:
        return serialize(self.planogram)

    def _require_repository(self) -> PlanogramRepository:
        if self.repository is None:
            raise ConfigurationError("LayoutEditor has no repository to save to or load from")
        return self.repository

    async def save(self, timeout: Optional[float] = None) -> OperationResult:
        """Durably save the current layout as the next version.

        The snapshot is taken before the first suspension point; while the
        write is in flight mutations and further saves are rejected.
        """
        repository = self._require_repository()
        if self.state is EditorState.SAVING:
            return OperationResult.fail(SaveError(
                SaveErrorKind.SAVE_IN_PROGRESS,
                f"A save of planogram {self.planogram.id} is already in flight",
                self.planogram.id
            ))

        snapshot = self.snapshot()
        expected_version = self.planogram.version
        self.state = EditorState.SAVING
        try:
            result = await repository.save(
                snapshot, expected_version,
                timeout if timeout is not None else self.settings.io_timeout
            )
        finally:
            self.state = EditorState.EDITING

        if result.success:
            self.planogram.version = result.value.version
            self.dirty = False
            self.last_error = None
        else:
            self.last_error = result.error
        return result

    async def reload(self, timeout: Optional[float] = None) -> OperationResult:
        """Replace the in-memory layout with the latest saved version"""
        repository = self._require_repository()
        if self.state is EditorState.SAVING:
            return OperationResult.fail(LayoutError(
                LayoutErrorKind.SAVE_IN_PROGRESS,
                f"Cannot reload planogram {self.planogram.id} while it is being saved"
            ))

        result = await repository.load(
            self.planogram.id, timeout if timeout is not None else self.settings.io_timeout
        )
        if not result.success:
            self.last_error = result.error
            return result

        self.planogram = deserialize(result.value)
        self.index = ComponentIndex(self.planogram.fixture)
        self.dirty = False
        self.last_error = None
        return OperationResult.ok(self.planogram)

    def validate(self) -> List[str]:
        """Issues found by a full audit of the current layout"""
        _, issues = LayoutValidator(self.engine).validate_planogram(self.planogram)
        return issues
