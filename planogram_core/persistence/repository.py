import asyncio
from dataclasses import dataclass
from typing import Optional

from planogram_core.utils.constants import DEFAULT_IO_TIMEOUT
from planogram_core.utils.error_handler import (
    DocumentNotFoundError,
    LoadError,
    LoadErrorKind,
    SaveError,
    SaveErrorKind,
    StoreConflictError,
)
from planogram_core.utils.logger import get_logger
from planogram_core.utils.results import OperationResult
from .document_store import DocumentStore
from .snapshot import LayoutSnapshot, snapshot_id, with_version


@dataclass(frozen=True)
class SavedVersion:
    planogram_id: str
    version: int


class PlanogramRepository:
    """Optimistic-concurrency save/load of layout snapshots.

    A save only lands when the stored version still equals the version the
    caller loaded; otherwise the caller gets VERSION_CONFLICT and must reload.
    Nothing is ever overwritten.
    """

    def __init__(self, store: DocumentStore, default_timeout: float = DEFAULT_IO_TIMEOUT):
        self.store = store
        self.default_timeout = default_timeout
        self.logger = get_logger()

    def _timeout(self, timeout: Optional[float]) -> float:
        return self.default_timeout if timeout is None else timeout

    async def save(self, snapshot: LayoutSnapshot, expected_version: int,
                   timeout: Optional[float] = None) -> OperationResult:
        """Persist ``snapshot`` as version ``expected_version + 1``"""
        planogram_id = snapshot_id(snapshot)
        document = with_version(snapshot, expected_version + 1)

        try:
            version = await asyncio.wait_for(
                self.store.put(planogram_id, document, expected_version),
                self._timeout(timeout)
            )
        except StoreConflictError as e:
            self.logger.warning(
                f"Version conflict saving {planogram_id}: expected {e.expected_version}, "
                f"store has {e.current_version}"
            )
            return OperationResult.fail(SaveError(
                SaveErrorKind.VERSION_CONFLICT, str(e), planogram_id,
                expected_version=expected_version, current_version=e.current_version
            ))
        except asyncio.TimeoutError:
            self.logger.warning(f"Timed out saving {planogram_id}")
            return OperationResult.fail(SaveError(
                SaveErrorKind.TIMEOUT, f"Saving {planogram_id} timed out", planogram_id,
                expected_version=expected_version
            ))
        except OSError as e:
            self.logger.error(f"Store unavailable while saving {planogram_id}: {e}")
            return OperationResult.fail(SaveError(
                SaveErrorKind.STORE_UNAVAILABLE, str(e), planogram_id,
                expected_version=expected_version
            ))

        self.logger.info(f"Saved {planogram_id} as version {version}")
        return OperationResult.ok(SavedVersion(planogram_id, version))

    async def _fetch(self, planogram_id: str, coro, timeout: Optional[float]) -> OperationResult:
        try:
            result = await asyncio.wait_for(coro, self._timeout(timeout))
        except DocumentNotFoundError as e:
            return OperationResult.fail(LoadError(LoadErrorKind.NOT_FOUND, str(e), planogram_id))
        except asyncio.TimeoutError:
            self.logger.warning(f"Timed out loading {planogram_id}")
            return OperationResult.fail(LoadError(
                LoadErrorKind.TIMEOUT, f"Loading {planogram_id} timed out", planogram_id
            ))
        except OSError as e:
            self.logger.error(f"Store unavailable while loading {planogram_id}: {e}")
            return OperationResult.fail(LoadError(LoadErrorKind.STORE_UNAVAILABLE, str(e), planogram_id))
        return OperationResult.ok(result)

    async def load(self, planogram_id: str, timeout: Optional[float] = None) -> OperationResult:
        """Latest snapshot, with its version field set to the stored version"""
        result = await self._fetch(planogram_id, self.store.get(planogram_id), timeout)
        if not result.success:
            return result
        document, version = result.value
        self.logger.info(f"Loaded {planogram_id} version {version}")
        return OperationResult.ok(with_version(document, version))

    async def load_version(self, planogram_id: str, version: int,
                           timeout: Optional[float] = None) -> OperationResult:
        """A specific earlier snapshot"""
        result = await self._fetch(planogram_id, self.store.get_version(planogram_id, version), timeout)
        if not result.success:
            return result
        return OperationResult.ok(with_version(result.value, version))

    async def history(self, planogram_id: str, timeout: Optional[float] = None) -> OperationResult:
        """Saved version numbers, oldest first"""
        result = await self._fetch(planogram_id, self.store.list_versions(planogram_id), timeout)
        if result.success and not result.value:
            return OperationResult.fail(LoadError(
                LoadErrorKind.NOT_FOUND, f"Document {planogram_id} not found", planogram_id
            ))
        return result
