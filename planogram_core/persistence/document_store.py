import asyncio
import copy
import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Tuple
from uuid import uuid4

import aiofiles

from planogram_core.utils.error_handler import DocumentNotFoundError, StoreConflictError
from planogram_core.utils.logger import get_logger

Document = Dict[str, Any]


class DocumentStore(ABC):
    """Versioned key/document store keyed by planogram id.

    Versions start at 1 for the first document; a key that was never written
    is at version 0. Every ``put`` adds a new version and earlier versions
    stay readable.
    """

    @abstractmethod
    async def get(self, document_id: str) -> Tuple[Document, int]:
        """Latest document and its version; raises DocumentNotFoundError"""
        pass

    @abstractmethod
    async def put(self, document_id: str, document: Document, expected_version: int) -> int:
        """Write a new version if the stored one equals ``expected_version``.

        Returns the new version; raises StoreConflictError otherwise.
        """
        pass

    @abstractmethod
    async def get_version(self, document_id: str, version: int) -> Document:
        pass

    @abstractmethod
    async def list_versions(self, document_id: str) -> List[int]:
        pass

    async def current_version(self, document_id: str) -> int:
        versions = await self.list_versions(document_id)
        return versions[-1] if versions else 0


class InMemoryDocumentStore(DocumentStore):
    """Process-local store; the lock makes check-and-write a single step"""

    def __init__(self):
        self._history: Dict[str, List[Document]] = {}
        self._lock = asyncio.Lock()
        self.logger = get_logger()

    async def get(self, document_id: str) -> Tuple[Document, int]:
        async with self._lock:
            history = self._history.get(document_id)
            if not history:
                raise DocumentNotFoundError(document_id)
            return copy.deepcopy(history[-1]), len(history)

    async def put(self, document_id: str, document: Document, expected_version: int) -> int:
        stored = copy.deepcopy(document)
        async with self._lock:
            history = self._history.setdefault(document_id, [])
            current = len(history)
            if current != expected_version:
                raise StoreConflictError(document_id, expected_version, current)
            history.append(stored)
            self.logger.debug(f"Stored {document_id} version {current + 1}")
            return current + 1

    async def get_version(self, document_id: str, version: int) -> Document:
        async with self._lock:
            history = self._history.get(document_id, [])
            if not 1 <= version <= len(history):
                raise DocumentNotFoundError(document_id, version)
            return copy.deepcopy(history[version - 1])

    async def list_versions(self, document_id: str) -> List[int]:
        async with self._lock:
            return list(range(1, len(self._history.get(document_id, [])) + 1))


class JsonFileDocumentStore(DocumentStore):
    """One JSON file per version under ``<root>/<document_id>/``.

    Versions are written to a temporary file and hard-linked into place, so
    a version file either exists complete or not at all, and two writers
    racing for the same version cannot both win.
    """

    VERSION_PATTERN = "v{:06d}.json"

    def __init__(self, root_dir: str):
        self.root_dir = Path(root_dir)
        self.root_dir.mkdir(parents=True, exist_ok=True)
        self._lock = asyncio.Lock()
        self.logger = get_logger()

    def _document_dir(self, document_id: str) -> Path:
        if not document_id or os.sep in document_id or document_id in ('.', '..'):
            raise ValueError(f"Invalid document id: {document_id!r}")
        return self.root_dir / document_id

    def _version_path(self, document_id: str, version: int) -> Path:
        return self._document_dir(document_id) / self.VERSION_PATTERN.format(version)

    def _scan_versions(self, document_id: str) -> List[int]:
        directory = self._document_dir(document_id)
        if not directory.exists():
            return []
        versions = []
        for path in directory.glob("v*.json"):
            try:
                versions.append(int(path.stem[1:]))
            except ValueError:
                continue
        return sorted(versions)

    async def _read(self, path: Path) -> Document:
        async with aiofiles.open(path, "r") as f:
            content = await f.read()
        return json.loads(content)

    async def get(self, document_id: str) -> Tuple[Document, int]:
        versions = self._scan_versions(document_id)
        if not versions:
            raise DocumentNotFoundError(document_id)
        latest = versions[-1]
        return await self._read(self._version_path(document_id, latest)), latest

    async def put(self, document_id: str, document: Document, expected_version: int) -> int:
        async with self._lock:
            versions = self._scan_versions(document_id)
            current = versions[-1] if versions else 0
            if current != expected_version:
                raise StoreConflictError(document_id, expected_version, current)

            new_version = expected_version + 1
            directory = self._document_dir(document_id)
            directory.mkdir(parents=True, exist_ok=True)
            target = self._version_path(document_id, new_version)
            # One temp file per write, shared by no other writer
            tmp_path = directory / f".tmp-{uuid4().hex}.json"

            try:
                async with aiofiles.open(tmp_path, "w") as f:
                    await f.write(json.dumps(document, indent=2))
                # Another store on the same root may have taken this version
                os.link(tmp_path, target)
            except FileExistsError:
                latest = self._scan_versions(document_id)
                raise StoreConflictError(
                    document_id, expected_version, latest[-1] if latest else new_version
                )
            finally:
                tmp_path.unlink(missing_ok=True)

            self.logger.debug(f"Wrote {target}")
            return new_version

    async def get_version(self, document_id: str, version: int) -> Document:
        path = self._version_path(document_id, version)
        if not path.exists():
            raise DocumentNotFoundError(document_id, version)
        return await self._read(path)

    async def list_versions(self, document_id: str) -> List[int]:
        return self._scan_versions(document_id)
