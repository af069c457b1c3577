# src/prefill/core/persistence.py
"""Mapping document persistence.

The lifecycle manager writes the whole document after every mutation and
reads it once at startup. Repositories only move bytes; the document shape
is owned by MappingStore.
"""

from __future__ import annotations

import json
import os
import tempfile
from json import JSONDecodeError
from pathlib import Path
from typing import Protocol

from prefill.contracts import MappingDocumentError
from prefill.core.logging import get_logger
from prefill.core.mappings import MappingStore

logger = get_logger(__name__)


class MappingRepository(Protocol):
    """Protocol for mapping document storage."""

    def load(self) -> MappingStore | None:
        """Read the persisted document; None when nothing was saved yet.

        Raises:
            MappingDocumentError: If the stored document is malformed
        """
        ...

    def save(self, store: MappingStore) -> None:
        """Replace the persisted document with the store's contents.

        Raises:
            OSError: If the underlying storage cannot be written
        """
        ...


class JsonFileMappingRepository:
    """Stores the document as canonical JSON in a single file.

    Writes go to a temporary file in the same directory and are moved into
    place, so a crash mid-write never leaves a truncated document behind.
    Canonical serialization makes save(load()) byte-identical. createdAt is
    always stored as UTC with millisecond precision ("2024-05-01T09:30:00.000Z"),
    so timestamps in documents written by other tools survive a re-save unchanged.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> MappingStore | None:
        if not self.path.exists():
            return None

        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return None
        try:
            document = json.loads(text)
        except JSONDecodeError as e:
            raise MappingDocumentError(f"Mapping document {self.path} is not valid JSON: {e}") from e

        store = MappingStore.from_document(document)
        logger.info("mappings_loaded", path=str(self.path), mappings=len(store))
        return store

    def save(self, store: MappingStore) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = store.to_json()

        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("mappings_saved", path=str(self.path), mappings=len(store))


class InMemoryMappingRepository:
    """Keeps the serialized document in memory.

    Stores canonical JSON text rather than the live store, so tests observe
    exactly what a file repository would have written.
    """

    def __init__(self, document: str | None = None) -> None:
        self.document = document
        self.save_count = 0

    def load(self) -> MappingStore | None:
        if self.document is None:
            return None
        try:
            parsed = json.loads(self.document)
        except JSONDecodeError as e:
            raise MappingDocumentError(f"Stored mapping document is not valid JSON: {e}") from e
        return MappingStore.from_document(parsed)

    def save(self, store: MappingStore) -> None:
        self.document = store.to_json()
        self.save_count += 1
