"""Document Stage — at most one uploaded document per category.

The stage is a mapping keyed by category.  A new upload to a category
evicts the previous entry; nothing is ever merged.  Entries are
DocumentRecords (metadata only); file bytes live in the DocumentBlobStore.
"""

import logging
from typing import Any, Dict, Iterator, Mapping, Optional

from staging.upload_reader import (
    DOCUMENT_CATEGORIES,
    DocumentRecord,
    UploadedDocument,
    check_category,
    read_upload,
)

logger = logging.getLogger(__name__)


class DocumentStage:
    """Keyed view over the `documents` entry of the wizard state.

    Works on a private copy; `as_dict()` hands the new mapping back to the
    graph as a state update.
    """

    def __init__(self, entries: Optional[Mapping[str, Mapping[str, Any]]] = None):
        self._entries: Dict[str, Dict[str, Any]] = {
            category: dict(doc) for category, doc in (entries or {}).items()
        }

    # ── Mutations ───────────────────────────────────────────────────────
    async def upload(self, category: str, source: Any) -> UploadedDocument:
        """Read `source` and stage it under `category`, replacing any entry there."""
        document = await read_upload(category, source)
        self.put(document)
        return document

    def put(self, document: DocumentRecord) -> Optional[DocumentRecord]:
        """Stage `document`'s record, returning the entry it evicted (if any)."""
        check_category(document.category)
        evicted = self._entries.pop(document.category, None)
        if evicted is not None:
            logger.info(
                "Replacing %s: %s -> %s", document.category, evicted["name"], document.name
            )
        # Re-insert so the newest upload sorts last
        self._entries[document.category] = document.to_record().model_dump()
        return DocumentRecord.model_validate(evicted) if evicted else None

    def remove(self, document_id: str) -> Optional[DocumentRecord]:
        """Delete the entry with `document_id`; no-op if not found."""
        for category, doc in self._entries.items():
            if doc["id"] == document_id:
                del self._entries[category]
                logger.info("Removed %s (%s)", doc["name"], category)
                return DocumentRecord.model_validate(doc)
        return None

    # ── Queries ─────────────────────────────────────────────────────────
    def count(self) -> int:
        return len(self._entries)

    def get(self, category: str) -> Optional[DocumentRecord]:
        doc = self._entries.get(category)
        return DocumentRecord.model_validate(doc) if doc else None

    def categories(self) -> list[str]:
        """Staged categories in upload order."""
        return list(self._entries)

    def missing_categories(self) -> list[str]:
        return [c for c in DOCUMENT_CATEGORIES if c not in self._entries]

    def ids(self) -> list[str]:
        return [doc["id"] for doc in self._entries.values()]

    def __iter__(self) -> Iterator[DocumentRecord]:
        for doc in self._entries.values():
            yield DocumentRecord.model_validate(doc)

    def __len__(self) -> int:
        return len(self._entries)

    def as_dict(self) -> Dict[str, Dict[str, Any]]:
        return {category: dict(doc) for category, doc in self._entries.items()}
