"""Blob store — bytes and previews of staged uploads, kept out of graph state.

The checkpointer snapshots every state update, so file contents never go
through the graph.  State holds DocumentRecords; this store holds the
matching UploadedDocuments and drops any id the state no longer references.
"""

import logging
from typing import Iterable, List, Optional

from staging.upload_reader import DocumentRecord, UploadedDocument

logger = logging.getLogger(__name__)


class DocumentBlobStore:
    def __init__(self):
        self._blobs: dict[str, UploadedDocument] = {}

    def put(self, document: UploadedDocument) -> DocumentRecord:
        """Keep the bytes; return the metadata-only record for the state."""
        self._blobs[document.id] = document
        return document.to_record()

    def get(self, document_id: str) -> Optional[UploadedDocument]:
        return self._blobs.get(document_id)

    def retain(self, document_ids: Iterable[str]) -> List[str]:
        """Release every blob not in `document_ids`; returns the released ids."""
        keep = set(document_ids)
        released = [doc_id for doc_id in self._blobs if doc_id not in keep]
        for doc_id in released:
            doc = self._blobs.pop(doc_id)
            logger.debug("Released %s (%s, %d bytes)", doc.name, doc.category, doc.size)
        return released

    def clear(self) -> None:
        self._blobs.clear()

    def __len__(self) -> int:
        return len(self._blobs)

    def __contains__(self, document_id: str) -> bool:
        return document_id in self._blobs
