"""Async upload reader — turns a picked or dropped file into an UploadedDocument.

Accepted sources:
  • a filesystem path (str / os.PathLike), read in a worker thread
  • an object with an async ``read()`` (FastAPI ``UploadFile``)
  • an object with ``getvalue()`` (Streamlit ``UploadedFile``, ``io.BytesIO``)
  • an object with a sync ``read()`` (open binary file)
"""

import asyncio
import base64
import inspect
import logging
import mimetypes
import os
import uuid
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, model_validator

from errors import InvalidActionError, UploadReadError

logger = logging.getLogger(__name__)

# ── Closed set of categories, in display order ──────────────────────────
DOCUMENT_CATEGORIES = ["Property Deed", "Site Plan", "Pool Design"]

ACCEPTED_EXTENSIONS = (".pdf", ".png", ".jpg", ".jpeg")


class DocumentRecord(BaseModel):
    """What the wizard state holds for a staged file: identity and metadata only."""

    id: str
    name: str
    category: str
    content_type: str = "application/octet-stream"
    size: int = 0

    def to_record(self) -> "DocumentRecord":
        return DocumentRecord(**self.model_dump(include=set(DocumentRecord.model_fields)))


class UploadedDocument(DocumentRecord):
    """A read upload with its bytes; lives in the DocumentBlobStore, never in graph state."""

    content: bytes
    preview: Optional[str] = None   # data URL for image files

    @model_validator(mode="after")
    def _measure(self):
        self.size = len(self.content)
        return self


def check_category(category: str) -> str:
    if category not in DOCUMENT_CATEGORIES:
        raise InvalidActionError(
            f"Unknown document category '{category}'. "
            f"Expected one of: {', '.join(DOCUMENT_CATEGORIES)}"
        )
    return category


def _source_name(source: Any) -> str:
    if isinstance(source, (str, os.PathLike)):
        return Path(source).name
    # UploadFile.filename, UploadedFile.name, open file .name
    name = getattr(source, "filename", None) or getattr(source, "name", None)
    return Path(str(name)).name if name else "upload"


def _source_content_type(source: Any, name: str) -> str:
    declared = getattr(source, "content_type", None) or getattr(source, "type", None)
    if isinstance(declared, str) and declared:
        return declared
    guessed, _ = mimetypes.guess_type(name)
    return guessed or "application/octet-stream"


async def _read_bytes(source: Any) -> bytes:
    if isinstance(source, (str, os.PathLike)):
        return await asyncio.to_thread(Path(source).read_bytes)
    if hasattr(source, "getvalue"):
        return source.getvalue()
    read = getattr(source, "read", None)
    if read is None:
        raise TypeError(f"Cannot read uploads of type {type(source).__name__}")
    if inspect.iscoroutinefunction(read):
        return await read()
    return await asyncio.to_thread(read)


def build_preview(content: bytes, content_type: str) -> Optional[str]:
    """Inline data URL for image files; None for anything else."""
    if not content_type.startswith("image/"):
        return None
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


async def read_upload(category: str, source: Any) -> UploadedDocument:
    """Read the whole file and wrap it with a fresh identity.

    Raises UploadReadError if the file cannot be read; other staged
    categories are unaffected.
    """
    check_category(category)
    name = _source_name(source)
    try:
        content = await _read_bytes(source)
    except (OSError, ValueError, TypeError) as e:
        logger.warning("Upload read failed for %s (%s): %s", category, name, e)
        raise UploadReadError(category, name, str(e)) from e

    if isinstance(content, str):
        content = content.encode("utf-8")
    content_type = _source_content_type(source, name)
    return UploadedDocument(
        id=uuid.uuid4().hex,
        name=name,
        category=category,
        content=bytes(content),
        content_type=content_type,
        preview=build_preview(content, content_type),
    )
