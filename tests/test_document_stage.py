"""Tests for the document stage and the async upload reader."""

import io

import pytest

from errors import InvalidActionError, UploadReadError
from staging.blob_store import DocumentBlobStore
from staging.document_stage import DocumentStage
from staging.upload_reader import DOCUMENT_CATEGORIES, UploadedDocument, read_upload


def _doc(category, name, doc_id=None):
    return UploadedDocument(id=doc_id or name, name=name, category=category, content=name.encode())


class AsyncUpload:
    """Mimics FastAPI's UploadFile: filename, content_type, async read()."""

    def __init__(self, filename, data, content_type):
        self.filename = filename
        self.content_type = content_type
        self._data = data

    async def read(self):
        return self._data


def test_same_category_keeps_only_newest():
    stage = DocumentStage()
    stage.put(_doc("Site Plan", "old.pdf"))
    evicted = stage.put(_doc("Site Plan", "new.pdf"))

    assert evicted.name == "old.pdf"
    assert stage.count() == 1
    assert stage.get("Site Plan").name == "new.pdf"
    assert stage.get("Site Plan").size == len(b"new.pdf")
    assert "content" not in stage.as_dict()["Site Plan"]


def test_count_never_exceeds_number_of_categories():
    stage = DocumentStage()
    for round_ in range(3):
        for category in DOCUMENT_CATEGORIES:
            stage.put(_doc(category, f"{category}-{round_}.pdf"))
            assert stage.count() <= len(DOCUMENT_CATEGORIES)
    assert stage.count() == len(DOCUMENT_CATEGORIES)


def test_replacement_moves_category_to_end_of_upload_order():
    stage = DocumentStage()
    stage.put(_doc("Property Deed", "deed.pdf"))
    stage.put(_doc("Site Plan", "plan.pdf"))
    stage.put(_doc("Property Deed", "deed-v2.pdf"))
    assert stage.categories() == ["Site Plan", "Property Deed"]


def test_remove_by_id_and_unknown_id_is_noop():
    stage = DocumentStage()
    stage.put(_doc("Pool Design", "design.pdf", doc_id="abc"))

    assert stage.remove("missing") is None
    assert stage.count() == 1

    removed = stage.remove("abc")
    assert removed.name == "design.pdf"
    assert stage.count() == 0
    assert stage.get("Pool Design") is None


def test_stage_works_on_a_copy():
    entries = {}
    stage = DocumentStage(entries)
    stage.put(_doc("Site Plan", "plan.pdf"))
    assert entries == {}
    assert set(stage.as_dict()) == {"Site Plan"}


def test_unknown_category_is_rejected():
    with pytest.raises(InvalidActionError):
        DocumentStage().put(_doc("Utility Bill", "bill.pdf"))


@pytest.mark.asyncio
async def test_read_upload_from_path_builds_image_preview(tmp_path):
    image = tmp_path / "plan.png"
    image.write_bytes(b"\x89PNG\r\n\x1a\n")

    doc = await read_upload("Site Plan", image)

    assert doc.name == "plan.png"
    assert doc.category == "Site Plan"
    assert doc.content_type == "image/png"
    assert doc.content == b"\x89PNG\r\n\x1a\n"
    assert doc.preview.startswith("data:image/png;base64,")


@pytest.mark.asyncio
async def test_read_upload_pdf_has_no_preview(tmp_path):
    pdf = tmp_path / "deed.pdf"
    pdf.write_bytes(b"%PDF-1.4")
    doc = await read_upload("Property Deed", str(pdf))
    assert doc.content_type == "application/pdf"
    assert doc.preview is None


@pytest.mark.asyncio
async def test_each_upload_gets_a_fresh_identity(tmp_path):
    pdf = tmp_path / "deed.pdf"
    pdf.write_bytes(b"%PDF-1.4")
    first = await read_upload("Property Deed", pdf)
    second = await read_upload("Property Deed", pdf)
    assert first.id != second.id


@pytest.mark.asyncio
async def test_read_upload_from_async_and_buffer_sources():
    upload = AsyncUpload("design.jpg", b"jpeg-bytes", "image/jpeg")
    doc = await read_upload("Pool Design", upload)
    assert doc.name == "design.jpg"
    assert doc.preview.startswith("data:image/jpeg;base64,")

    buffer = io.BytesIO(b"%PDF-1.4 buffer")
    buffer.name = "buffer.pdf"
    doc = await read_upload("Property Deed", buffer)
    assert doc.content == b"%PDF-1.4 buffer"
    assert doc.content_type == "application/pdf"


@pytest.mark.asyncio
async def test_unreadable_file_raises_upload_read_error(tmp_path):
    with pytest.raises(UploadReadError) as exc:
        await read_upload("Site Plan", tmp_path / "does-not-exist.pdf")
    assert exc.value.category == "Site Plan"
    assert exc.value.filename == "does-not-exist.pdf"


@pytest.mark.asyncio
async def test_stage_upload_replaces_existing_entry(tmp_path):
    first = tmp_path / "first.pdf"
    first.write_bytes(b"one")
    second = tmp_path / "second.pdf"
    second.write_bytes(b"two")

    stage = DocumentStage()
    await stage.upload("Site Plan", first)
    await stage.upload("Site Plan", second)

    assert stage.count() == 1
    assert stage.get("Site Plan").name == "second.pdf"
    assert stage.get("Site Plan").size == 3


def test_missing_categories_follow_display_order():
    stage = DocumentStage()
    assert stage.missing_categories() == DOCUMENT_CATEGORIES
    stage.put(_doc("Site Plan", "plan.pdf"))
    assert stage.missing_categories() == ["Property Deed", "Pool Design"]


def test_blob_store_keeps_bytes_and_returns_record():
    blobs = DocumentBlobStore()
    doc = _doc("Property Deed", "deed.pdf", doc_id="d1")

    record = blobs.put(doc)

    assert record.id == "d1"
    assert record.size == len(b"deed.pdf")
    assert not hasattr(record, "content")
    assert blobs.get("d1").content == b"deed.pdf"


def test_blob_store_releases_unreferenced_ids():
    blobs = DocumentBlobStore()
    blobs.put(_doc("Property Deed", "old.pdf", doc_id="old"))
    blobs.put(_doc("Property Deed", "new.pdf", doc_id="new"))

    stage = DocumentStage()
    stage.put(blobs.get("old"))
    stage.put(blobs.get("new"))

    assert blobs.retain(stage.ids()) == ["old"]
    assert "old" not in blobs
    assert blobs.get("new").content == b"new.pdf"
    assert len(blobs) == 1
