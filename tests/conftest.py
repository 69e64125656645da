import asyncio
import copy

import pytest

from validator.client import ValidationClient
from wizard.builder import build_graph
from wizard.controller import WizardController


COMPLETE_RESULT = {
    "validation_status": "complete",
    "validation_checklist": [
        {"item": "Pool fence encloses the pool", "status": "pass", "details": "Fence noted in application"},
    ],
    "property_summary": {
        "address": "123 Oak Street",
        "lotSize": "0.5",
        "zoning": "residential",
        "propertyType": "single-family",
    },
    "pool_summary": {
        "poolType": "inground",
        "length": "20",
        "width": "40",
        "depth": "8",
        "heating": False,
        "lighting": False,
        "divingBoard": False,
        "fence": True,
    },
    "document_status": {
        "Property Deed": {"uploaded": True, "status": "received"},
        "Site Plan": {"uploaded": True, "status": "received"},
        "Pool Design": {"uploaded": False, "status": "missing"},
    },
    "missing_items": [],
    "compliance_notes": ["Gate must be self-closing and self-latching"],
}


class FakeTransport:
    """In-process validator: records each message and replays a canned reply."""

    def __init__(self, reply=None, error=None, gate: asyncio.Event | None = None):
        self.reply = reply
        self.error = error
        self.gate = gate
        self.messages: list[str] = []

    async def send(self, message: str):
        self.messages.append(message)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def complete_result():
    return copy.deepcopy(COMPLETE_RESULT)


@pytest.fixture
def incomplete_result():
    result = copy.deepcopy(COMPLETE_RESULT)
    result["validation_status"] = "incomplete"
    result["validation_checklist"].append(
        {"item": "Pool design drawings provided", "status": "fail", "details": "No pool design uploaded"}
    )
    result["missing_items"] = ["Pool Design"]
    return result


@pytest.fixture
def make_controller():
    def _make(transport):
        return WizardController(build_graph(ValidationClient(transport)))
    return _make


@pytest.fixture
def deed_and_site_plan(tmp_path):
    deed = tmp_path / "deed.pdf"
    deed.write_bytes(b"%PDF-1.4 deed")
    site_plan = tmp_path / "site_plan.png"
    site_plan.write_bytes(b"\x89PNG\r\n\x1a\nsite")
    return deed, site_plan


@pytest.fixture
def drive_to_review(deed_and_site_plan):
    """Walk a controller from landing to the review step with the seed data."""
    deed, site_plan = deed_and_site_plan

    async def _drive(controller):
        await controller.start()
        await controller.start_application()
        await controller.go_next()   # → pool
        await controller.go_next()   # → documents
        await controller.upload_document("Property Deed", deed)
        await controller.upload_document("Site Plan", site_plan)
        await controller.go_next()   # → review
        return controller

    return _drive
