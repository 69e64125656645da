"""Result Presenter — display model and downloadable text for a validation result.

Summaries echo the property/pool data the validator returned, not the
local Field Store, so the results screen shows what was actually validated.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel

from errors import DownloadUnavailableError
from validator.schemas import ValidationResult

DOWNLOAD_FILENAME = "pool_permit_application.txt"


class Banner(BaseModel):
    tone: Literal["positive", "corrective"]
    title: str
    message: str


class ChecklistRow(BaseModel):
    item: str
    passed: bool
    details: Optional[str] = None


class SummaryRow(BaseModel):
    label: str
    value: str


class ResultView(BaseModel):
    banner: Banner
    checklist: List[ChecklistRow]
    missing_items: Optional[List[str]] = None       # None → section omitted
    compliance_notes: Optional[List[str]] = None    # None → section omitted
    property_summary: List[SummaryRow]
    pool_summary: List[SummaryRow]
    download_available: bool
    download_filename: Optional[str] = None


def _banner(result: ValidationResult) -> Banner:
    if result.is_complete:
        return Banner(
            tone="positive",
            title="Application Ready",
            message="Your permit application has been successfully generated and is ready for download.",
        )
    return Banner(
        tone="corrective",
        title="Additional Items Needed",
        message="Please provide the following items to complete your application.",
    )


def _property_rows(result: ValidationResult) -> List[SummaryRow]:
    prop = result.property_summary
    return [
        SummaryRow(label="Address", value=prop.address),
        SummaryRow(label="Lot Size", value=f"{prop.lot_size} acres"),
        SummaryRow(label="Zoning", value=prop.zoning.capitalize()),
    ]


def _pool_rows(result: ValidationResult) -> List[SummaryRow]:
    pool = result.pool_summary
    features = [
        label
        for label, on in (("Fence", pool.fence), ("Heating", pool.heating), ("Lighting", pool.lighting))
        if on
    ]
    return [
        SummaryRow(
            label="Type & Dimensions",
            value=f"{pool.pool_type.capitalize()} ({pool.length}x{pool.width} ft)",
        ),
        SummaryRow(label="Depth", value=f"{pool.depth} ft"),
        SummaryRow(label="Key Features", value=", ".join(features)),
    ]


def present_result(result: ValidationResult) -> ResultView:
    """Map a validation result onto the results screen."""
    return ResultView(
        banner=_banner(result),
        checklist=[
            ChecklistRow(item=entry.item, passed=entry.status == "pass", details=entry.details)
            for entry in result.validation_checklist
        ],
        missing_items=list(result.missing_items) or None,
        compliance_notes=list(result.compliance_notes) or None,
        property_summary=_property_rows(result),
        pool_summary=_pool_rows(result),
        download_available=result.is_complete,
        download_filename=DOWNLOAD_FILENAME if result.is_complete else None,
    )


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def render_application_text(result: ValidationResult, generated_at: Optional[datetime] = None) -> str:
    """Plain-text application; only a complete validation can be downloaded."""
    if not result.is_complete:
        raise DownloadUnavailableError("The application is incomplete and cannot be downloaded yet.")

    prop = result.property_summary
    pool = result.pool_summary
    generated_at = generated_at or datetime.now()
    heating = f"Yes ({pool.heating_type})" if pool.heating else "No"
    notes = "\n".join(f"- {note}" for note in result.compliance_notes)

    lines = [
        "POOL PERMIT APPLICATION",
        "",
        "APPLICANT INFORMATION",
        f"Address: {prop.address}",
        f"Property Type: {prop.property_type}",
        f"Lot Size: {prop.lot_size} acres",
        f"Zoning: {prop.zoning}",
        "",
        "POOL SPECIFICATIONS",
        f"Type: {pool.pool_type}",
        f"Dimensions: {pool.length}ft x {pool.width}ft",
        f"Depth: {pool.depth}ft",
        "",
        "SAFETY & FEATURES",
        f"- Fence: {_yes_no(pool.fence)}",
        f"- Heating: {heating}",
        f"- Lighting: {_yes_no(pool.lighting)}",
        f"- Diving Board: {_yes_no(pool.diving_board)}",
        "",
        "VALIDATION STATUS",
        "Overall Status: APPROVED",
        f"Items Validated: {len(result.validation_checklist)}",
        f"Date Generated: {generated_at.strftime('%m/%d/%Y')}",
        "",
        "COMPLIANCE REQUIREMENTS",
        notes,
        "",
        "This application is ready for submission to the local authority.",
    ]
    return "\n".join(lines) + "\n"
