"""Text templates: the validator request narrative and per-screen prompts.

The narrative is deterministic — same fields, same text — so the
validator sees exactly what the applicant entered.
"""

from typing import Iterable

from wizard.fields import PoolInfo, PropertyInfo

VALIDATION_REQUEST_TEMPLATE = """Process and validate pool permit application with the following data:
Property Information:
- Address: {address}
- Lot Size: {lot_size} acres
- Zoning: {zoning}
- Property Type: {property_type}

Pool Specifications:
- Type: {pool_type}
- Dimensions: {length}ft x {width}ft
- Depth: {depth}ft
- Heating: {heating}
- Lighting: {lighting}
- Diving Board: {diving_board}
- Fence: {fence}

Documents Uploaded: {documents}

Please validate all requirements, check document completeness, and generate a structured permit application response."""


# Shown in the interrupt payload for each wizard position
SCREEN_MESSAGES: dict[str, str] = {
    "landing": "Pool permits made simple. Start a new application when you're ready.",
    "property": "Tell us about the property where the pool will be installed.",
    "pool": "Provide details about your pool design and features.",
    "documents": "Upload the property deed, site plan and pool design (PDF or image).",
    "review": "Review your application, then submit it for validation.",
    "results": "Your application has been validated.",
}


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def build_validation_message(
    property_info: PropertyInfo,
    pool: PoolInfo,
    document_categories: Iterable[str],
) -> str:
    """Render the free-text request sent to the validator."""
    heating = f"Yes ({pool.heating_type})" if pool.heating else "No"
    return VALIDATION_REQUEST_TEMPLATE.format(
        address=property_info.address,
        lot_size=property_info.lot_size,
        zoning=property_info.zoning,
        property_type=property_info.property_type,
        pool_type=pool.pool_type,
        length=pool.length,
        width=pool.width,
        depth=pool.depth,
        heating=heating,
        lighting=_yes_no(pool.lighting),
        diving_board=_yes_no(pool.diving_board),
        fence=_yes_no(pool.fence),
        documents=", ".join(document_categories),
    )


def documents_hint(uploaded: int, total: int) -> str:
    """Warning shown on the documents step while some categories are empty."""
    if uploaded == 0 or uploaded >= total:
        return ""
    return (
        f"You have uploaded {uploaded} of {total} required documents. "
        "Please upload all documents to proceed."
    )
