"""PermitState schema — single source of truth for the wizard graph state."""

from typing import TypedDict, Any, Dict, Optional, Literal

Screen = Literal["landing", "form", "results"]
FormStep = Literal["property", "pool", "documents", "review"]

# Fixed, totally ordered step sequence
FORM_STEPS: list[str] = ["property", "pool", "documents", "review"]


class PermitState(TypedDict):
    """Flat state dict for the permit application wizard."""

    # Wizard position
    screen: Screen
    form_step: FormStep

    # Field Store (snake_case keys, see wizard.fields)
    property: Dict[str, Any]
    pool: Dict[str, Any]

    # Document Stage  {category: DocumentRecord dict}; bytes live in the blob store
    documents: Dict[str, Dict[str, Any]]

    # Submission
    submission_requested: bool
    validation_result: Optional[Dict[str, Any]]   # as received from the validator
    notice: Optional[Dict[str, str]]              # {kind, message} after a failed submit

    last_action: Optional[str]


def initial_state() -> PermitState:
    """Factory — returns a clean landing-screen state."""
    return PermitState(
        screen="landing",
        form_step="property",
        property={},
        pool={},
        documents={},
        submission_requested=False,
        validation_result=None,
        notice=None,
        last_action=None,
    )


def next_step(step: str) -> str:
    """Following step; the last step maps to itself."""
    index = FORM_STEPS.index(step)
    return FORM_STEPS[min(index + 1, len(FORM_STEPS) - 1)]


def previous_step(step: str) -> str:
    """Preceding step; the first step maps to itself."""
    index = FORM_STEPS.index(step)
    return FORM_STEPS[max(index - 1, 0)]


def step_progress(step: str) -> int:
    """1-based position of a form step."""
    return FORM_STEPS.index(step) + 1
