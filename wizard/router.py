"""Deterministic router — NO LLM calls, pure rule-based branching."""

from typing import Literal
from wizard.state import PermitState


# All valid destinations for add_conditional_edges
RouterDest = Literal[
    "landing_screen",
    "property_step", "pool_step", "documents_step", "review_step",
    "submit_application",
    "results_screen",
]

# Mapping: form step → node name
STEP_NODE_MAP: dict[str, str] = {
    "property": "property_step",
    "pool": "pool_step",
    "documents": "documents_step",
    "review": "review_step",
}

SCREEN_NODE_MAP: dict[str, str] = {
    "landing": "landing_screen",
    "results": "results_screen",
}


def router(state: PermitState) -> RouterDest:
    """
    Rule-based router.  Priority: pending submission > current screen/step.
    Called via add_conditional_edges after every node.
    """
    if state["submission_requested"]:
        return "submit_application"

    if state["screen"] == "form":
        return STEP_NODE_MAP[state["form_step"]]

    return SCREEN_NODE_MAP.get(state["screen"], "landing_screen")
