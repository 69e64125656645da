"""Wizard nodes — one interrupt-driven node per screen/step, plus submission.

Screen nodes follow the prompt -> interrupt -> apply pattern: they pause
with a prompt payload, and on resume apply the user's action through the
pure transition function.  Nothing runs before `interrupt()`, so replaying
a node on resume has no side effects.
"""

import logging
from typing import Any, Dict

from langgraph.types import interrupt

from errors import SubmissionError
from prompts.validation_prompts import SCREEN_MESSAGES, documents_hint
from staging.document_stage import DocumentStage
from staging.upload_reader import DOCUMENT_CATEGORIES
from validator.client import ValidationClient
from wizard.fields import PoolInfo, PropertyInfo
from wizard.gate import can_advance
from wizard.state import PermitState, step_progress
from wizard.transitions import apply_action

logger = logging.getLogger(__name__)


def screen_prompt(state: PermitState) -> Dict[str, Any]:
    """Interrupt payload describing what the user is looking at."""
    screen = state["screen"]
    if screen != "form":
        return {"type": "wizard_screen", "screen": screen, "message": SCREEN_MESSAGES[screen]}

    step = state["form_step"]
    payload = {
        "type": "wizard_step",
        "screen": screen,
        "step": step,
        "progress": step_progress(step),
        "can_advance": can_advance(step, state["property"], state["pool"], state["documents"]),
        "message": SCREEN_MESSAGES[step],
    }
    if step == "documents":
        stage = DocumentStage(state["documents"])
        payload["hint"] = documents_hint(stage.count(), len(DOCUMENT_CATEGORIES))
        payload["missing_categories"] = stage.missing_categories()
    return payload


# ── Universal Screen Node ──────────────────────────────────────────────
def wizard_screen_node(state: PermitState, node_name: str) -> Dict[str, Any]:
    """
    Generic handler used for every screen and form step.
    Waits for one user action, then returns the resulting state updates.
    """
    action = interrupt(screen_prompt(state))

    # ── Runs only on resume (after interrupt returns) ──
    updates = apply_action(state, action)
    logger.debug("%s handled %s -> %s", node_name, updates.get("last_action"), sorted(updates))
    return updates


# ── Submission ──────────────────────────────────────────────────────────
async def submit_application_node(state: PermitState, client: ValidationClient) -> Dict[str, Any]:
    """Round-trip to the validator; on failure stay on review with a notice."""
    stage = DocumentStage(state["documents"])
    try:
        result = await client.submit(
            PropertyInfo.model_validate(state["property"]),
            PoolInfo.model_validate(state["pool"]),
            list(stage),
        )
    except SubmissionError as e:
        logger.warning("Submission failed (%s): %s", type(e).__name__, e)
        return {
            "submission_requested": False,
            "validation_result": None,
            "notice": {"kind": type(e).__name__, "message": str(e)},
        }

    return {
        "submission_requested": False,
        "screen": "results",
        "validation_result": result.to_payload(),
        "notice": None,
    }
