"""Transition function — pure (state, action) -> state updates.

Every legal wizard move is enumerated here.  An action that is not legal
on the current screen/step is a no-op: only `last_action` changes.
"""

import logging
from typing import Any, Dict, Mapping

from staging.document_stage import DocumentStage
from staging.upload_reader import DocumentRecord
from wizard.fields import seed_fields
from wizard.gate import can_advance
from wizard.state import FORM_STEPS, PermitState, next_step, previous_step

logger = logging.getLogger(__name__)

# ── Action names ────────────────────────────────────────────────────────
START_APPLICATION = "start_application"
EDIT_FIELD = "edit_field"
UPLOAD_DOCUMENT = "upload_document"
REMOVE_DOCUMENT = "remove_document"
GO_NEXT = "go_next"
GO_PREVIOUS = "go_previous"
EDIT_STEP = "edit_step"
SUBMIT = "submit"
EDIT_APPLICATION = "edit_application"
START_NEW_APPLICATION = "start_new_application"
DISMISS_NOTICE = "dismiss_notice"

ACTIONS = (
    START_APPLICATION, EDIT_FIELD, UPLOAD_DOCUMENT, REMOVE_DOCUMENT, GO_NEXT,
    GO_PREVIOUS, EDIT_STEP, SUBMIT, EDIT_APPLICATION, START_NEW_APPLICATION, DISMISS_NOTICE,
)


def _in_form(state: PermitState) -> bool:
    return state["screen"] == "form"


def _start_application(state: PermitState, action: Mapping[str, Any]) -> Dict[str, Any]:
    if state["screen"] != "landing":
        return {}
    return {
        **seed_fields(),
        "screen": "form",
        "form_step": "property",
        "documents": {},
        "validation_result": None,
        "notice": None,
        "submission_requested": False,
    }


def _edit_field(state: PermitState, action: Mapping[str, Any]) -> Dict[str, Any]:
    if not _in_form(state):
        return {}
    entity = action["entity"]
    return {entity: {**state[entity], action["key"]: action["value"]}}


def _upload_document(state: PermitState, action: Mapping[str, Any]) -> Dict[str, Any]:
    if not _in_form(state):
        return {}
    stage = DocumentStage(state["documents"])
    stage.put(DocumentRecord.model_validate(action["document"]))
    return {"documents": stage.as_dict()}


def _remove_document(state: PermitState, action: Mapping[str, Any]) -> Dict[str, Any]:
    if not _in_form(state):
        return {}
    stage = DocumentStage(state["documents"])
    if stage.remove(action["document_id"]) is None:
        return {}
    return {"documents": stage.as_dict()}


def _go_next(state: PermitState, action: Mapping[str, Any]) -> Dict[str, Any]:
    step = state["form_step"]
    if not _in_form(state) or step == "review":
        return {}
    if not can_advance(step, state["property"], state["pool"], state["documents"]):
        logger.info("Advance blocked at step '%s'", step)
        return {}
    return {"form_step": next_step(step)}


def _go_previous(state: PermitState, action: Mapping[str, Any]) -> Dict[str, Any]:
    if not _in_form(state):
        return {}
    return {"form_step": previous_step(state["form_step"])}


def _edit_step(state: PermitState, action: Mapping[str, Any]) -> Dict[str, Any]:
    """Jump from review back to one earlier step; fields and documents are kept."""
    if not _in_form(state) or state["form_step"] != "review":
        return {}
    step = action.get("step")
    if step not in FORM_STEPS or step == "review":
        return {}
    return {"form_step": step}


def _submit(state: PermitState, action: Mapping[str, Any]) -> Dict[str, Any]:
    if not _in_form(state) or state["form_step"] != "review":
        return {}
    # A stale result from an earlier round-trip never survives a new submission
    return {"submission_requested": True, "validation_result": None, "notice": None}


def _edit_application(state: PermitState, action: Mapping[str, Any]) -> Dict[str, Any]:
    if state["screen"] != "results":
        return {}
    return {"screen": "form", "form_step": "property"}


def _start_new_application(state: PermitState, action: Mapping[str, Any]) -> Dict[str, Any]:
    # Legal from every screen; fields and documents are reseeded by the next start_application
    return {"screen": "landing", "form_step": "property", "validation_result": None, "notice": None}


def _dismiss_notice(state: PermitState, action: Mapping[str, Any]) -> Dict[str, Any]:
    return {"notice": None} if state.get("notice") else {}


HANDLERS = {
    START_APPLICATION: _start_application,
    EDIT_FIELD: _edit_field,
    UPLOAD_DOCUMENT: _upload_document,
    REMOVE_DOCUMENT: _remove_document,
    GO_NEXT: _go_next,
    GO_PREVIOUS: _go_previous,
    EDIT_STEP: _edit_step,
    SUBMIT: _submit,
    EDIT_APPLICATION: _edit_application,
    START_NEW_APPLICATION: _start_new_application,
    DISMISS_NOTICE: _dismiss_notice,
}


def apply_action(state: PermitState, action: Any) -> Dict[str, Any]:
    """Compute the state updates for one user action."""
    if isinstance(action, str):
        action = {"type": action}
    kind = action.get("type") if isinstance(action, Mapping) else None
    handler = HANDLERS.get(kind)
    if handler is None:
        logger.warning("Ignoring unknown action %r", action)
        return {"last_action": None}

    updates = handler(state, action)
    if not updates:
        logger.debug("Action '%s' is a no-op on %s/%s", kind, state["screen"], state["form_step"])
    return {**updates, "last_action": kind}
