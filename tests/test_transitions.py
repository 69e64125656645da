"""Tests for the pure wizard transition function and router."""

import pytest

from wizard.fields import seed_fields
from wizard.router import router
from wizard.state import FORM_STEPS, initial_state
from wizard.transitions import apply_action


def _form_state(step="property", **overrides):
    state = {**initial_state(), **seed_fields(), "screen": "form", "form_step": step}
    state.update(overrides)
    return state


def _apply(state, action):
    return {**state, **apply_action(state, action)}


def _two_documents():
    return {
        "Property Deed": {"id": "1", "name": "deed.pdf", "category": "Property Deed", "content": b"d"},
        "Site Plan": {"id": "2", "name": "plan.pdf", "category": "Site Plan", "content": b"p"},
    }


def test_start_application_seeds_fields_and_clears_everything():
    state = {
        **initial_state(),
        "property": {"address": "old"},
        "documents": _two_documents(),
        "validation_result": {"validation_status": "complete"},
    }
    state = _apply(state, "start_application")

    assert state["screen"] == "form"
    assert state["form_step"] == "property"
    assert state["property"]["address"] == "123 Oak Street"
    assert state["pool"]["fence"] is True
    assert state["documents"] == {}
    assert state["validation_result"] is None


def test_next_follows_fixed_order_when_gate_passes():
    state = _form_state(documents=_two_documents())
    visited = [state["form_step"]]
    for _ in range(5):
        state = _apply(state, "go_next")
        visited.append(state["form_step"])
    assert visited == FORM_STEPS + ["review", "review"]


def test_next_blocked_by_gate_leaves_step_unchanged():
    state = _form_state(step="documents")
    updates = apply_action(state, {"type": "go_next"})
    assert "form_step" not in updates
    assert updates["last_action"] == "go_next"


def test_previous_is_noop_on_first_step():
    state = _form_state(step="property")
    assert _apply(state, "go_previous")["form_step"] == "property"
    assert _apply(_form_state(step="review"), "go_previous")["form_step"] == "documents"


def test_edit_field_only_on_form_screen():
    action = {"type": "edit_field", "entity": "property", "key": "address", "value": "9 Elm Road"}
    assert _apply(_form_state(), action)["property"]["address"] == "9 Elm Road"

    landing = initial_state()
    assert "property" not in apply_action(landing, action)


def test_submit_only_from_review():
    assert "submission_requested" not in apply_action(_form_state(step="documents"), "submit")

    updates = apply_action(_form_state(step="review", validation_result={"stale": True}), "submit")
    assert updates["submission_requested"] is True
    assert updates["validation_result"] is None


def test_router_prefers_pending_submission():
    state = _form_state(step="review", submission_requested=True)
    assert router(state) == "submit_application"
    assert router({**state, "submission_requested": False}) == "review_step"
    assert router(initial_state()) == "landing_screen"
    assert router({**initial_state(), "screen": "results"}) == "results_screen"


def test_edit_application_returns_to_property_keeping_data():
    results = _form_state(step="review", screen="results", documents=_two_documents())
    results["property"]["address"] = "77 Pine Lane"
    state = _apply(results, "edit_application")

    assert state["screen"] == "form"
    assert state["form_step"] == "property"
    assert state["property"]["address"] == "77 Pine Lane"
    assert len(state["documents"]) == 2


def test_start_new_application_returns_to_landing():
    results = _form_state(step="review", screen="results", validation_result={"validation_status": "complete"})
    state = _apply(results, "start_new_application")

    assert state["screen"] == "landing"
    assert state["form_step"] == "property"
    assert state["validation_result"] is None


def test_edit_application_ignored_outside_results():
    updates = apply_action(_form_state(step="pool"), "edit_application")
    assert updates == {"last_action": "edit_application"}


@pytest.mark.parametrize("screen", ["landing", "form", "results"])
def test_start_new_application_always_lands(screen):
    state = _apply(_form_state(step="documents", screen=screen), "start_new_application")
    assert state["screen"] == "landing"
    assert state["form_step"] == "property"


@pytest.mark.parametrize("target", ["property", "pool", "documents"])
def test_edit_step_jumps_from_review(target):
    state = _form_state(step="review", documents=_two_documents())
    state = _apply(state, {"type": "edit_step", "step": target})

    assert state["screen"] == "form"
    assert state["form_step"] == target
    assert len(state["documents"]) == 2


@pytest.mark.parametrize("step,target", [
    ("pool", "property"),
    ("review", "review"),
    ("review", "payment"),
])
def test_edit_step_only_from_review_to_an_earlier_step(step, target):
    updates = apply_action(_form_state(step=step), {"type": "edit_step", "step": target})
    assert updates == {"last_action": "edit_step"}


def test_upload_and_remove_document_actions():
    document = {"id": "9", "name": "design.pdf", "category": "Pool Design", "content": b"x"}
    state = _apply(_form_state(step="documents"), {"type": "upload_document", "document": document})
    assert list(state["documents"]) == ["Pool Design"]

    state = _apply(state, {"type": "remove_document", "document_id": "9"})
    assert state["documents"] == {}


def test_unknown_action_is_ignored():
    assert apply_action(_form_state(), {"type": "teleport"}) == {"last_action": None}
