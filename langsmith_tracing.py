"""LangSmith tracing — one permit application = one trace across resumes."""

import logging
import os
from contextlib import contextmanager

import langsmith as ls
from langsmith.run_trees import RunTree

from config import LANGSMITH_TRACING, LANGSMITH_PROJECT

logger = logging.getLogger(__name__)

# In-memory store: session_id -> parent RunTree
_session_trace_store: dict[str, RunTree] = {}

TRACE_TAGS = ["pool-permit", "wizard"]


def _ensure_env():
    """Ensure LangSmith env vars are set when tracing is enabled."""
    if LANGSMITH_TRACING:
        os.environ.setdefault("LANGCHAIN_TRACING_V2", "true")
        os.environ.setdefault("LANGCHAIN_PROJECT", LANGSMITH_PROJECT)


@contextmanager
def flow_trace(session_id: str):
    """
    Open the parent trace for an application session.  Every graph run
    inside this context is grouped under it.
    """
    if not LANGSMITH_TRACING:
        yield
        return

    _ensure_env()
    root = RunTree(name="pool_permit_application", run_type="chain")
    root.add_metadata({"session_id": session_id})
    root.add_tags(TRACE_TAGS)
    root.post()
    _session_trace_store[session_id] = root

    with ls.tracing_context(
        project_name=LANGSMITH_PROJECT,
        enabled=True,
        parent=root,
        metadata={"session_id": session_id},
        tags=TRACE_TAGS,
    ):
        yield str(root.id)


@contextmanager
def continue_flow_trace(session_id: str):
    """Continue the session's trace for a later action, if one is open."""
    root = _session_trace_store.get(session_id)
    if not LANGSMITH_TRACING or root is None:
        yield
        return

    with ls.tracing_context(
        project_name=LANGSMITH_PROJECT,
        enabled=True,
        parent=root,
        metadata={"session_id": session_id},
        tags=[*TRACE_TAGS, "action"],
    ):
        yield


def clear_flow_trace(session_id: str) -> None:
    """End the root run and drop it when the application is abandoned or restarted."""
    root = _session_trace_store.pop(session_id, None)
    if root is None:
        return
    try:
        root.end()
        root.patch()
    except Exception as e:
        logger.warning("Could not close trace for session %s: %s", session_id, e)
