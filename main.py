"""FastAPI entrypoint — exposes the permit wizard via REST."""

import logging
import time
import uuid
from typing import Any

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from config import HOST, PORT, LOG_LEVEL, SESSION_IDLE_SECONDS
from errors import (
    DownloadUnavailableError,
    InvalidActionError,
    UploadReadError,
    ValidationBlocked,
)
from validator.presenter import DOWNLOAD_FILENAME, render_application_text
from wizard.builder import build_graph
from wizard.controller import WizardController
from langsmith_tracing import flow_trace, continue_flow_trace, clear_flow_trace

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

# ── App + graph ─────────────────────────────────────────────────────────
app = FastAPI(title="Pool Permit Wizard", version="1.0.0")
graph = build_graph()
sessions: dict[str, WizardController] = {}


# ── Request models ──────────────────────────────────────────────────────
class FieldEdit(BaseModel):
    entity: str         # property | pool
    key: str            # field name, snake_case or camelCase
    value: Any = None


# ── Error mapping ───────────────────────────────────────────────────────
def _error(status: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": type(exc).__name__, "detail": str(exc)})


@app.exception_handler(ValidationBlocked)
async def _blocked(request: Request, exc: ValidationBlocked):
    return _error(409, exc)


@app.exception_handler(InvalidActionError)
async def _invalid(request: Request, exc: InvalidActionError):
    return _error(422, exc)


@app.exception_handler(UploadReadError)
async def _unreadable(request: Request, exc: UploadReadError):
    return _error(400, exc)


@app.exception_handler(DownloadUnavailableError)
async def _no_download(request: Request, exc: DownloadUnavailableError):
    return _error(409, exc)


# ── Helpers ─────────────────────────────────────────────────────────────
def _session(session_id: str) -> WizardController:
    controller = sessions.get(session_id)
    if controller is None:
        raise HTTPException(404, "Session not found.")
    return controller


async def _end_session(session_id: str) -> None:
    controller = sessions.pop(session_id, None)
    if controller is None:
        return
    await controller.close()
    clear_flow_trace(session_id)


async def _evict_idle_sessions() -> None:
    cutoff = time.monotonic() - SESSION_IDLE_SECONDS
    for session_id in [sid for sid, c in sessions.items() if c.last_active < cutoff]:
        logger.info("Evicting idle session %s", session_id)
        await _end_session(session_id)


def _payload(controller: WizardController) -> dict:
    return {
        "session_id": controller.thread_id,
        "view": controller.view().model_dump(mode="json", by_alias=True),
        "interrupt": controller.pending_prompt(),
    }


# ── Endpoints ───────────────────────────────────────────────────────────

@app.post("/wizard/start")
async def start_session():
    """Create a new wizard session and run it to the landing screen."""
    await _evict_idle_sessions()
    session_id = str(uuid.uuid4())
    controller = WizardController(graph, thread_id=session_id)
    sessions[session_id] = controller
    await controller.start()
    return _payload(controller)


@app.get("/wizard/{session_id}")
def get_session(session_id: str):
    """Current screen, step, fields, documents and results."""
    return _payload(_session(session_id))


@app.delete("/wizard/{session_id}", status_code=204)
async def end_session(session_id: str):
    """Abandon a session, releasing its checkpoints, files and trace."""
    _session(session_id)
    await _end_session(session_id)


@app.post("/wizard/{session_id}/start-application")
async def start_application(session_id: str):
    controller = _session(session_id)
    clear_flow_trace(session_id)
    with flow_trace(session_id):
        await controller.start_application()
    return _payload(controller)


@app.post("/wizard/{session_id}/fields")
async def edit_field(session_id: str, edit: FieldEdit):
    controller = _session(session_id)
    with continue_flow_trace(session_id):
        await controller.edit_field(edit.entity, edit.key, edit.value)
    return _payload(controller)


@app.post("/wizard/{session_id}/documents")
async def upload_documents(
    session_id: str,
    category: str = Form(...),
    files: list[UploadFile] = File(...),
):
    """Stage one or more files under `category`; the last readable file wins."""
    controller = _session(session_id)
    with continue_flow_trace(session_id):
        await controller.upload_documents(category, files)
    return _payload(controller)


@app.delete("/wizard/{session_id}/documents/{document_id}")
async def remove_document(session_id: str, document_id: str):
    controller = _session(session_id)
    with continue_flow_trace(session_id):
        await controller.remove_document(document_id)
    return _payload(controller)


@app.post("/wizard/{session_id}/next")
async def go_next(session_id: str):
    controller = _session(session_id)
    with continue_flow_trace(session_id):
        await controller.go_next()
    return _payload(controller)


@app.post("/wizard/{session_id}/previous")
async def go_previous(session_id: str):
    controller = _session(session_id)
    with continue_flow_trace(session_id):
        await controller.go_previous()
    return _payload(controller)


@app.post("/wizard/{session_id}/step/{step}")
async def edit_step(session_id: str, step: str):
    """From review, jump back to the property, pool or documents step."""
    controller = _session(session_id)
    with continue_flow_trace(session_id):
        await controller.edit_step(step)
    return _payload(controller)


@app.post("/wizard/{session_id}/submit")
async def submit(session_id: str):
    """Validate the application; stays on review with a notice on failure."""
    controller = _session(session_id)
    with continue_flow_trace(session_id):
        await controller.submit()
    return _payload(controller)


@app.post("/wizard/{session_id}/edit")
async def edit_application(session_id: str):
    controller = _session(session_id)
    with continue_flow_trace(session_id):
        await controller.edit_application()
    return _payload(controller)


@app.post("/wizard/{session_id}/new")
async def start_new_application(session_id: str):
    controller = _session(session_id)
    with continue_flow_trace(session_id):
        await controller.start_new_application()
    clear_flow_trace(session_id)
    return _payload(controller)


@app.post("/wizard/{session_id}/dismiss-notice")
async def dismiss_notice(session_id: str):
    controller = _session(session_id)
    await controller.dismiss_notice()
    return _payload(controller)


@app.get("/wizard/{session_id}/download", response_class=PlainTextResponse)
def download_application(session_id: str):
    """Plain-text application; 409 unless the validation is complete."""
    result = _session(session_id).validation_result
    if result is None:
        raise HTTPException(409, "No validation result yet.")
    return PlainTextResponse(
        render_application_text(result),
        headers={"Content-Disposition": f'attachment; filename="{DOWNLOAD_FILENAME}"'},
    )


# ── Run ─────────────────────────────────────────────────────────────────
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=HOST, port=PORT, reload=True)
