"""Wizard Controller — the user-facing surface over the wizard graph.

One controller = one application session = one graph thread.  Actions are
processed one at a time; while a submission is in flight every action
(including another submit) is ignored.
"""

import asyncio
import logging
import time
import uuid
from typing import Any, Dict, Iterable, List, Optional

from langgraph.types import Command
from pydantic import BaseModel

from errors import UploadReadError, ValidationBlocked
from staging.blob_store import DocumentBlobStore
from staging.document_stage import DocumentStage
from staging.upload_reader import UploadedDocument, check_category, read_upload
from validator.presenter import ResultView, present_result
from validator.schemas import ValidationResult
from wizard import transitions as actions
from wizard.fields import PoolInfo, PropertyInfo, validate_field_edit
from wizard.gate import can_advance
from wizard.state import PermitState, initial_state, step_progress

logger = logging.getLogger(__name__)


# ── Read-only projections for UIs ───────────────────────────────────────
class DocumentSummary(BaseModel):
    id: str
    name: str
    category: str
    content_type: str
    size: int
    preview: Optional[str] = None


class WizardView(BaseModel):
    screen: str
    step: str
    progress: int
    can_advance: bool
    is_submitting: bool
    property: PropertyInfo
    pool: PoolInfo
    documents: List[DocumentSummary]
    notice: Optional[Dict[str, str]] = None
    validation_result: Optional[ValidationResult] = None
    results: Optional[ResultView] = None


class WizardController:
    def __init__(self, graph, thread_id: Optional[str] = None):
        self.graph = graph
        self.thread_id = thread_id or str(uuid.uuid4())
        self.config = {"configurable": {"thread_id": self.thread_id}}
        self.blobs = DocumentBlobStore()
        self.last_active = time.monotonic()
        self._lock = asyncio.Lock()
        self._submitting = False

    # ── Graph plumbing ──────────────────────────────────────────────────
    def _values(self) -> PermitState:
        snapshot = self.graph.get_state(self.config)
        if snapshot and snapshot.values:
            return snapshot.values
        return initial_state()

    def pending_prompt(self) -> Optional[dict]:
        """Extract the pending interrupt payload, if any."""
        snapshot = self.graph.get_state(self.config)
        if snapshot and snapshot.tasks:
            for task in snapshot.tasks:
                if hasattr(task, "interrupts") and task.interrupts:
                    return task.interrupts[0].value
        return None

    async def _ensure_started(self) -> None:
        snapshot = await self.graph.aget_state(self.config)
        if not snapshot or not snapshot.values:
            await self.graph.ainvoke(initial_state(), self.config)

    async def _dispatch(self, action: Dict[str, Any]) -> PermitState:
        async with self._lock:
            await self._ensure_started()
            logger.debug("thread=%s action=%s", self.thread_id, action.get("type"))
            await self.graph.ainvoke(Command(resume=action), self.config)
            self.last_active = time.monotonic()
            state = self._values()
            self.blobs.retain(DocumentStage(state["documents"]).ids())
            return state

    async def _restart_thread(self) -> None:
        """Delete the thread's checkpoint history and run a fresh one to landing."""
        async with self._lock:
            self.graph.checkpointer.delete_thread(self.thread_id)
            self.blobs.clear()
            await self.graph.ainvoke(initial_state(), self.config)
            self.last_active = time.monotonic()

    def _ignored_while_submitting(self, name: str) -> bool:
        if self._submitting:
            logger.info("Ignoring '%s' while a submission is in flight", name)
            return True
        return False

    # ── Actions ─────────────────────────────────────────────────────────
    async def start(self) -> "WizardView":
        """Run the graph up to the landing screen."""
        async with self._lock:
            await self._ensure_started()
        return self.view()

    async def start_application(self) -> "WizardView":
        if not self._ignored_while_submitting(actions.START_APPLICATION):
            await self._dispatch({"type": actions.START_APPLICATION})
        return self.view()

    async def edit_field(self, entity: str, key: str, value: Any) -> "WizardView":
        if self._ignored_while_submitting(actions.EDIT_FIELD):
            return self.view()
        name, value = validate_field_edit(entity, key, value)
        await self._dispatch({"type": actions.EDIT_FIELD, "entity": entity, "key": name, "value": value})
        return self.view()

    async def upload_document(self, category: str, source: Any) -> UploadedDocument:
        """Read one file and stage it; raises UploadReadError if unreadable."""
        check_category(category)
        document = await read_upload(category, source)
        if not self._ignored_while_submitting(actions.UPLOAD_DOCUMENT):
            await self._stage(document)
        return document

    async def _stage(self, document: UploadedDocument) -> None:
        # Only the metadata record goes through the graph; bytes stay in the blob store
        record = self.blobs.put(document)
        await self._dispatch({"type": actions.UPLOAD_DOCUMENT, "document": record.model_dump()})

    async def upload_documents(self, category: str, sources: Iterable[Any]) -> List[UploadedDocument]:
        """
        Read several files concurrently, each targeting `category`.
        Readable files are staged in order (last one wins); the first read
        failure is raised after the others have been applied.
        """
        check_category(category)
        outcomes = await asyncio.gather(
            *(read_upload(category, source) for source in sources),
            return_exceptions=True,
        )
        staged: List[UploadedDocument] = []
        failure: Optional[UploadReadError] = None
        for outcome in outcomes:
            if isinstance(outcome, UploadReadError):
                failure = failure or outcome
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            if self._ignored_while_submitting(actions.UPLOAD_DOCUMENT):
                break
            await self._stage(outcome)
            staged.append(outcome)
        if failure is not None:
            raise failure
        return staged

    async def remove_document(self, document_id: str) -> "WizardView":
        if not self._ignored_while_submitting(actions.REMOVE_DOCUMENT):
            await self._dispatch({"type": actions.REMOVE_DOCUMENT, "document_id": document_id})
        return self.view()

    async def go_next(self) -> "WizardView":
        """Advance one step; raises ValidationBlocked if the step is incomplete."""
        if self._ignored_while_submitting(actions.GO_NEXT):
            return self.view()
        state = self._values()
        if state["screen"] == "form" and not self.can_advance:
            raise ValidationBlocked(state["form_step"])
        await self._dispatch({"type": actions.GO_NEXT})
        return self.view()

    async def go_previous(self) -> "WizardView":
        if not self._ignored_while_submitting(actions.GO_PREVIOUS):
            await self._dispatch({"type": actions.GO_PREVIOUS})
        return self.view()

    async def edit_step(self, step: str) -> "WizardView":
        """From review, jump back to `step` to change it."""
        if not self._ignored_while_submitting(actions.EDIT_STEP):
            await self._dispatch({"type": actions.EDIT_STEP, "step": step})
        return self.view()

    async def submit(self) -> "WizardView":
        """
        Send the application to the validator.  Completes only after the
        round-trip resolves; a failure leaves the wizard on review with a notice.
        """
        if self._ignored_while_submitting(actions.SUBMIT):
            return self.view()
        self._submitting = True
        try:
            await self._dispatch({"type": actions.SUBMIT})
        finally:
            self._submitting = False
        return self.view()

    async def edit_application(self) -> "WizardView":
        if not self._ignored_while_submitting(actions.EDIT_APPLICATION):
            await self._dispatch({"type": actions.EDIT_APPLICATION})
        return self.view()

    async def start_new_application(self) -> "WizardView":
        if not self._ignored_while_submitting(actions.START_NEW_APPLICATION):
            await self._dispatch({"type": actions.START_NEW_APPLICATION})
            # Drop the finished application's checkpoints along with its files
            await self._restart_thread()
        return self.view()

    async def dismiss_notice(self) -> "WizardView":
        if not self._ignored_while_submitting(actions.DISMISS_NOTICE):
            await self._dispatch({"type": actions.DISMISS_NOTICE})
        return self.view()

    async def close(self) -> None:
        """Release everything the session holds: checkpoints and file bytes."""
        async with self._lock:
            self.graph.checkpointer.delete_thread(self.thread_id)
            self.blobs.clear()

    # ── Projections ─────────────────────────────────────────────────────
    @property
    def current_screen(self) -> str:
        return self._values()["screen"]

    @property
    def current_step(self) -> str:
        return self._values()["form_step"]

    @property
    def can_advance(self) -> bool:
        state = self._values()
        if state["screen"] != "form":
            return False
        return can_advance(state["form_step"], state["property"], state["pool"], state["documents"])

    @property
    def documents(self) -> DocumentStage:
        return DocumentStage(self._values()["documents"])

    @property
    def validation_result(self) -> Optional[ValidationResult]:
        payload = self._values().get("validation_result")
        return ValidationResult.from_payload(payload) if payload else None

    def document_file(self, document_id: str) -> Optional[UploadedDocument]:
        """The staged file with its bytes, or None once it has been released."""
        return self.blobs.get(document_id)

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    @property
    def notice(self) -> Optional[Dict[str, str]]:
        return self._values().get("notice")

    def snapshot(self) -> PermitState:
        """Raw state values, as checkpointed."""
        return self._values()

    def _preview(self, document_id: str) -> Optional[str]:
        document = self.blobs.get(document_id)
        return document.preview if document else None

    def view(self) -> WizardView:
        state = self._values()
        result = self.validation_result
        documents = [
            DocumentSummary(
                id=doc.id,
                name=doc.name,
                category=doc.category,
                content_type=doc.content_type,
                size=doc.size,
                preview=self._preview(doc.id),
            )
            for doc in self.documents
        ]
        return WizardView(
            screen=state["screen"],
            step=state["form_step"],
            progress=step_progress(state["form_step"]),
            can_advance=self.can_advance,
            is_submitting=self._submitting,
            property=PropertyInfo.model_validate(state["property"]),
            pool=PoolInfo.model_validate(state["pool"]),
            documents=documents,
            notice=state.get("notice"),
            validation_result=result,
            results=present_result(result) if result and state["screen"] == "results" else None,
        )
