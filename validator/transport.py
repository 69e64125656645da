"""Validator transports — the opaque `send(message) -> envelope` capability.

Every transport returns the validator's reply envelope
``{"success": bool, "response": ...}`` and maps its own failures onto
RequestError / ServiceError / MalformedResponseError.
"""

import logging
from typing import Any, Optional, Protocol

import httpx
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from config import (
    GOOGLE_API_KEY,
    LLM_MODEL,
    VALIDATOR_AGENT_ID,
    VALIDATOR_BACKEND,
    VALIDATOR_TIMEOUT_SECONDS,
    VALIDATOR_URL,
)
from errors import MalformedResponseError, RequestError, ServiceError
from validator.schemas import ValidationResult

logger = logging.getLogger(__name__)


class ValidatorTransport(Protocol):
    async def send(self, message: str) -> Any:
        """Deliver the request narrative; return the decoded reply envelope."""
        ...


# ── Agent endpoint (default) ────────────────────────────────────────────
class AgentEndpointTransport:
    """POSTs ``message`` + ``agent_id`` as multipart form fields."""

    def __init__(
        self,
        url: str = VALIDATOR_URL,
        agent_id: str = VALIDATOR_AGENT_ID,
        timeout: float = VALIDATOR_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.agent_id = agent_id
        self.timeout = timeout
        self._transport = transport  # injectable for tests

    async def send(self, message: str) -> Any:
        form = {
            "message": (None, message),
            "agent_id": (None, self.agent_id),
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(self.url, files=form)
        except httpx.HTTPError as e:
            logger.warning("validator_request_failed url=%s err=%s", self.url, e)
            raise RequestError(f"Could not reach the validation service: {e}") from e

        if resp.status_code >= 400:
            logger.warning("validator_http_error status=%s body=%s", resp.status_code, resp.text[:300])
            raise ServiceError(f"Validation service returned HTTP {resp.status_code}")

        try:
            return resp.json()
        except ValueError as e:
            raise MalformedResponseError("Validation service did not return JSON") from e


# ── Gemini compliance model ─────────────────────────────────────────────
COMPLIANCE_SYSTEM_PROMPT = (
    "You are a municipal pool permit reviewer. "
    "Check the application against typical residential pool permit requirements: "
    "setbacks, fencing and self-closing gates, depth and diving board clearances, "
    "electrical safety for lighting and heating, and required documents "
    "(Property Deed, Site Plan, Pool Design). "
    "Return a checklist with one entry per requirement (status pass or fail), "
    "echo the property and pool data you validated, report the status of each "
    "document, list missing items, and add compliance notes. "
    "validation_status is 'complete' only when nothing is missing or failing."
)


class GeminiComplianceTransport:
    """Asks a Gemini model for a structured ValidationResult.

    The reply is wrapped in the same envelope the agent endpoint uses, so the
    client parses both backends identically.
    """

    def __init__(self, api_key: str = GOOGLE_API_KEY, model: str = LLM_MODEL, llm=None):
        self.api_key = api_key
        self.model = model
        self._llm = llm

    def _get_llm(self):
        """Lazy — creates the model once, reuses on every call."""
        if self._llm is not None:
            return self._llm
        if not self.api_key:
            raise ServiceError("No GOOGLE_API_KEY configured for the gemini validator backend.")
        self._llm = ChatGoogleGenerativeAI(
            model=self.model,
            google_api_key=self.api_key,
            temperature=0,
        )
        return self._llm

    async def send(self, message: str) -> Any:
        structured_llm = self._get_llm().with_structured_output(ValidationResult)
        try:
            result = await structured_llm.ainvoke(
                [SystemMessage(content=COMPLIANCE_SYSTEM_PROMPT), HumanMessage(content=message)]
            )
        except Exception as e:
            logger.error("gemini_validation_failed model=%s err=%s", self.model, e)
            raise RequestError(f"Compliance model call failed: {e}") from e

        if result is None:
            return {"success": False, "response": None}
        return {"success": True, "response": {"result": result.to_payload()}}


def default_transport() -> ValidatorTransport:
    """Pick the transport named by VALIDATOR_BACKEND."""
    if VALIDATOR_BACKEND == "gemini":
        return GeminiComplianceTransport()
    if VALIDATOR_BACKEND != "agent":
        logger.warning("Unknown VALIDATOR_BACKEND=%r, using agent endpoint", VALIDATOR_BACKEND)
    return AgentEndpointTransport()
