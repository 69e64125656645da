"""Validation Client — shapes the request and parses the validator's reply.

The client does no compliance checking of its own:
  ✅ Builds one deterministic narrative from the fields + staged categories
  ✅ Parses the reply envelope into a ValidationResult, all-or-nothing
  ❌ NOT deciding whether the application satisfies permit rules
"""

import json
import logging
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from errors import MalformedResponseError, ServiceError
from prompts.validation_prompts import build_validation_message
from staging.upload_reader import DocumentRecord
from validator.schemas import ValidationResult
from validator.transport import ValidatorTransport, default_transport
from wizard.fields import PoolInfo, PropertyInfo

logger = logging.getLogger(__name__)


def _as_result(candidate: Any) -> Optional[ValidationResult]:
    """Try one payload shape; None if it does not fit the schema."""
    if isinstance(candidate, str):
        try:
            candidate = json.loads(candidate)
        except ValueError:
            return None
    if not isinstance(candidate, dict):
        return None
    try:
        return ValidationResult.from_payload(candidate)
    except ValidationError as e:
        logger.debug("Payload did not match ValidationResult: %s", e)
        return None


def parse_validation_response(envelope: Any) -> ValidationResult:
    """
    Accepts ``{success, response: {result}}`` or ``{success, response}``.
    Raises ServiceError on ``success: false``, MalformedResponseError otherwise.
    """
    if not isinstance(envelope, dict) or "success" not in envelope:
        raise MalformedResponseError("Reply is not a validator envelope")
    if envelope["success"] is not True:
        raise ServiceError(str(envelope.get("error") or "Validation service reported a failure"))

    response = envelope.get("response")
    if not response:
        raise MalformedResponseError("Reply carries no response payload")

    if isinstance(response, dict) and "result" in response:
        result = _as_result(response["result"])
        if result is not None:
            return result
    result = _as_result(response)
    if result is not None:
        return result
    raise MalformedResponseError("Response payload is not a validation result")


class ValidationClient:
    """submit(property, pool, documents) -> ValidationResult."""

    def __init__(self, transport: Optional[ValidatorTransport] = None):
        self.transport = transport or default_transport()

    async def submit(
        self,
        property_info: PropertyInfo,
        pool: PoolInfo,
        documents: Iterable[DocumentRecord],
    ) -> ValidationResult:
        categories = [doc.category for doc in documents]
        message = build_validation_message(property_info, pool, categories)
        logger.info("Submitting application for %s (%d documents)", property_info.address, len(categories))

        envelope = await self.transport.send(message)
        result = parse_validation_response(envelope)
        logger.info(
            "Validation %s: %d checklist items, %d missing",
            result.validation_status,
            len(result.validation_checklist),
            len(result.missing_items),
        )
        return result
