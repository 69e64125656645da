"""ValidationResult schema — what the external validator sends back."""

import copy
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from wizard.fields import PoolInfo, PropertyInfo


class ChecklistItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    item: str
    status: Literal["pass", "fail"]
    details: Optional[str] = None


class DocumentStatus(BaseModel):
    model_config = ConfigDict(extra="allow")

    uploaded: bool
    status: str


class ValidationResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    validation_status: Literal["complete", "incomplete"]
    validation_checklist: List[ChecklistItem]
    property_summary: PropertyInfo
    pool_summary: PoolInfo
    document_status: Dict[str, DocumentStatus] = Field(default_factory=dict)
    missing_items: List[str] = Field(default_factory=list)
    compliance_notes: List[str] = Field(default_factory=list)

    _payload: Optional[Dict[str, Any]] = PrivateAttr(default=None)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ValidationResult":
        """Validate a reply payload and remember it exactly as received."""
        result = cls.model_validate(payload)
        result._payload = copy.deepcopy(payload)
        return result

    @property
    def is_complete(self) -> bool:
        return self.validation_status == "complete"

    def to_payload(self) -> dict:
        """The result as received: original keys and values, nothing added.

        A result built in Python (structured model output) has no received
        payload and is dumped with wire names instead.
        """
        if self._payload is not None:
            return copy.deepcopy(self._payload)
        return self.model_dump(by_alias=True, exclude_unset=True)
