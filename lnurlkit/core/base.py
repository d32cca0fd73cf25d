from typing import Any, ClassVar, Dict

from pydantic import BaseModel, ConfigDict

from .errors import LnurlStatus
from .helpers import safe_str


class Service(BaseModel):
    """
    Base of every payload an lnurl endpoint can answer with.
    """

    model_config = ConfigDict(frozen=True)

    name: ClassVar[str] = "LNURL Service"

    @classmethod
    def matches(cls, payload: Dict[str, Any]) -> bool:
        raise NotImplementedError

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Service":
        raise NotImplementedError

    def to_payload(self) -> Dict[str, Any]:
        raise NotImplementedError


class ErrorResponse(Service):
    """`{"status": "ERROR", "reason": ...}`, returned by any lnurl endpoint."""

    name: ClassVar[str] = "LNURL Error"

    status: LnurlStatus = LnurlStatus.error
    reason: str = ""

    @classmethod
    def matches(cls, payload: Dict[str, Any]) -> bool:
        return isinstance(payload, dict) and payload.get("status") == "ERROR"

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ErrorResponse":
        return cls(
            status=LnurlStatus.parse(payload.get("status")),
            reason=safe_str(payload.get("reason")),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {"status": self.status.value, "reason": self.reason}
