from typing import Any, ClassVar, Dict

from pydantic import Field

from ...core.helpers import build_model
from .base import MAX_DESCRIPTION_LENGTH, SuccessAction, check_length, check_tag


class MessageSuccessAction(SuccessAction):
    tag: ClassVar[str] = "message"

    message: str = Field(..., max_length=MAX_DESCRIPTION_LENGTH)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], *args: Any) -> "MessageSuccessAction":
        check_tag(cls, payload)
        return build_model(
            cls,
            message=check_length(
                payload.get("message"), "message", MAX_DESCRIPTION_LENGTH
            ),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {"tag": self.tag, "message": self.message}
