from typing import Any, ClassVar, Dict, Optional

from pydantic import BaseModel, ConfigDict

from ...core.errors import ValidationError
from ...core.helpers import safe_str

MAX_DESCRIPTION_LENGTH = 144


class SuccessAction(BaseModel):
    """
    LUD-09 success action, shown to the payer once the invoice is paid.
    """

    model_config = ConfigDict(frozen=True)

    tag: ClassVar[str]

    @classmethod
    def matches(cls, payload: Dict[str, Any]) -> bool:
        return isinstance(payload, dict) and payload.get("tag") == cls.tag

    def to_payload(self) -> Dict[str, Any]:
        raise NotImplementedError


def check_length(value: Any, field: str, max_length: int) -> str:
    value = safe_str(value)
    if len(value) > max_length:
        raise ValidationError(f"cannot exceed {max_length} characters", field=field)
    return value


def check_tag(cls, payload: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not isinstance(payload, dict) or not cls.matches(payload):
        raise ValidationError(f"expected '{cls.tag}'", field="tag")
    return payload
