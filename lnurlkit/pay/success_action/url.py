from typing import TYPE_CHECKING, Any, ClassVar, Dict, Optional

from pydantic import Field, field_validator

from ...core.helpers import build_model, http_url_error, parse_http_url, url_host
from .base import MAX_DESCRIPTION_LENGTH, SuccessAction, check_length, check_tag

if TYPE_CHECKING:
    from ..service import PayService


class UrlSuccessAction(SuccessAction):
    """
    Reveals a url after payment. `origin_domain` is the host of the pay
    request's callback, kept so wallets can warn about urls on other domains.
    """

    tag: ClassVar[str] = "url"

    description: str = Field(default="", max_length=MAX_DESCRIPTION_LENGTH)
    url: str
    origin_domain: Optional[str] = None

    @field_validator("url")
    @classmethod
    def check_url(cls, value: str) -> str:
        reason = http_url_error(value)
        if reason:
            raise ValueError(reason)
        return value.strip()

    @classmethod
    def from_payload(
        cls, payload: Dict[str, Any], origin: Optional["PayService"] = None
    ) -> "UrlSuccessAction":
        check_tag(cls, payload)
        return build_model(
            cls,
            description=check_length(
                payload.get("description"), "description", MAX_DESCRIPTION_LENGTH
            ),
            url=parse_http_url(payload.get("url"), "url"),
            origin_domain=url_host(origin.callback) if origin is not None else None,
        )

    @property
    def is_same_origin(self) -> Optional[bool]:
        """None when the originating service is unknown."""
        if self.origin_domain is None:
            return None
        return url_host(self.url) == self.origin_domain

    def to_payload(self) -> Dict[str, Any]:
        return {"tag": self.tag, "description": self.description, "url": self.url}
