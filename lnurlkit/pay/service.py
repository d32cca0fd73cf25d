import hashlib
import json
from typing import TYPE_CHECKING, Any, ClassVar, Dict, List, Optional, Tuple

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from ..core.base import Service
from ..core.errors import AmountOutOfRangeError, ValidationError
from ..core.helpers import (
    append_query,
    build_model,
    http_url_error,
    parse_http_url,
    safe_int,
    safe_str,
)
from .payer_data import PayerData, parse_template

if TYPE_CHECKING:
    from ..client import LnurlClient
    from .response import PaymentResponse

TAG = "payRequest"
MAX_METADATA_SIZE = 1024 * 1024  # 1 MiB

# metadata types whose value is always a string
STR_METADATA_TYPES = (
    "text/plain",
    "text/long-desc",
    "image/png;base64",
    "image/jpeg;base64",
)

# model field -> payload key
FIELD_NAMES = {
    "min_sendable": "minSendable",
    "max_sendable": "maxSendable",
    "comment_allowed": "commentAllowed",
    "payer_data_spec": "payerData",
    "raw_metadata": "metadata",
}


class Metadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    value: Any

    def to_payload(self) -> List[Any]:
        return [self.type, self.value]


def parse_metadata(raw: Any) -> Tuple[Metadata, ...]:
    """Parses the LUD-06 `metadata` string, a JSON array of `[type, value]` pairs.

    Raises:
        ValidationError: on a missing, empty, oversized or malformed string, or if
            the first entry is not `text/plain`
    """
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError("missing or empty", field="metadata")
    if len(raw) > MAX_METADATA_SIZE:
        raise ValidationError(
            f"exceeds maximum size of {MAX_METADATA_SIZE} bytes", field="metadata"
        )
    try:
        entries = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"not valid json ({exc})", field="metadata") from exc
    if not isinstance(entries, list):
        raise ValidationError("expected a json array", field="metadata")

    metadata: List[Metadata] = []
    for entry in entries:
        if not isinstance(entry, list) or len(entry) != 2:
            logger.warning(f"Skipping malformed metadata entry: {entry!r}")
            continue
        type_, value = safe_str(entry[0]), entry[1]
        if type_ in STR_METADATA_TYPES:
            value = safe_str(value)
        metadata.append(Metadata(type=type_, value=value))

    if not metadata:
        raise ValidationError("no entries", field="metadata")
    if metadata[0].type != "text/plain":
        raise ValidationError(
            "first metadata item must be of type 'text/plain'", field="metadata"
        )
    return tuple(metadata)


class PayService(Service):
    """
    LNURL pay request (LUD-06), with comments (LUD-12), success actions (LUD-09)
    and payer data (LUD-18). Amounts are in millisatoshis.
    """

    name: ClassVar[str] = "LNURL Pay Request"
    tag: ClassVar[str] = TAG

    min_sendable: int = Field(..., ge=1)
    max_sendable: int = Field(..., ge=1)
    callback: str
    metadata: Tuple[Metadata, ...] = Field(..., min_length=1)
    comment_allowed: int = Field(default=0, ge=0)
    payer_data_spec: Dict[str, bool] = {}
    raw_metadata: Optional[str] = Field(default=None, max_length=MAX_METADATA_SIZE)

    @field_validator("max_sendable")
    @classmethod
    def check_range(cls, value: int, info: ValidationInfo) -> int:
        min_sendable = info.data.get("min_sendable")
        if min_sendable is not None and min_sendable > value:
            raise ValueError(f"invalid sendable range: {min_sendable} - {value}")
        return value

    @field_validator("callback")
    @classmethod
    def check_callback(cls, value: str) -> str:
        reason = http_url_error(value)
        if reason:
            raise ValueError(reason)
        return value.strip()

    @field_validator("metadata")
    @classmethod
    def check_metadata(cls, value: Tuple[Metadata, ...]) -> Tuple[Metadata, ...]:
        if value and value[0].type != "text/plain":
            raise ValueError("first metadata item must be of type 'text/plain'")
        return value

    @classmethod
    def matches(cls, payload: Dict[str, Any]) -> bool:
        return isinstance(payload, dict) and payload.get("tag") == TAG

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "PayService":
        """Validates and parses a payRequest payload.

        Raises:
            ValidationError: naming the first field that violates the protocol
        """
        if not cls.matches(payload):
            raise ValidationError(f"expected '{TAG}'", field="tag")

        max_sendable = safe_int(payload.get("maxSendable"), "maxSendable")
        min_sendable = safe_int(payload.get("minSendable"), "minSendable")
        if min_sendable < 1 or min_sendable > max_sendable:
            raise ValidationError(
                f"invalid sendable range: {min_sendable} - {max_sendable}",
                field="minSendable",
            )

        callback = parse_http_url(payload.get("callback"), "callback")

        raw_metadata = payload.get("metadata")
        metadata = parse_metadata(raw_metadata)

        comment_allowed = payload.get("commentAllowed")
        comment_allowed = (
            0 if comment_allowed is None else safe_int(comment_allowed, "commentAllowed")
        )
        if comment_allowed < 0:
            raise ValidationError("must not be negative", field="commentAllowed")

        return build_model(
            cls,
            FIELD_NAMES,
            min_sendable=min_sendable,
            max_sendable=max_sendable,
            callback=callback,
            metadata=metadata,
            comment_allowed=comment_allowed,
            payer_data_spec=parse_template(payload.get("payerData")),
            raw_metadata=raw_metadata,
        )

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "tag": TAG,
            "callback": self.callback,
            "minSendable": self.min_sendable,
            "maxSendable": self.max_sendable,
            "metadata": self.metadata_string,
        }
        if self.comment_allowed > 0:
            payload["commentAllowed"] = self.comment_allowed
        if self.payer_data_spec:
            payload["payerData"] = {
                key: {"mandatory": mandatory}
                for key, mandatory in self.payer_data_spec.items()
            }
        return payload

    # ------- METADATA -------

    @property
    def metadata_string(self) -> str:
        if self.raw_metadata is not None:
            return self.raw_metadata
        return json.dumps([m.to_payload() for m in self.metadata])

    @property
    def metadata_hash(self) -> str:
        """sha256 of the metadata string, the expected invoice description hash."""
        return hashlib.sha256(self.metadata_string.encode("utf-8")).hexdigest()

    def _metadata_value(self, *types: str) -> Optional[Any]:
        for entry in self.metadata:
            if entry.type in types:
                return entry.value
        return None

    @property
    def description(self) -> str:
        return safe_str(self._metadata_value("text/plain"))

    @property
    def long_description(self) -> Optional[str]:
        return self._metadata_value("text/long-desc")

    @property
    def image(self) -> Optional[Tuple[str, str]]:
        """(mime type, base64 data) of the first image, if any."""
        for entry in self.metadata:
            if entry.type in ("image/png;base64", "image/jpeg;base64"):
                return entry.type.split(";")[0], entry.value
        return None

    @property
    def identifier(self) -> Optional[str]:
        return self._metadata_value("text/identifier")

    @property
    def email(self) -> Optional[str]:
        return self._metadata_value("text/email")

    # ------- PAYMENT -------

    @property
    def is_comment_allowed(self) -> bool:
        return self.comment_allowed > 0

    def can_send(self, amount: int) -> bool:
        return self.min_sendable <= amount <= self.max_sendable

    def payer_data_template(self) -> PayerData:
        return PayerData.from_template(
            {key: {"mandatory": m} for key, m in self.payer_data_spec.items()}
        )

    def build_callback(
        self,
        amount: int,
        comment: Optional[str] = None,
        payer_data: Optional[PayerData] = None,
    ) -> str:
        """Returns the callback url requesting an invoice for `amount` msat.

        Raises:
            AmountOutOfRangeError: if the service does not accept `amount`
            ValidationError: if a comment is not allowed or too long, or payer
                data lacks a field the service requires
        """
        if not self.can_send(amount):
            raise AmountOutOfRangeError(amount, self.min_sendable, self.max_sendable)
        params = {"amount": str(amount)}
        if comment:
            if not self.is_comment_allowed:
                raise ValidationError("service does not accept comments", field="comment")
            if len(comment) > self.comment_allowed:
                raise ValidationError(
                    f"exceeds maximum length of {self.comment_allowed} characters",
                    field="comment",
                )
            params["comment"] = comment
        if payer_data is not None:
            required = [key for key, mandatory in self.payer_data_spec.items() if mandatory]
            missing = PayerData(payer_data).missing(required)
            if missing:
                raise ValidationError(
                    f"missing mandatory fields: {', '.join(sorted(missing))}",
                    field="payerData",
                )
            params["payerdata"] = json.dumps(payer_data, separators=(",", ":"))
        return append_query(self.callback, params)

    async def fetch_invoice(
        self,
        amount: int,
        comment: Optional[str] = None,
        payer_data: Optional[PayerData] = None,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        client: Optional["LnurlClient"] = None,
    ) -> "PaymentResponse":
        from ..client import LnurlClient

        client = client or LnurlClient()
        return await client.fetch_invoice(
            self,
            amount,
            comment=comment,
            payer_data=payer_data,
            timeout=timeout,
            headers=headers,
        )
