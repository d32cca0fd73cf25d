from typing import TYPE_CHECKING, Any, Dict, Optional

import bolt11
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.errors import InvalidResponseError, ValidationError
from ..core.helpers import build_model, http_url_error, parse_http_url, safe_bool
from .success_action import SuccessAction, SuccessActionRegistry
from .verify import VerifyResult

if TYPE_CHECKING:
    from ..client import LnurlClient
    from .service import PayService

# model field -> payload key
FIELD_NAMES = {"invoice": "pr", "verify_url": "verify", "success_action": "successAction"}


class PaymentResponse(BaseModel):
    """
    Answer of a pay request callback: the invoice to pay (`pr`), whether it
    may be reused (LUD-11), an optional LUD-21 verify url and an optional
    LUD-09 success action.
    """

    model_config = ConfigDict(frozen=True)

    invoice: str = Field(..., min_length=1)
    disposable: bool = True
    verify_url: Optional[str] = None
    success_action: Optional[SuccessAction] = None

    @field_validator("verify_url")
    @classmethod
    def check_verify_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        reason = http_url_error(value)
        if reason:
            raise ValueError(reason)
        return value.strip()

    @classmethod
    def matches(cls, payload: Dict[str, Any]) -> bool:
        """A non-empty `pr` string and no `tag`."""
        if not isinstance(payload, dict) or "tag" in payload:
            return False
        invoice = payload.get("pr")
        return isinstance(invoice, str) and bool(invoice)

    @classmethod
    def from_payload(
        cls,
        payload: Dict[str, Any],
        origin: Optional["PayService"] = None,
        success_actions: Optional[SuccessActionRegistry] = None,
    ) -> "PaymentResponse":
        """
        Raises:
            ValidationError: if `pr`, `verify` or a recognized success action is
                invalid
        """
        invoice = payload.get("pr")
        if not isinstance(invoice, str) or not invoice:
            raise ValidationError("missing or empty", field="pr")

        verify_url = payload.get("verify")
        if verify_url is not None:
            verify_url = parse_http_url(verify_url, "verify")

        success_action = None
        raw_action = payload.get("successAction")
        if raw_action is not None:
            if not isinstance(raw_action, dict):
                raise ValidationError("expected an object", field="successAction")
            registry = (
                SuccessActionRegistry.with_defaults()
                if success_actions is None
                else success_actions
            )
            success_action = registry.resolve(raw_action, origin)

        return build_model(
            cls,
            FIELD_NAMES,
            invoice=invoice,
            disposable=safe_bool(payload.get("disposable"), default=True),
            verify_url=verify_url,
            success_action=success_action,
        )

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"pr": self.invoice, "disposable": self.disposable}
        if self.verify_url is not None:
            payload["verify"] = self.verify_url
        if self.success_action is not None:
            payload["successAction"] = self.success_action.to_payload()
        return payload

    @property
    def invoice_amount_msat(self) -> Optional[int]:
        """
        Raises:
            InvalidResponseError: if the invoice cannot be decoded
        """
        try:
            return bolt11.decode(self.invoice).amount_msat
        except Exception as exc:
            raise InvalidResponseError(f"could not decode invoice: {exc}") from exc

    def check_amount(self, amount_msat: int) -> bool:
        return self.invoice_amount_msat == amount_msat

    @property
    def is_verifiable(self) -> bool:
        return self.verify_url is not None

    async def verify(
        self, timeout: Optional[float] = None, client: Optional["LnurlClient"] = None
    ) -> VerifyResult:
        from ..client import LnurlClient

        client = client or LnurlClient()
        return await client.verify(self, timeout=timeout)
