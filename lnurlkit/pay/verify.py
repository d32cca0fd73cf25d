from typing import Any, Dict, Optional

import bolt11
from loguru import logger
from pydantic import BaseModel, ConfigDict

from ..core.helpers import check_payment_preimage, safe_bool, safe_str


class VerifyResult(BaseModel):
    """
    LUD-21 verify response: whether the invoice has been settled and, if so,
    its preimage.
    """

    model_config = ConfigDict(frozen=True)

    settled: bool
    invoice: str
    preimage: Optional[str] = None

    @classmethod
    def matches(cls, payload: Dict[str, Any]) -> bool:
        return isinstance(payload, dict) and "settled" in payload and "pr" in payload

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "VerifyResult":
        preimage = payload.get("preimage")
        return cls(
            settled=safe_bool(payload.get("settled")),
            invoice=safe_str(payload.get("pr")),
            preimage=safe_str(preimage) if preimage is not None else None,
        )

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"settled": self.settled, "pr": self.invoice}
        if self.preimage is not None:
            payload["preimage"] = self.preimage
        return payload

    def is_preimage_valid(self) -> bool:
        """Checks the preimage against the payment hash of the invoice."""
        if not self.preimage:
            return False
        try:
            payment_hash = bolt11.decode(self.invoice).payment_hash
            return check_payment_preimage(payment_hash, self.preimage)
        except Exception as exc:
            logger.debug(f"Could not check preimage of {self.invoice}: {exc}")
            return False
