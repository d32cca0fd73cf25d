from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .base import ErrorResponse


class LnurlStatus(Enum):
    ok = "OK"
    error = "ERROR"
    not_found = "NOT_FOUND"
    invalid = "INVALID"

    def __str__(self):
        return self.name

    @classmethod
    def parse(cls, value: Any) -> "LnurlStatus":
        """Lenient parse of a status field, unknown values count as errors."""
        if isinstance(value, str):
            for status in cls:
                if status.value == value.upper():
                    return status
        return cls.error


class LnurlError(Exception):
    detail: str = "lnurl error"
    status: LnurlStatus = LnurlStatus.error

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.detail)
        self.detail = detail or self.detail


class FormatError(LnurlError):
    detail = "malformed identifier"
    status = LnurlStatus.invalid


class CodecError(LnurlError):
    detail = "bech32 decoding failed"
    status = LnurlStatus.invalid


class ValidationError(LnurlError):
    detail = "invalid payload"
    status = LnurlStatus.invalid

    def __init__(self, detail: Optional[str] = None, field: Optional[str] = None):
        if field and detail:
            detail = f"{field}: {detail}"
        super().__init__(detail)
        self.field = field


class AmountOutOfRangeError(LnurlError):
    status = LnurlStatus.invalid

    def __init__(self, amount: int, min_sendable: int, max_sendable: int):
        self.amount = amount
        self.min_sendable = min_sendable
        self.max_sendable = max_sendable
        super().__init__(
            f"Amount {amount} msat is not within the allowed range:"
            f" {min_sendable} - {max_sendable} msat"
        )


class ServiceNotFoundError(LnurlError):
    detail = "no lnurl service found"
    status = LnurlStatus.not_found


class TransportError(LnurlError):
    detail = "lnurl request failed"

    def __init__(
        self,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
        body: Optional[bytes] = None,
    ):
        super().__init__(detail)
        self.status_code = status_code
        self.body = body


class InvalidResponseError(LnurlError):
    detail = "invalid lnurl response"
    status = LnurlStatus.invalid


class RemoteError(LnurlError):
    """The service answered with an explicit `{"status": "ERROR"}` payload.

    The reason is chosen by the remote party and should be shown to users as
    such, never as a statement of this library.
    """

    def __init__(self, response: "ErrorResponse"):
        self.response = response
        self.status = response.status
        self.reason = response.reason
        super().__init__(f"Remote error: {response.reason} (Status: {response.status})")


class NotVerifiableError(LnurlError):
    detail = "payment response has no verify url"
    status = LnurlStatus.invalid


class DecryptionError(LnurlError):
    detail = "could not decrypt success action"
    status = LnurlStatus.invalid
