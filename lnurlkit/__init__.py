from .client import LnurlClient
from .core.base import ErrorResponse, Service
from .core.errors import (
    AmountOutOfRangeError,
    CodecError,
    DecryptionError,
    FormatError,
    InvalidResponseError,
    LnurlError,
    LnurlStatus,
    NotVerifiableError,
    RemoteError,
    ServiceNotFoundError,
    TransportError,
    ValidationError,
)
from .core.lnurl import LnAddress, LnUrl, parse_identifier
from .pay import (
    Metadata,
    PayerData,
    PayerDataAuth,
    PaymentResponse,
    PayService,
    VerifyResult,
)
from .pay.success_action import (
    AesSuccessAction,
    MessageSuccessAction,
    SuccessAction,
    SuccessActionRegistry,
    UrlSuccessAction,
)
from .services import ServiceRegistry, parse_service

__all__ = [
    "AesSuccessAction",
    "AmountOutOfRangeError",
    "CodecError",
    "DecryptionError",
    "ErrorResponse",
    "FormatError",
    "InvalidResponseError",
    "LnAddress",
    "LnUrl",
    "LnurlClient",
    "LnurlError",
    "LnurlStatus",
    "MessageSuccessAction",
    "Metadata",
    "NotVerifiableError",
    "PayService",
    "PayerData",
    "PayerDataAuth",
    "PaymentResponse",
    "RemoteError",
    "Service",
    "ServiceNotFoundError",
    "ServiceRegistry",
    "SuccessAction",
    "SuccessActionRegistry",
    "TransportError",
    "UrlSuccessAction",
    "ValidationError",
    "VerifyResult",
    "parse_identifier",
    "parse_service",
]
