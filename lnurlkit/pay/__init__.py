from .payer_data import PayerData, PayerDataAuth
from .response import PaymentResponse
from .service import Metadata, PayService
from .verify import VerifyResult

__all__ = [
    "Metadata",
    "PayService",
    "PayerData",
    "PayerDataAuth",
    "PaymentResponse",
    "VerifyResult",
]
