import base64
import json
from typing import Union

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from lnurlkit.core.errors import LnurlError

ADDRESS = "unit@lntest.rblb.it"
ADDRESS_URL = "https://lntest.rblb.it/.well-known/lnurlp/unit"
CALLBACK_URL = "https://lntest.rblb.it/lnurlp/unit/callback"
VERIFY_URL = "https://lntest.rblb.it/lnurlp/unit/verify/abc"

# 1000 sat
payment_request = (
    "lnbc10u1pjap7phpp50s9lzr3477j0tvacpfy2ucrs4q0q6cvn232ex7nt2zqxxxj8gxrsdpv2phhwetjv4jzqcneypqyc6t8dp6xu6twva2xjuzzda6qcqzzsxqrrsss"
    "p575z0n39w2j7zgnpqtdlrgz9rycner4eptjm3lz363dzylnrm3h4s9qyyssqfz8jglcshnlcf0zkw4qu8fyr564lg59x5al724kms3h6gpuhx9xrfv27tgx3l3u3cyf6"
    "3r52u0xmac6max8mdupghfzh84t4hfsvrfsqwnuszf"
)


def pay_payload(**overrides) -> dict:
    payload = {
        "tag": "payRequest",
        "callback": CALLBACK_URL,
        "minSendable": 1000,
        "maxSendable": 1000,
        "metadata": json.dumps(
            [["text/plain", "Pay unit"], ["text/identifier", ADDRESS]]
        ),
        "commentAllowed": 32,
    }
    payload.update(overrides)
    return {k: v for k, v in payload.items() if v is not None}


def aes_encrypt(preimage: str, message: str, iv: bytes) -> str:
    padder = padding.PKCS7(128).padder()
    padded = padder.update(message.encode()) + padder.finalize()
    cipher = Cipher(algorithms.AES(bytes.fromhex(preimage)), modes.CBC(iv))
    encryptor = cipher.encryptor()
    return base64.b64encode(encryptor.update(padded) + encryptor.finalize()).decode()


async def assert_err(f, msg: Union[str, LnurlError]):
    """Compute f() and expect an error message 'msg'."""
    try:
        await f
    except Exception as exc:
        error_message: str = str(exc.args[0])
        if isinstance(msg, LnurlError):
            if msg.detail not in error_message:
                raise Exception(
                    f"LnurlError. Expected error: {msg.detail}, got: {error_message}"
                )
            return
        if msg not in error_message:
            raise Exception(f"Expected error: {msg}, got: {error_message}")
        return
    raise Exception(f"Expected error: {msg}, got no error")
