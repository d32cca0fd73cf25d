import base64
import binascii
from typing import Any, Callable, ClassVar, Dict, Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from loguru import logger
from pydantic import Field

from ...core.errors import DecryptionError, ValidationError
from ...core.helpers import build_model, safe_str
from .base import MAX_DESCRIPTION_LENGTH, SuccessAction, check_length, check_tag

MAX_CIPHERTEXT_LENGTH = 4 * 1024
IV_LENGTH = 24  # base64 of 16 bytes

# (key, iv, ciphertext) -> plaintext
Decryptor = Callable[[bytes, bytes, bytes], bytes]


def aes_cbc_decrypt(key: bytes, iv: bytes, ciphertext: bytes) -> bytes:
    """AES-CBC with PKCS7 padding, the cipher LUD-10 prescribes."""
    cipher = Cipher(algorithms.AES(key), modes.CBC(iv))
    decryptor = cipher.decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(128).unpadder()
    return unpadder.update(padded) + unpadder.finalize()


class AesSuccessAction(SuccessAction):
    """
    LUD-10 encrypted message. Parsing only checks the envelope, the payer
    decrypts with the payment preimage once the invoice is settled.
    """

    tag: ClassVar[str] = "aes"

    description: str = Field(default="", max_length=MAX_DESCRIPTION_LENGTH)
    ciphertext: str = Field(..., max_length=MAX_CIPHERTEXT_LENGTH)
    iv: str = Field(..., min_length=IV_LENGTH, max_length=IV_LENGTH)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], *args: Any) -> "AesSuccessAction":
        check_tag(cls, payload)
        iv = safe_str(payload.get("iv"))
        if len(iv) != IV_LENGTH:
            raise ValidationError(f"must be exactly {IV_LENGTH} characters long", field="iv")
        return build_model(
            cls,
            description=check_length(
                payload.get("description"), "description", MAX_DESCRIPTION_LENGTH
            ),
            ciphertext=check_length(
                payload.get("ciphertext"), "ciphertext", MAX_CIPHERTEXT_LENGTH
            ),
            iv=iv,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "tag": self.tag,
            "description": self.description,
            "ciphertext": self.ciphertext,
            "iv": self.iv,
        }

    def decrypt(self, preimage: str, decryptor: Optional[Decryptor] = None) -> str:
        """Decrypts the message with the hex encoded payment preimage.

        Raises:
            DecryptionError: if the preimage, the envelope or the cipher fails
        """
        decryptor = decryptor or aes_cbc_decrypt
        try:
            key = bytes.fromhex(preimage)
            iv = base64.b64decode(self.iv, validate=True)
            ciphertext = base64.b64decode(self.ciphertext, validate=True)
        except (ValueError, binascii.Error) as exc:
            raise DecryptionError(f"invalid aes success action encoding: {exc}") from exc
        try:
            plaintext = decryptor(key, iv, ciphertext)
            return plaintext.decode("utf-8")
        except DecryptionError:
            raise
        except Exception as exc:
            logger.debug(f"Decrypting aes success action failed: {exc}")
            raise DecryptionError() from exc
