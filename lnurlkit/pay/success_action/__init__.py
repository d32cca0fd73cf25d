from .aes import AesSuccessAction, Decryptor, aes_cbc_decrypt
from .base import SuccessAction
from .message import MessageSuccessAction
from .registry import SuccessActionRegistry
from .url import UrlSuccessAction

__all__ = [
    "AesSuccessAction",
    "Decryptor",
    "MessageSuccessAction",
    "SuccessAction",
    "SuccessActionRegistry",
    "UrlSuccessAction",
    "aes_cbc_decrypt",
]
