"""
LUD-06 wire format: an LNURL is the UTF-8 encoded URL, bech32 encoded under the
human readable part "lnurl".
"""

from typing import List, Optional, Tuple

import bech32
import httpx
from loguru import logger

from .errors import CodecError, FormatError

HRP = "lnurl"
LIGHTNING_PREFIX = "lightning:"

# BIP-173 caps bech32 strings at 90 characters, LNURLs are usually longer
BIP173_MAX_LENGTH = 90
CHECKSUM_LENGTH = 6


def _bech32_decode_unbounded(bech: str) -> Tuple[Optional[str], Optional[List[int]]]:
    if any(ord(x) < 33 or ord(x) > 126 for x in bech):
        return None, None
    pos = bech.rfind("1")
    if pos < 1 or pos + CHECKSUM_LENGTH + 1 > len(bech):
        return None, None
    if not all(x in bech32.CHARSET for x in bech[pos + 1 :]):
        return None, None
    hrp = bech[:pos]
    data = [bech32.CHARSET.find(x) for x in bech[pos + 1 :]]
    if not bech32.bech32_verify_checksum(hrp, data):
        return None, None
    return hrp, data[:-CHECKSUM_LENGTH]


def _bech32_decode(bech: str) -> Tuple[Optional[str], Optional[List[int]]]:
    if len(bech) > BIP173_MAX_LENGTH:
        return _bech32_decode_unbounded(bech)
    return bech32.bech32_decode(bech)


def strip_lightning_prefix(value: str) -> str:
    value = value.strip()
    if value.lower().startswith(LIGHTNING_PREFIX):
        value = value[len(LIGHTNING_PREFIX) :]
    return value


def decode(lnurl: str) -> str:
    """Decodes a bech32 LNURL into its plain URL.

    Args:
        lnurl (str): bech32 string, optionally prefixed with "lightning:"

    Returns:
        str: The decoded URL

    Raises:
        CodecError: if the checksum, the prefix or the payload is invalid
    """
    bech = strip_lightning_prefix(lnurl.lower())
    try:
        hrp, data = _bech32_decode(bech)
        if hrp is None or data is None:
            raise CodecError("invalid bech32 string or checksum")
        if hrp != HRP:
            raise CodecError(f"unexpected human readable part: {hrp}")
        decoded = bech32.convertbits(data, 5, 8, False)
        if decoded is None:
            raise CodecError("invalid bech32 data range")
        url = bytes(decoded).decode("utf-8")
    except CodecError:
        raise
    except Exception as exc:
        raise CodecError(f"could not decode lnurl: {exc}") from exc
    logger.trace(f"Decoded lnurl {bech} to {url}")
    return url


def encode(url: str) -> str:
    """Encodes a URL into a lower-case bech32 LNURL.

    Raises:
        FormatError: if the URL contains a NUL byte
        CodecError: if the bech32 encoder fails
    """
    if "\x00" in url:
        raise FormatError("url must not contain NUL bytes")
    try:
        data = bech32.convertbits(url.encode("utf-8"), 8, 5, True)
        if data is None:
            raise CodecError("invalid url bytes")
        bech = bech32.bech32_encode(HRP, data)
    except CodecError:
        raise
    except Exception as exc:
        raise CodecError(f"could not encode lnurl: {exc}") from exc
    if bech is None:
        raise CodecError("could not encode lnurl")
    return bech


def tag_of(url: str) -> Optional[str]:
    """Returns the URL-decoded `tag` query parameter of `url`, if any."""
    try:
        return httpx.URL(url).params.get("tag")
    except httpx.InvalidURL as exc:
        raise FormatError(f"invalid url: {url} ({exc})") from exc
