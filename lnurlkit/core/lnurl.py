from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

import httpx
from loguru import logger

from . import codec, lud16
from .errors import FormatError

if TYPE_CHECKING:
    from ..client import LnurlClient
    from .base import Service


def _check_url(url: str) -> str:
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise FormatError(f"invalid url: {url} ({exc})") from exc
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise FormatError(f"not an http(s) url: {url}")
    return url


@dataclass(frozen=True, eq=False)
class LnUrl:
    """
    An LNURL (LUD-06) or a LUD-17 scheme url, kept both as bech32 and as
    plain url.
    """

    bech32: str
    url: str
    tag: Optional[str] = None

    @classmethod
    def decode(cls, lnurl: str) -> "LnUrl":
        """Parses a bech32 LNURL, a `lightning:` link, a LUD-17 url
        (`lnurlp://...`) or a LUD-01 fallback url (`https://...?lightning=LNURL1...`).

        Raises:
            FormatError: if the decoded url is not an http(s) url
            CodecError: if the bech32 string is invalid
        """
        value = codec.strip_lightning_prefix(lnurl.strip())

        resolved = lud16.resolve(value)
        if resolved is not None:
            url, tag = resolved
            logger.trace(f"LUD-17 url {value} resolved to {url} (tag: {tag})")
            return cls(bech32=codec.encode(_check_url(url)), url=url, tag=tag)

        if value.lower().startswith(("http://", "https://")):
            try:
                fallback = httpx.URL(value).params.get("lightning")
            except httpx.InvalidURL as exc:
                raise FormatError(f"invalid url: {value} ({exc})") from exc
            if not fallback:
                raise FormatError(f"not an lnurl: {value}")
            value = fallback

        value = value.lower()
        url = _check_url(codec.decode(value))
        return cls(bech32=value, url=url, tag=codec.tag_of(url))

    @classmethod
    def encode(cls, url: str) -> "LnUrl":
        url = _check_url(url.strip())
        return cls(bech32=codec.encode(url), url=url, tag=codec.tag_of(url))

    @property
    def lightning_link(self) -> str:
        return "lightning:" + self.bech32

    async def get_service(
        self,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        client: Optional["LnurlClient"] = None,
    ) -> "Service":
        from ..client import LnurlClient

        client = client or LnurlClient()
        return await client.get_service(self, timeout=timeout, headers=headers)

    def __str__(self) -> str:
        return self.bech32

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, LnUrl):
            return NotImplemented
        return self.bech32 == other.bech32

    def __hash__(self) -> int:
        return hash(self.bech32)


@dataclass(frozen=True, eq=False)
class LnAddress(LnUrl):
    """
    A lightning address (LUD-16), `user@domain`.
    """

    address: str = ""

    @classmethod
    def parse(cls, address: str) -> "LnAddress":
        address = codec.strip_lightning_prefix(address.strip())
        url = lud16.address_to_url(address)
        return cls(
            bech32=codec.encode(url),
            url=url,
            tag=codec.tag_of(url),
            address=address,
        )

    def __str__(self) -> str:
        return self.address


def parse_identifier(identifier: str) -> LnUrl:
    """Turns anything a user might paste (lnurl, lightning link, LUD-17 url or
    lightning address) into an LnUrl."""
    value = codec.strip_lightning_prefix(identifier.strip())
    if lud16.is_lightning_address(value):
        return LnAddress.parse(value.lower())
    return LnUrl.decode(value)
