import re
from typing import NamedTuple, Optional, Tuple

from .errors import FormatError

USERNAME_PATTERN = re.compile(r"^[a-z0-9\-_.+]+$")


class SchemeType(NamedTuple):
    prefix: str
    tag: str

    def matches(self, value: str) -> bool:
        return value.lower().strip().startswith(self.prefix + "://")

    def to_https(self, value: str) -> str:
        if not self.matches(value):
            raise ValueError(f"url does not start with {self.prefix}://")
        return "https://" + value.strip()[len(self.prefix) + 3 :]


SCHEME_TYPES = (
    SchemeType("lnurlc", "channelRequest"),
    SchemeType("lnurlw", "withdrawRequest"),
    SchemeType("lnurlp", "payRequest"),
    SchemeType("keyauth", "login"),
)


def get_scheme_type(value: Optional[str]) -> Optional[SchemeType]:
    if not value:
        return None
    for scheme_type in SCHEME_TYPES:
        if scheme_type.matches(value):
            return scheme_type
    return None


def resolve(value: str) -> Optional[Tuple[str, str]]:
    """Rewrites `lnurlp://`-style urls to https.

    Returns:
        Optional[Tuple[str, str]]: (https url, expected tag), or None if `value`
            uses none of the known schemes
    """
    scheme_type = get_scheme_type(value)
    if scheme_type is None:
        return None
    return scheme_type.to_https(value), scheme_type.tag


def is_lightning_address(value: str) -> bool:
    """Anything with an `@` and no scheme counts as an address attempt, so a
    malformed address fails in `address_to_url` rather than in bech32 decoding."""
    value = value.strip()
    return "@" in value and "://" not in value


def address_to_url(address: str) -> str:
    """Converts a lightning address `user@domain` to its lnurlp endpoint.

    Raises:
        FormatError: if the address is empty, has not exactly one `@`, or the
            username contains characters other than a-z0-9-_.+
    """
    if not address or not address.strip():
        raise FormatError("Lightning address cannot be empty")
    parts = address.strip().split("@")
    if len(parts) != 2:
        raise FormatError(f"Invalid lightning address format: {address}")
    username, domain = parts
    if not USERNAME_PATTERN.match(username):
        raise FormatError(
            "Invalid username format. Only a-z0-9-_.+ characters are allowed."
        )
    if not domain or "/" in domain:
        raise FormatError(f"Invalid lightning address domain: {domain}")
    scheme = "http" if domain.endswith(".onion") else "https"
    return f"{scheme}://{domain}/.well-known/lnurlp/{username}"
