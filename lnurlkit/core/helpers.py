import hashlib
from typing import Any, Dict, Optional, Type, TypeVar
from urllib.parse import urlencode

import httpx
import pydantic

from .errors import ValidationError

M = TypeVar("M", bound=pydantic.BaseModel)


def safe_str(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def safe_int(value: Any, field: str) -> int:
    """Coerce a JSON number (or numeric string) to int.

    Raises:
        ValidationError: if the value is missing or not an integral number
    """
    if value is None:
        raise ValidationError("missing", field=field)
    if isinstance(value, bool):
        raise ValidationError(f"expected an integer, got {value!r}", field=field)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValidationError(f"expected an integer, got {value!r}", field=field)


def safe_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    if isinstance(value, (int, float)):
        return value != 0
    return default


def http_url_error(value: Any) -> Optional[str]:
    """Returns why `value` is not an absolute http(s) url, None if it is one."""
    if not isinstance(value, str) or not value.strip():
        return "missing or not a string"
    try:
        url = httpx.URL(value.strip())
    except (httpx.InvalidURL, TypeError) as exc:
        return f"invalid url ({exc})"
    if url.scheme not in ("http", "https") or not url.host:
        return f"not an http(s) url: {value}"
    return None


def parse_http_url(value: Any, field: str) -> str:
    """Checks that `value` is an absolute http(s) URL and returns it as string.

    Raises:
        ValidationError: if the value is missing or cannot be parsed
    """
    reason = http_url_error(value)
    if reason:
        raise ValidationError(reason, field=field)
    return value.strip()


def build_model(
    model: Type[M], aliases: Optional[Dict[str, str]] = None, **values: Any
) -> M:
    """Instantiates a pydantic model, turning its validation errors into
    `ValidationError` named after the wire field.
    """
    try:
        return model(**values)
    except pydantic.ValidationError as exc:
        error = exc.errors()[0]
        loc = str(error["loc"][0]) if error["loc"] else None
        field = (aliases or {}).get(loc, loc) if loc else None
        cause = error.get("ctx", {}).get("error")
        if error["type"] == "value_error" and cause is not None:
            detail = str(cause)
        else:
            detail = error["msg"]
        raise ValidationError(detail, field=field) from exc


def url_host(value: str) -> Optional[str]:
    try:
        return httpx.URL(value).host or None
    except httpx.InvalidURL:
        return None


def append_query(url: str, params: Dict[str, str]) -> str:
    """Appends form-encoded parameters to a url that may already carry a query."""
    if not params:
        return url
    separator = "&" if "?" in url else "?"
    if url.endswith(("?", "&")):
        separator = ""
    return f"{url}{separator}{urlencode(params)}"


def check_payment_preimage(
    payment_hash: str,
    preimage: str,
) -> bool:
    return bytes.fromhex(payment_hash) == hashlib.sha256(
        bytes.fromhex(preimage)
    ).digest()
