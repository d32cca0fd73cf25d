from typing import Any, Dict, Iterable, Optional, Set

from ..core.errors import ValidationError
from ..core.helpers import safe_bool, safe_str

NAME = "name"
PUBKEY = "pubkey"
IDENTIFIER = "identifier"
EMAIL = "email"
AUTH = "auth"


class PayerDataAuth(dict):
    """LUD-18 `auth` field: an lnurl-auth style `{k1, sig}` challenge answer."""

    def __init__(self, k1: Optional[str] = None, sig: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        if k1 is not None:
            self["k1"] = k1
        if sig is not None:
            self["sig"] = sig

    @property
    def k1(self) -> str:
        return safe_str(self.get("k1"))

    @k1.setter
    def k1(self, value: str) -> None:
        self["k1"] = value

    @property
    def sig(self) -> str:
        return safe_str(self.get("sig"))

    @sig.setter
    def sig(self, value: str) -> None:
        self["sig"] = value


class PayerData(dict):
    """
    LUD-18 payer data: the values sent along with a pay request, plus the set
    of fields the service marked as mandatory.

    Serializes as a plain JSON object of the values; the mandatory set is not
    part of the wire format.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.required: Set[str] = set()

    @classmethod
    def from_template(cls, template: Optional[Dict[str, Any]]) -> "PayerData":
        """Builds empty payer data from a service's `payerData` template, with the
        mandatory fields marked."""
        data = cls()
        for key, mandatory in parse_template(template).items():
            if mandatory:
                data.require(key)
        return data

    def require(self, field: str) -> "PayerData":
        self.required.add(field)
        return self

    def optional(self, field: str) -> "PayerData":
        self.required.discard(field)
        return self

    def is_required(self, field: str) -> bool:
        return field in self.required

    def missing(self, fields: Optional[Iterable[str]] = None) -> Set[str]:
        """Required fields without a value."""
        fields = self.required if fields is None else fields
        return {f for f in fields if self.get(f) in (None, "")}

    @property
    def name(self) -> str:
        return safe_str(self.get(NAME))

    @name.setter
    def name(self, value: str) -> None:
        self[NAME] = value

    @property
    def pubkey(self) -> str:
        return safe_str(self.get(PUBKEY))

    @pubkey.setter
    def pubkey(self, value: str) -> None:
        self[PUBKEY] = value

    @property
    def identifier(self) -> str:
        return safe_str(self.get(IDENTIFIER))

    @identifier.setter
    def identifier(self, value: str) -> None:
        self[IDENTIFIER] = value

    @property
    def email(self) -> str:
        return safe_str(self.get(EMAIL))

    @email.setter
    def email(self, value: str) -> None:
        self[EMAIL] = value

    @property
    def auth(self) -> Optional[PayerDataAuth]:
        value = self.get(AUTH)
        if value is None:
            return None
        if not isinstance(value, PayerDataAuth):
            value = PayerDataAuth(**value)
        return value

    @auth.setter
    def auth(self, value: PayerDataAuth) -> None:
        self[AUTH] = value

    def copy(self) -> "PayerData":
        data = PayerData(self)
        data.required = set(self.required)
        return data


def parse_template(template: Any) -> Dict[str, bool]:
    """Parses a LUD-18 `payerData` template into field name -> mandatory.

    Raises:
        ValidationError: if the template is not a mapping of mappings
    """
    if template is None:
        return {}
    if not isinstance(template, dict):
        raise ValidationError("expected an object", field="payerData")
    fields: Dict[str, bool] = {}
    for key, value in template.items():
        if value is None:
            value = {}
        if not isinstance(value, dict):
            raise ValidationError(f"expected an object for {key}", field="payerData")
        fields[key] = safe_bool(value.get("mandatory"))
    return fields
