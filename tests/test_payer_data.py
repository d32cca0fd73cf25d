import json

import pytest

from lnurlkit.core.errors import ValidationError
from lnurlkit.pay.payer_data import PayerData, PayerDataAuth, parse_template


def test_parse_template():
    template = {
        "name": {"mandatory": False},
        "pubkey": {"mandatory": True},
        "identifier": None,
        "auth": {"mandatory": "true", "k1": "e2af6254"},
    }
    assert parse_template(template) == {
        "name": False,
        "pubkey": True,
        "identifier": False,
        "auth": True,
    }
    assert parse_template(None) == {}


def test_parse_template_invalid():
    with pytest.raises(ValidationError):
        parse_template("name")
    with pytest.raises(ValidationError):
        parse_template({"name": True})


def test_from_template():
    data = PayerData.from_template(
        {"name": {"mandatory": True}, "email": {"mandatory": False}}
    )
    assert data.required == {"name"}
    assert data.missing() == {"name"}
    data.name = "Satoshi"
    assert data.missing() == set()
    data.optional("name").require("email")
    assert data.missing() == {"email"}


def test_accessors():
    data = PayerData()
    assert data.name == ""
    assert data.auth is None
    data.name = "Satoshi"
    data.pubkey = "02abc"
    data.identifier = "satoshi@example.com"
    data.email = "satoshi@example.com"
    data.auth = PayerDataAuth(k1="e2af6254", sig="3045")
    assert data.auth.k1 == "e2af6254"
    assert data.auth.sig == "3045"
    assert json.loads(json.dumps(data)) == {
        "name": "Satoshi",
        "pubkey": "02abc",
        "identifier": "satoshi@example.com",
        "email": "satoshi@example.com",
        "auth": {"k1": "e2af6254", "sig": "3045"},
    }


def test_auth_from_plain_dict():
    data = PayerData(auth={"k1": "aa", "sig": "bb"})
    assert isinstance(data.auth, PayerDataAuth)
    assert data.auth.sig == "bb"


def test_copy():
    data = PayerData(name="Satoshi").require("name")
    clone = data.copy()
    clone.require("email")
    clone.name = "Hal"
    assert data.name == "Satoshi"
    assert data.required == {"name"}
    assert clone.required == {"name", "email"}
