import httpx
import pytest
import respx
from httpx import Response

from lnurlkit.client import LnurlClient
from lnurlkit.core.errors import (
    CodecError,
    FormatError,
    InvalidResponseError,
    NotVerifiableError,
    RemoteError,
    ServiceNotFoundError,
    TransportError,
)
from lnurlkit.core.lnurl import LnUrl
from lnurlkit.pay.payer_data import PayerData
from lnurlkit.pay.response import PaymentResponse
from lnurlkit.pay.service import PayService
from lnurlkit.pay.success_action import AesSuccessAction
from tests.helpers import (
    ADDRESS,
    ADDRESS_URL,
    CALLBACK_URL,
    VERIFY_URL,
    assert_err,
    pay_payload,
    payment_request,
)

client = LnurlClient()


@respx.mock
@pytest.mark.asyncio
async def test_get_service_address():
    route = respx.get(ADDRESS_URL).mock(return_value=Response(200, json=pay_payload()))
    service = await client.get_service(ADDRESS)
    assert isinstance(service, PayService)
    assert service.callback == CALLBACK_URL
    assert route.called
    assert route.calls.last.request.headers["Client-version"]


@respx.mock
@pytest.mark.asyncio
async def test_get_service_lnurl():
    respx.get(ADDRESS_URL).mock(return_value=Response(200, json=pay_payload()))
    lnurl = LnUrl.encode(ADDRESS_URL)
    service = await client.get_service(lnurl.bech32.upper())
    assert service.description == "Pay unit"
    service = await lnurl.get_service(client=client)
    assert service.identifier == ADDRESS


@respx.mock
@pytest.mark.asyncio
async def test_get_service_remote_error():
    respx.get(ADDRESS_URL).mock(
        return_value=Response(200, json={"status": "ERROR", "reason": "Unknown user"})
    )
    await assert_err(client.get_service(ADDRESS), "Unknown user")
    with pytest.raises(RemoteError) as exc:
        await client.get_service(ADDRESS)
    assert exc.value.reason == "Unknown user"


@respx.mock
@pytest.mark.asyncio
async def test_get_service_error_status_with_error_body():
    respx.get(ADDRESS_URL).mock(
        return_value=Response(404, json={"status": "ERROR", "reason": "Not found"})
    )
    with pytest.raises(RemoteError) as exc:
        await client.get_service(ADDRESS)
    assert exc.value.reason == "Not found"


@respx.mock
@pytest.mark.asyncio
async def test_get_service_server_error():
    respx.get(ADDRESS_URL).mock(return_value=Response(500, text="oops"))
    with pytest.raises(TransportError) as exc:
        await client.get_service(ADDRESS)
    assert exc.value.status_code == 500
    assert exc.value.body == b"oops"


@respx.mock
@pytest.mark.asyncio
async def test_get_service_connection_error():
    respx.get(ADDRESS_URL).mock(side_effect=httpx.ConnectError("refused"))
    with pytest.raises(TransportError) as exc:
        await client.get_service(ADDRESS)
    assert exc.value.status_code is None


@respx.mock
@pytest.mark.asyncio
async def test_get_service_timeout():
    respx.get(ADDRESS_URL).mock(side_effect=httpx.ReadTimeout("slow"))
    await assert_err(client.get_service(ADDRESS), "did not reply in time")


@respx.mock
@pytest.mark.asyncio
async def test_get_service_invalid_json():
    respx.get(ADDRESS_URL).mock(
        side_effect=[Response(200, text="<html></html>"), Response(200, json=["tag"])]
    )
    with pytest.raises(InvalidResponseError):
        await client.get_service(ADDRESS)
    with pytest.raises(InvalidResponseError):
        await client.get_service(ADDRESS)


@respx.mock
@pytest.mark.asyncio
async def test_get_service_unknown_tag():
    respx.get(ADDRESS_URL).mock(
        return_value=Response(200, json={"tag": "channelRequest", "k1": "00"})
    )
    await assert_err(client.get_service(ADDRESS), "channelRequest")
    with pytest.raises(ServiceNotFoundError):
        await client.get_service(ADDRESS)


@respx.mock
@pytest.mark.asyncio
async def test_fetch_invoice():
    service = PayService.from_payload(pay_payload())
    route = respx.get(url__startswith=CALLBACK_URL).mock(
        return_value=Response(
            200,
            json={
                "pr": payment_request,
                "routes": [],
                "verify": VERIFY_URL,
                "successAction": {"tag": "message", "message": "Thanks"},
            },
        )
    )
    payer_data = PayerData()
    payer_data.name = "Test Payer"
    response = await client.fetch_invoice(
        service, 1000, comment="test payment", payer_data=payer_data
    )
    assert response.invoice == payment_request
    assert response.verify_url == VERIFY_URL
    assert response.success_action.message == "Thanks"

    params = route.calls.last.request.url.params
    assert params["amount"] == "1000"
    assert params["comment"] == "test payment"
    assert params["payerdata"] == '{"name":"Test Payer"}'


@respx.mock
@pytest.mark.asyncio
async def test_fetch_invoice_via_service():
    service = PayService.from_payload(pay_payload())
    respx.get(url__startswith=CALLBACK_URL).mock(
        return_value=Response(200, json={"pr": payment_request})
    )
    response = await service.fetch_invoice(1000, client=client)
    assert isinstance(response, PaymentResponse)
    assert response.success_action is None


@pytest.mark.asyncio
async def test_fetch_invoice_out_of_range_sends_nothing():
    service = PayService.from_payload(pay_payload())
    with respx.mock(assert_all_called=False) as mock:
        route = mock.get(url__startswith=CALLBACK_URL)
        await assert_err(
            client.fetch_invoice(service, 500), "not within the allowed range"
        )
        assert not route.called


@respx.mock
@pytest.mark.asyncio
async def test_fetch_invoice_remote_error():
    service = PayService.from_payload(pay_payload())
    respx.get(url__startswith=CALLBACK_URL).mock(
        return_value=Response(200, json={"status": "ERROR", "reason": "Amount too low"})
    )
    await assert_err(client.fetch_invoice(service, 1000), "Amount too low")


@respx.mock
@pytest.mark.asyncio
async def test_fetch_invoice_not_a_payment_response():
    service = PayService.from_payload(pay_payload())
    respx.get(url__startswith=CALLBACK_URL).mock(
        return_value=Response(200, json={"status": "OK"})
    )
    with pytest.raises(InvalidResponseError):
        await client.fetch_invoice(service, 1000)


@respx.mock
@pytest.mark.asyncio
async def test_fetch_invoice_invalid_success_action():
    service = PayService.from_payload(pay_payload())
    respx.get(url__startswith=CALLBACK_URL).mock(
        return_value=Response(
            200,
            json={"pr": payment_request, "successAction": {"tag": "aes", "iv": "short"}},
        )
    )
    await assert_err(client.fetch_invoice(service, 1000), "iv")


@respx.mock
@pytest.mark.asyncio
async def test_fetch_invoice_check_amount():
    service = PayService.from_payload(pay_payload(maxSendable=2_000_000))
    respx.get(url__startswith=CALLBACK_URL).mock(
        return_value=Response(200, json={"pr": payment_request})
    )
    response = await client.fetch_invoice(service, 1_000_000, check_amount=True)
    assert response.invoice_amount_msat == 1_000_000
    with pytest.raises(InvalidResponseError, match="does not match"):
        await client.fetch_invoice(service, 2_000_000, check_amount=True)
    # disabled by default
    await client.fetch_invoice(service, 2_000_000)


@respx.mock
@pytest.mark.asyncio
async def test_verify():
    response = PaymentResponse.from_payload({"pr": payment_request, "verify": VERIFY_URL})
    respx.get(VERIFY_URL).mock(
        return_value=Response(
            200,
            json={"status": "OK", "settled": True, "preimage": "00" * 32, "pr": payment_request},
        )
    )
    result = await response.verify(client=client)
    assert result.settled
    assert result.preimage == "00" * 32


@respx.mock
@pytest.mark.asyncio
async def test_verify_unsettled():
    respx.get(VERIFY_URL).mock(
        return_value=Response(
            200, json={"status": "OK", "settled": False, "preimage": None, "pr": payment_request}
        )
    )
    result = await client.verify_url(VERIFY_URL)
    assert not result.settled
    assert result.preimage is None


@respx.mock
@pytest.mark.asyncio
async def test_verify_errors():
    respx.get(VERIFY_URL).mock(
        side_effect=[
            Response(200, json={"status": "ERROR", "reason": "Not found"}),
            Response(200, json={"status": "OK"}),
        ]
    )
    with pytest.raises(RemoteError):
        await client.verify_url(VERIFY_URL)
    await assert_err(client.verify_url(VERIFY_URL), "valid verify structure")


@pytest.mark.asyncio
async def test_verify_not_verifiable():
    response = PaymentResponse.from_payload({"pr": payment_request})
    with pytest.raises(NotVerifiableError):
        await client.verify(response)


@pytest.mark.asyncio
async def test_invalid_identifier_sends_nothing():
    with respx.mock(assert_all_called=False) as mock:
        with pytest.raises(CodecError):
            await client.get_service("not an lnurl")
        assert not mock.calls


@respx.mock
@pytest.mark.asyncio
async def test_aes_success_action_end_to_end():
    service = PayService.from_payload(pay_payload())
    respx.get(url__startswith=CALLBACK_URL).mock(
        return_value=Response(
            200,
            json={
                "pr": payment_request,
                "successAction": {
                    "tag": "aes",
                    "description": "Code",
                    "ciphertext": "AAAA",
                    "iv": "A" * 22 + "==",
                },
            },
        )
    )
    response = await client.fetch_invoice(service, 1000)
    assert isinstance(response.success_action, AesSuccessAction)
    assert response.success_action.description == "Code"


@respx.mock
@pytest.mark.asyncio
async def test_fetch_invoice_malformed_invoice():
    service = PayService.from_payload(pay_payload())
    respx.get(url__startswith=CALLBACK_URL).mock(
        side_effect=[Response(200, json={"pr": 123}), Response(200, json={"pr": ""})]
    )
    with pytest.raises(InvalidResponseError):
        await client.fetch_invoice(service, 1000)
    with pytest.raises(InvalidResponseError):
        await client.fetch_invoice(service, 1000)


@pytest.mark.asyncio
async def test_get_service_malformed_address_sends_nothing():
    with respx.mock(assert_all_called=False) as mock:
        with pytest.raises(FormatError):
            await client.get_service("a@b@example.com")
        assert not mock.calls
