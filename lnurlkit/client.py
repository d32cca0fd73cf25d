import json
from typing import Any, Dict, Optional, Union

from loguru import logger

from .core.base import ErrorResponse, Service
from .core.errors import (
    InvalidResponseError,
    NotVerifiableError,
    RemoteError,
    TransportError,
)
from .core.http import HttpClient
from .core.lnurl import LnUrl, parse_identifier
from .core.settings import settings
from .pay.payer_data import PayerData
from .pay.response import PaymentResponse
from .pay.service import PayService
from .pay.success_action import SuccessActionRegistry
from .pay.verify import VerifyResult
from .services import ServiceRegistry, parse_service


def parse_json(body: bytes, url: str) -> Dict[str, Any]:
    """
    Raises:
        InvalidResponseError: if the body is not a JSON object
    """
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidResponseError(f"Invalid JSON response from {url}") from exc
    if not isinstance(data, dict):
        raise InvalidResponseError(f"Expected a JSON object from {url}")
    return data


def raise_on_error_response(data: Dict[str, Any]) -> None:
    if ErrorResponse.matches(data):
        error = ErrorResponse.from_payload(data)
        logger.trace(f"Error from lnurl service: {error.reason}")
        raise RemoteError(error)


class LnurlClient:
    """
    Resolution context: the HTTP client and the two factory registries used to
    resolve services and success actions. Every request is a single GET; no
    retries are made.
    """

    def __init__(
        self,
        http: Optional[HttpClient] = None,
        services: Optional[ServiceRegistry] = None,
        success_actions: Optional[SuccessActionRegistry] = None,
        timeout: Optional[float] = None,
    ):
        self.http = http or HttpClient()
        self.services = (
            ServiceRegistry.with_defaults() if services is None else services
        )
        self.success_actions = (
            SuccessActionRegistry.with_defaults()
            if success_actions is None
            else success_actions
        )
        self.timeout = settings.lnurl_timeout if timeout is None else timeout

    async def get_json(
        self,
        url: str,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """GETs a JSON object, raising RemoteError for error responses.

        Services sometimes declare errors with a non-2xx status, in that case the
        declared error wins over the transport error.
        """
        timeout = self.timeout if timeout is None else timeout
        try:
            body = await self.http.get(url, timeout=timeout, headers=headers)
        except TransportError as exc:
            if exc.body:
                try:
                    data = json.loads(exc.body)
                except (json.JSONDecodeError, UnicodeDecodeError):
                    raise exc
                if isinstance(data, dict):
                    raise_on_error_response(data)
            raise
        data = parse_json(body, url)
        raise_on_error_response(data)
        return data

    async def get_service(
        self,
        lnurl: Union[str, LnUrl],
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Service:
        """Fetches and resolves the service behind an lnurl or lightning address.

        Raises:
            FormatError, CodecError: if `lnurl` cannot be parsed
            TransportError: if the request fails
            RemoteError: if the service answers with an error
            ServiceNotFoundError: if no registered factory accepts the answer
        """
        if isinstance(lnurl, str):
            lnurl = parse_identifier(lnurl)
        logger.debug(f"Fetching lnurl service from {lnurl.url}")
        data = await self.get_json(lnurl.url, timeout=timeout, headers=headers)
        return parse_service(data, self.services)

    async def fetch_invoice(
        self,
        service: PayService,
        amount: int,
        comment: Optional[str] = None,
        payer_data: Optional[PayerData] = None,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        check_amount: Optional[bool] = None,
    ) -> PaymentResponse:
        """Requests an invoice for `amount` msat from a pay service.

        Raises:
            AmountOutOfRangeError, ValidationError: if the request is invalid
            TransportError: if the request fails
            RemoteError: if the service answers with an error
            InvalidResponseError: if the answer is not a payment response, or the
                invoice amount differs and `check_amount` is enabled
        """
        callback = service.build_callback(amount, comment, payer_data)
        logger.debug(f"Requesting invoice for {amount} msat from {service.callback}")
        data = await self.get_json(callback, timeout=timeout, headers=headers)
        if not PaymentResponse.matches(data):
            raise InvalidResponseError(f"Invalid LNURL payment response: {data}")
        response = PaymentResponse.from_payload(
            data, origin=service, success_actions=self.success_actions
        )
        if check_amount is None:
            check_amount = settings.lnurl_check_invoice_amount
        if check_amount and not response.check_amount(amount):
            raise InvalidResponseError(
                f"Invoice amount {response.invoice_amount_msat} msat does not match"
                f" the requested {amount} msat"
            )
        return response

    async def verify(
        self, response: PaymentResponse, timeout: Optional[float] = None
    ) -> VerifyResult:
        """Checks whether the invoice of `response` has been settled (LUD-21).

        Raises:
            NotVerifiableError: if the response carries no verify url
        """
        if not response.is_verifiable or response.verify_url is None:
            raise NotVerifiableError()
        return await self.verify_url(response.verify_url, timeout=timeout)

    async def verify_url(self, url: str, timeout: Optional[float] = None) -> VerifyResult:
        """
        Raises:
            TransportError: if the request fails
            RemoteError: if the service answers with an error
            InvalidResponseError: if the answer has no `settled` and `pr`
        """
        data = await self.get_json(url, timeout=timeout)
        if not VerifyResult.matches(data):
            raise InvalidResponseError(
                "Response does not contain a valid verify structure"
            )
        result = VerifyResult.from_payload(data)
        logger.debug(f"Invoice settled: {result.settled}")
        return result
