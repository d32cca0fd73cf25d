#!/usr/bin/env python

import asyncio
from functools import wraps
from typing import Optional

import click
from click import Context
from loguru import logger

from ..client import LnurlClient
from ..core.errors import LnurlError
from ..core.lnurl import LnAddress, LnUrl, parse_identifier
from ..core.logging import configure_logger
from ..core.settings import settings
from ..pay.payer_data import PayerData
from ..pay.service import PayService
from ..pay.success_action import (
    AesSuccessAction,
    MessageSuccessAction,
    UrlSuccessAction,
)


class NaturalOrderGroup(click.Group):
    """For listing commands in help in order of definition"""

    def list_commands(self, ctx):
        return self.commands.keys()


# https://github.com/pallets/click/issues/85#issuecomment-503464628
def coro(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))

    return wrapper


def print_pay_service(service: PayService):
    print(f"Description: {service.description}")
    if service.long_description:
        print(f"Details: {service.long_description}")
    print(
        f"Amount range: {service.min_sendable // 1000} -"
        f" {service.max_sendable // 1000} sat"
    )
    if service.is_comment_allowed:
        print(f"Comments: up to {service.comment_allowed} characters")
    if service.payer_data_spec:
        fields = [
            f"{key}{' (mandatory)' if mandatory else ''}"
            for key, mandatory in service.payer_data_spec.items()
        ]
        print(f"Payer data: {', '.join(fields)}")


@click.group(cls=NaturalOrderGroup)
@click.option(
    "--timeout",
    "-t",
    type=float,
    default=settings.lnurl_timeout,
    help=f"Request timeout in seconds (default: {settings.lnurl_timeout}).",
)
@click.pass_context
def cli(ctx: Context, timeout: float):
    if settings.debug:
        configure_logger()
    ctx.ensure_object(dict)
    ctx.obj["CLIENT"] = LnurlClient(timeout=timeout)


@cli.command("decode", help="Decode an lnurl or lightning address.")
@click.argument("identifier", type=str)
def decode(identifier: str):
    try:
        lnurl = parse_identifier(identifier)
    except LnurlError as e:
        raise click.ClickException(str(e))
    if isinstance(lnurl, LnAddress):
        print(f"Address: {lnurl.address}")
    print(f"URL: {lnurl.url}")
    print(f"LNURL: {lnurl.bech32}")
    if lnurl.tag:
        print(f"Tag: {lnurl.tag}")


@cli.command("encode", help="Encode a url as lnurl.")
@click.argument("url", type=str)
@click.option("--upper", "-u", default=False, is_flag=True, help="Upper case output.")
def encode(url: str, upper: bool):
    try:
        lnurl = LnUrl.encode(url)
    except LnurlError as e:
        raise click.ClickException(str(e))
    print(lnurl.bech32.upper() if upper else lnurl.bech32)


@cli.command("info", help="Fetch the service behind an lnurl.")
@click.argument("identifier", type=str)
@click.pass_context
@coro
async def info(ctx: Context, identifier: str):
    client: LnurlClient = ctx.obj["CLIENT"]
    try:
        service = await client.get_service(identifier)
    except LnurlError as e:
        raise click.ClickException(str(e))
    print(f"Service: {service.name}")
    if isinstance(service, PayService):
        print_pay_service(service)


@cli.command("invoice", help="Request an invoice from an lnurl pay service.")
@click.argument("identifier", type=str)
@click.argument("amount", type=int)
@click.option("--comment", "-c", default=None, help="Comment for the recipient.")
@click.option("--name", "-n", default=None, help="Payer name, sent as payer data.")
@click.pass_context
@coro
async def invoice(
    ctx: Context,
    identifier: str,
    amount: int,
    comment: Optional[str],
    name: Optional[str],
):
    client: LnurlClient = ctx.obj["CLIENT"]
    try:
        service = await client.get_service(identifier)
        if not isinstance(service, PayService):
            raise click.ClickException(f"{service.name} is not a pay request.")
        payer_data = None
        if name:
            payer_data = PayerData()
            payer_data.name = name
        response = await client.fetch_invoice(
            service, amount * 1000, comment=comment, payer_data=payer_data
        )
    except LnurlError as e:
        raise click.ClickException(str(e))
    logger.debug(f"Payment response: {response}")
    print(f"Invoice: {response.invoice}")
    if response.verify_url:
        print(f"Verify: {response.verify_url}")
    action = response.success_action
    if isinstance(action, MessageSuccessAction):
        print(f"Message: {action.message}")
    elif isinstance(action, UrlSuccessAction):
        warning = "" if action.is_same_origin else " (different domain)"
        print(f"URL: {action.url}{warning} {action.description}")
    elif isinstance(action, AesSuccessAction):
        print(f"Encrypted message: {action.description}")


@cli.command("verify", help="Check whether an invoice was settled.")
@click.argument("url", type=str)
@click.pass_context
@coro
async def verify(ctx: Context, url: str):
    client: LnurlClient = ctx.obj["CLIENT"]
    try:
        result = await client.verify_url(url)
    except LnurlError as e:
        raise click.ClickException(str(e))
    print(f"Settled: {result.settled}")
    if result.preimage:
        print(f"Preimage: {result.preimage}")
