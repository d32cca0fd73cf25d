from typing import Dict, Optional

import httpx
from loguru import logger

from .errors import TransportError
from .settings import settings


class HttpClient:
    """Async GET against lnurl services.

    A fresh `httpx.AsyncClient` is opened for every request, so instances hold
    no connections and can be shared freely.
    """

    def __init__(
        self,
        proxy: Optional[str] = None,
        verify: Optional[bool] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.proxy = proxy or self._proxy_from_settings()
        self.verify = settings.lnurl_verify_tls if verify is None else verify
        self.headers = {"Client-version": settings.version}
        if settings.lnurl_user_agent:
            self.headers["User-Agent"] = settings.lnurl_user_agent
        self.headers.update(headers or {})

    @staticmethod
    def _proxy_from_settings() -> Optional[str]:
        if settings.socks_proxy:
            return f"socks5://{settings.socks_proxy}"
        if settings.http_proxy:
            return settings.http_proxy
        return None

    async def get(
        self,
        url: str,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> bytes:
        """GETs `url` and returns the raw body.

        Raises:
            TransportError: on network errors, timeouts and non-2xx responses
        """
        timeout = settings.lnurl_timeout if timeout is None else timeout
        logger.trace(f"GET {url} (timeout: {timeout}s)")
        async with httpx.AsyncClient(
            proxy=self.proxy,
            verify=self.verify,
            headers=self.headers,
            timeout=timeout,
            follow_redirects=True,
        ) as client:
            try:
                resp = await client.get(url, headers=headers)
            except httpx.TimeoutException as exc:
                raise TransportError(f"lnurl service did not reply in time: {url}") from exc
            except httpx.HTTPError as exc:
                raise TransportError(f"request to {url} failed: {exc}") from exc
        if not resp.is_success:
            logger.debug(f"Error response from {url}: {resp.status_code} {resp.text}")
            raise TransportError(
                f"{url} responded with {resp.status_code}",
                status_code=resp.status_code,
                body=resp.content,
            )
        return resp.content
