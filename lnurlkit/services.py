from typing import Any, Dict, Optional

from loguru import logger

from .core.base import ErrorResponse, Service
from .core.errors import RemoteError, ServiceNotFoundError
from .core.registry import FactoryRegistry
from .pay.service import PayService


class ServiceRegistry(FactoryRegistry[Service]):
    """
    Factories turning the JSON answer of an lnurl endpoint into a service.

    Factories are tried in registration order and the first one returning a
    service wins, so callers registering new LUD types should register
    stricter factories first. A factory that declines, returns None or raises
    is skipped.
    """

    @classmethod
    def with_defaults(cls) -> "ServiceRegistry":
        registry = cls()
        registry.register(PayService.from_payload, PayService.matches)
        return registry

    def resolve(self, payload: Dict[str, Any]) -> Optional[Service]:
        for factory in self:
            try:
                if not factory.matches(payload):
                    continue
                service = factory.construct(payload)
            except Exception as e:
                logger.warning(f"Failed to create service with {factory}: {e}")
                continue
            if service is not None:
                return service
        return None


def parse_service(
    payload: Dict[str, Any], registry: Optional[ServiceRegistry] = None
) -> Service:
    """Resolves a service payload.

    Raises:
        RemoteError: if the payload is an error response
        ServiceNotFoundError: if no factory claims the payload
    """
    if ErrorResponse.matches(payload):
        raise RemoteError(ErrorResponse.from_payload(payload))
    if registry is None:
        registry = ServiceRegistry.with_defaults()
    service = registry.resolve(payload)
    if service is None:
        raise ServiceNotFoundError(
            f"No LNURL service found for tag: {payload.get('tag')}"
        )
    logger.debug(f"Resolved {service.name}")
    return service
