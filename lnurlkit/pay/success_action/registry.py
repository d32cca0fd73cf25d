from typing import TYPE_CHECKING, Any, Dict, Optional

from loguru import logger

from ...core.registry import FactoryRegistry
from .aes import AesSuccessAction
from .base import SuccessAction
from .message import MessageSuccessAction
from .url import UrlSuccessAction

if TYPE_CHECKING:
    from ..service import PayService


class SuccessActionRegistry(FactoryRegistry[SuccessAction]):
    """
    Factories for the `successAction` object of a payment response.

    Factories are tried from the most recently registered one backwards, so a
    later registration overrides the handling of a tag. A claimed payload that
    turns out invalid raises; unknown tags resolve to None.
    """

    @classmethod
    def with_defaults(cls) -> "SuccessActionRegistry":
        registry = cls()
        registry.register(MessageSuccessAction.from_payload, MessageSuccessAction.matches)
        registry.register(UrlSuccessAction.from_payload, UrlSuccessAction.matches)
        registry.register(AesSuccessAction.from_payload, AesSuccessAction.matches)
        return registry

    def resolve(
        self, payload: Dict[str, Any], origin: Optional["PayService"] = None
    ) -> Optional[SuccessAction]:
        for factory in reversed(list(self)):
            if not factory.matches(payload):
                continue
            action = factory.construct(payload, origin)
            if action is not None:
                return action
        logger.debug(f"Ignoring unknown success action: {payload.get('tag')}")
        return None
