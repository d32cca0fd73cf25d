from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, TypeVar

T = TypeVar("T")

Payload = Dict[str, Any]
Predicate = Callable[[Payload], bool]


class Factory(Generic[T]):
    """A constructor paired with an optional structural predicate.

    Without a predicate the constructor is always tried and may return None to
    decline the payload.
    """

    def __init__(
        self, constructor: Callable[..., Optional[T]], predicate: Optional[Predicate] = None
    ):
        self.constructor = constructor
        self.predicate = predicate

    def matches(self, payload: Payload) -> bool:
        return self.predicate is None or bool(self.predicate(payload))

    def construct(self, payload: Payload, *args: Any) -> Optional[T]:
        return self.constructor(payload, *args)

    def __repr__(self) -> str:
        name = getattr(self.constructor, "__qualname__", repr(self.constructor))
        return f"Factory({name})"


class FactoryRegistry(Generic[T]):
    """Ordered, append-only list of factories.

    Registries are meant to be filled once at start-up and only read afterwards;
    registering while another task resolves payloads is not supported.
    """

    def __init__(self) -> None:
        self._factories: List[Factory[T]] = []

    def register(
        self, constructor: Callable[..., Optional[T]], predicate: Optional[Predicate] = None
    ) -> Factory[T]:
        if constructor is None:
            raise ValueError("constructor cannot be None")
        factory = Factory(constructor, predicate)
        self._factories.append(factory)
        return factory

    def __iter__(self) -> Iterator[Factory[T]]:
        return iter(list(self._factories))

    def __len__(self) -> int:
        return len(self._factories)
