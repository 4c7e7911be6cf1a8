from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any, Generic, TypeVar, get_args, get_origin

T = TypeVar("T")

_NOT_CREATED: Any = object()


class Lazy(Generic[T]):
    """Deferred value produced by a factory on first access.

    Request ``Lazy[Service]`` to receive a wrapper instead of the service
    itself; the service is resolved the first time ``value`` is read and the
    result is reused afterwards. Evaluation happens at most once, even when
    several threads read ``value`` concurrently.

    Examples:
        .. code-block:: python

            class Report:
                def __init__(self, exporter: Lazy[Exporter]) -> None:
                    self._exporter = exporter

                def export(self) -> None:
                    self._exporter.value.run()

    """

    __slots__ = ("_factory", "_lock", "_value")

    def __init__(self, factory: Callable[[], T]) -> None:
        if not callable(factory):
            msg = "Lazy requires a callable factory."
            raise TypeError(msg)
        self._factory = factory
        self._lock = threading.Lock()
        self._value: Any = _NOT_CREATED

    @property
    def is_value_created(self) -> bool:
        return self._value is not _NOT_CREATED

    @property
    def value(self) -> T:
        if self._value is _NOT_CREATED:
            with self._lock:
                if self._value is _NOT_CREATED:
                    self._value = self._factory()
        return self._value

    def __repr__(self) -> str:
        state = repr(self._value) if self.is_value_created else "<not created>"
        return f"Lazy({state})"


def get_lazy_inner_type(service_type: Any) -> Any | None:
    """Return ``T`` for ``Lazy[T]`` and ``None`` for every other service type."""
    if get_origin(service_type) is not Lazy:
        return None
    arguments = get_args(service_type)
    return arguments[0] if arguments else None


__all__ = ["Lazy", "get_lazy_inner_type"]
