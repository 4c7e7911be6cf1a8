from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from types import TracebackType
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, overload

from typing_extensions import Self

from flexdi._internal.type_checks import describe_type
from flexdi.exceptions import FlexDiResolutionError
from flexdi.resolution.request import ResolutionRequest, ResolutionResult

if TYPE_CHECKING:
    from flexdi.options import ContainerOptions
    from flexdi.registrations import ServiceRegistration
    from flexdi.registry import Registry
    from flexdi.resolution.cache import ResolvedServiceCache
    from flexdi.resolution.constructors import ConstructorWithMostParametersSelector
    from flexdi.resolution.resolver import ServiceResolvedListener

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ResolvesServices(ABC):
    """Capability of resolving services.

    Implementations provide :meth:`try_resolve_request`; every other
    resolution helper is built on top of it. Request this type as a
    constructor parameter to receive a resolver bound to the current
    resolution path.
    """

    @abstractmethod
    def try_resolve_request(self, request: ResolutionRequest) -> ResolutionResult:
        """Resolve ``request`` and return the outcome without raising on failure."""

    def resolve_request(self, request: ResolutionRequest) -> Any:
        """Resolve ``request`` or raise ``FlexDiResolutionError``."""
        result = self.try_resolve_request(request)
        if not result.is_success:
            name = "" if request.name is None else f" named {request.name!r}"
            msg = f"Cannot resolve component type '{describe_type(request.service_type)}'{name}."
            logger.debug("Resolution failed for %r", request)
            raise FlexDiResolutionError(msg, resolution_path=result.resolution_path)
        return result.resolved_object

    @overload
    def resolve(self, service_type: type[T], name: str | None = None) -> T: ...

    @overload
    def resolve(self, service_type: Any, name: str | None = None) -> Any: ...

    def resolve(self, service_type: Any, name: str | None = None) -> Any:
        """Resolve an instance of ``service_type``, optionally by registration name.

        Raises:
            FlexDiResolutionError: The service cannot be resolved.

        """
        return self.resolve_request(ResolutionRequest(service_type, name))

    def try_resolve(self, service_type: Any, name: str | None = None) -> tuple[bool, Any]:
        """Return ``(True, instance)`` on success and ``(False, None)`` on failure."""
        result = self.try_resolve_request(ResolutionRequest(service_type, name))
        if not result.is_success:
            return False, None
        return True, result.resolved_object

    @overload
    def resolve_optional(self, service_type: type[T], name: str | None = None) -> T | None: ...

    @overload
    def resolve_optional(self, service_type: Any, name: str | None = None) -> Any: ...

    def resolve_optional(self, service_type: Any, name: str | None = None) -> Any:
        """Resolve ``service_type`` or return ``None`` when it cannot be resolved."""
        _, instance = self.try_resolve(service_type, name)
        return instance


class ReceivesRegistrations(ABC):
    """Capability of accepting new registrations."""

    @abstractmethod
    def add_registrations(self, registrations: Iterable[ServiceRegistration]) -> None:
        """Add ``registrations``, replacing existing ones with the same key."""


class IContainer(ResolvesServices, ReceivesRegistrations):
    """Interface for container-like objects."""

    @abstractmethod
    def has_registration(self, service_type: Any, name: str | None = None) -> bool: ...

    @abstractmethod
    def get_registrations(self, service_type: Any = None) -> list[ServiceRegistration]: ...

    @abstractmethod
    def is_resolved_instance_cached(self, service_type: Any, name: str | None = None) -> bool: ...

    @abstractmethod
    def create_child_container(self) -> IContainer: ...

    @abstractmethod
    def add_service_resolved_listener(self, listener: ServiceResolvedListener) -> None: ...

    @abstractmethod
    def remove_service_resolved_listener(self, listener: ServiceResolvedListener) -> None: ...

    @abstractmethod
    def dispose(self) -> None: ...

    def resolve_all(self, service_type: Any) -> list[Any]:
        """Resolve every registration whose service type is ``service_type``."""
        return [
            self.resolve(registration.service_type, registration.name)
            for registration in self.get_registrations(service_type)
        ]

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.dispose()


class ResolutionInfo(Protocol):
    """What a resolver factory needs to know about a container."""

    @property
    def cache(self) -> ResolvedServiceCache: ...

    @property
    def registry(self) -> Registry: ...

    @property
    def options(self) -> ContainerOptions: ...

    @property
    def parent(self) -> ResolutionInfo | None: ...

    @property
    def constructor_selector(self) -> ConstructorWithMostParametersSelector: ...


__all__ = [
    "IContainer",
    "ReceivesRegistrations",
    "ResolutionInfo",
    "ResolvesServices",
]
