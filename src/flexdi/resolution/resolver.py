from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, get_origin

from flexdi._internal.type_checks import is_primitive_type
from flexdi.exceptions import FlexDiInvalidResolutionRequestError
from flexdi.registrations import OpenGenericTypeRegistration, ServiceRegistration
from flexdi.registry import RegistrationProvider
from flexdi.resolution.instance_creator import InstanceCreator
from flexdi.resolution.request import ResolutionRequest, ResolutionResult


@dataclass(frozen=True, slots=True)
class ServiceResolvedEvent:
    """Notification that ``registration`` produced a new ``instance``.

    Raised once per constructed instance; cache hits do not raise it.
    """

    registration: ServiceRegistration
    instance: Any


ServiceResolvedListener = Callable[[ServiceResolvedEvent], Any]


class ResolverBase(ABC):
    """One link of the resolution pipeline.

    A resolver answers a request with a :class:`ResolutionResult`; failure is
    reported as a value and never raised. Every resolver re-publishes the
    ``ServiceResolved`` notifications of the resolvers it wraps.
    """

    def __init__(self) -> None:
        self._listeners: list[ServiceResolvedListener] = []
        self._listeners_lock = threading.Lock()

    @abstractmethod
    def resolve(self, request: ResolutionRequest) -> ResolutionResult:
        """Resolve ``request``, returning a failed result when it cannot be satisfied."""

    @abstractmethod
    def get_registration(self, request: ResolutionRequest) -> ServiceRegistration | None:
        """Return the registration that would be used to satisfy ``request``."""

    def add_service_resolved_listener(self, listener: ServiceResolvedListener) -> None:
        with self._listeners_lock:
            self._listeners.append(listener)

    def remove_service_resolved_listener(self, listener: ServiceResolvedListener) -> None:
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _publish_service_resolved(self, event: ServiceResolvedEvent) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(event)


class ProxyingResolver(ResolverBase):
    """Base class for pipeline stages that wrap an inner resolver."""

    def __init__(self, proxied_resolver: ResolverBase) -> None:
        if proxied_resolver is None:
            msg = "proxied_resolver must not be None."
            raise ValueError(msg)
        super().__init__()
        self._proxied_resolver = proxied_resolver
        proxied_resolver.add_service_resolved_listener(self._publish_service_resolved)

    @property
    def proxied_resolver(self) -> ResolverBase:
        return self._proxied_resolver

    def get_registration(self, request: ResolutionRequest) -> ServiceRegistration | None:
        return self._proxied_resolver.get_registration(request)


class LateBoundResolverProxy(ResolverBase):
    """Forward to a resolver assigned after construction.

    The core resolver resolves nested parameters through the outermost
    pipeline stage, which does not exist yet when the core is built. This
    proxy is handed to the core first and bound to the outermost stage once
    the pipeline is assembled.
    """

    def __init__(self) -> None:
        super().__init__()
        self._proxied_resolver: ResolverBase | None = None

    @property
    def proxied_resolver(self) -> ResolverBase | None:
        return self._proxied_resolver

    def set_proxied_resolver(self, proxied_resolver: ResolverBase) -> None:
        if proxied_resolver is None:
            msg = "proxied_resolver must not be None."
            raise ValueError(msg)
        if self._proxied_resolver is not None:
            msg = "The proxied resolver must be set only once."
            raise RuntimeError(msg)
        self._proxied_resolver = proxied_resolver
        proxied_resolver.add_service_resolved_listener(self._publish_service_resolved)

    def resolve(self, request: ResolutionRequest) -> ResolutionResult:
        return self._bound().resolve(request)

    def get_registration(self, request: ResolutionRequest) -> ServiceRegistration | None:
        return self._bound().get_registration(request)

    def _bound(self) -> ResolverBase:
        if self._proxied_resolver is None:
            msg = "The late-bound resolver was used before its proxied resolver was set."
            raise RuntimeError(msg)
        return self._proxied_resolver


class Resolver(ResolverBase):
    """Terminal pipeline stage: find a registration and build its instance."""

    def __init__(
        self,
        registration_provider: RegistrationProvider,
        instance_creator: InstanceCreator,
    ) -> None:
        if registration_provider is None or instance_creator is None:
            msg = "registration_provider and instance_creator are required."
            raise ValueError(msg)
        super().__init__()
        self._registration_provider = registration_provider
        self._instance_creator = instance_creator

    def get_registration(self, request: ResolutionRequest) -> ServiceRegistration | None:
        registration = self._find_registration(request)
        if isinstance(registration, OpenGenericTypeRegistration):
            if get_origin(request.service_type) is None:
                return None
            return registration.close(request.service_type)
        return registration

    def _find_registration(self, request: ResolutionRequest) -> ServiceRegistration | None:
        if self._registration_provider.can_fulfil_request(request):
            return self._registration_provider.get(request)

        request_without_name = request.without_name()
        if self._registration_provider.can_fulfil_request(request_without_name):
            return self._registration_provider.get(request_without_name)
        return None

    def resolve(self, request: ResolutionRequest) -> ResolutionResult:
        return self.resolve_registration(request, self.get_registration(request))

    def resolve_registration(
        self,
        request: ResolutionRequest,
        registration: ServiceRegistration | None,
    ) -> ResolutionResult:
        """Build an instance of ``registration`` for ``request``.

        A missing registration produces a failed result.
        """
        if request is None:
            msg = "request must not be None."
            raise ValueError(msg)
        self._assert_is_valid_request(request)

        if registration is None:
            return ResolutionResult.failure(request.resolution_path)

        factory = registration.get_factory_adapter(request)
        if factory is None:
            return ResolutionResult.failure(request.resolution_path)

        resolved = self._instance_creator.create_from_factory(
            factory,
            request.resolution_path,
            registration,
        )
        self._publish_service_resolved(ServiceResolvedEvent(registration, resolved))
        return ResolutionResult.success(request.resolution_path, resolved)

    def _assert_is_valid_request(self, request: ResolutionRequest) -> None:
        if is_primitive_type(request.service_type):
            msg = f"Primitive and value types cannot be resolved.\n{request!r}"
            raise FlexDiInvalidResolutionRequestError(msg, resolution_path=request.resolution_path)


__all__ = [
    "LateBoundResolverProxy",
    "ProxyingResolver",
    "Resolver",
    "ResolverBase",
    "ServiceResolvedEvent",
    "ServiceResolvedListener",
]
