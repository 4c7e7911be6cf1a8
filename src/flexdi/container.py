from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import Any

from flexdi._internal.type_checks import describe_type
from flexdi.container_interface import IContainer, ReceivesRegistrations, ResolvesServices
from flexdi.exceptions import (
    FlexDiContainerDisposedError,
    FlexDiServiceReRegisteredAfterResolutionError,
)
from flexdi.options import ContainerOptions
from flexdi.registrations import InstanceRegistration, RegistrationKey, ServiceRegistration
from flexdi.registry import Registry, RegistryStack, create_registry_stack
from flexdi.resolution.cache import ResolvedServiceCache
from flexdi.resolution.constructors import ConstructorWithMostParametersSelector
from flexdi.resolution.disposer import ServiceInstanceDisposer
from flexdi.resolution.pipeline import ResolverFactory
from flexdi.resolution.request import ResolutionRequest, ResolutionResult
from flexdi.resolution.resolver import (
    ResolverBase,
    ServiceResolvedEvent,
    ServiceResolvedListener,
)

logger = logging.getLogger(__name__)


class Container(IContainer):
    """Own a registry, an instance cache and the resolver pipeline built over them.

    A container may have a parent. Requests the container cannot satisfy
    from its own registrations fall through to the parent; instances are
    cached and disposed by the container whose registration produced them.

    Examples:
        .. code-block:: python

            container = Container()
            container.add_registrations(
                [
                    TypeRegistration(SqlUserRepository, service_type=UserRepository),
                    InstanceRegistration(Settings(dsn="sqlite://")),
                ],
            )

            with container:
                service = container.resolve(UserService)

    """

    def __init__(
        self,
        options: ContainerOptions | None = None,
        parent: Container | None = None,
    ) -> None:
        """Create a container and build its resolution pipeline.

        Args:
            options: Stage switches. Defaults to the parent's options, or
                ``ContainerOptions.default()`` for a root container.
            parent: Container to fall back to for unresolved requests.

        """
        if options is None:
            options = parent.options if parent is not None else ContainerOptions.default()
        self._options = options
        self._parent = parent

        self._constructor_selector = ConstructorWithMostParametersSelector(
            use_non_public_constructors=options.use_non_public_constructors,
        )
        self._cache = ResolvedServiceCache()
        self._registry = Registry()
        self._registry_stack: RegistryStack = create_registry_stack(self)

        self._listeners: list[ServiceResolvedListener] = []
        self._listeners_lock = threading.Lock()
        self._dispose_lock = threading.Lock()
        self._is_disposed = False

        resolver_factory = options.resolver_factory or ResolverFactory()
        self._resolver: ResolverBase = resolver_factory.create_resolver(self)
        self._resolver.add_service_resolved_listener(self._on_service_resolved)

        self._register_self()
        logger.debug("Container created (parent=%s, options=%r)", parent is not None, options)

    def _register_self(self) -> None:
        service_types: list[Any] = []
        if self._options.self_register_a_resolver:
            service_types.extend([ResolvesServices, IContainer])
        if self._options.self_register_the_registry:
            service_types.append(ReceivesRegistrations)
        for service_type in service_types:
            self._registry.add(
                InstanceRegistration(self, service_type=service_type, dispose_with_container=False),
            )

    # region ResolutionInfo

    @property
    def cache(self) -> ResolvedServiceCache:
        return self._cache

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def options(self) -> ContainerOptions:
        return self._options

    @property
    def parent(self) -> Container | None:
        return self._parent

    @property
    def constructor_selector(self) -> ConstructorWithMostParametersSelector:
        return self._constructor_selector

    # endregion ResolutionInfo

    @property
    def resolver(self) -> ResolverBase:
        """Outermost stage of the resolution pipeline."""
        return self._resolver

    @property
    def is_disposed(self) -> bool:
        return self._is_disposed

    def try_resolve_request(self, request: ResolutionRequest) -> ResolutionResult:
        self._assert_not_disposed()
        return self._resolver.resolve(request)

    def has_registration(self, service_type: Any, name: str | None = None) -> bool:
        """Return whether this container or an ancestor has a matching registration."""
        self._assert_not_disposed()
        return self._registry_stack.has_registration(RegistrationKey(service_type, name))

    def get_registrations(self, service_type: Any = None) -> list[ServiceRegistration]:
        """Return registrations of this container and its ancestors.

        A registration of this container hides an ancestor's registration with
        the same key.
        """
        self._assert_not_disposed()
        return self._registry_stack.get_all(service_type)

    def add_registrations(self, registrations: Iterable[ServiceRegistration]) -> None:
        """Add ``registrations`` to this container's registry.

        Raises:
            FlexDiServiceReRegisteredAfterResolutionError: An instance for the
                same service type and name was already resolved and cached by
                this container.
            FlexDiInvalidRegistrationError: A registration is invalid.

        """
        self._assert_not_disposed()
        for registration in registrations:
            self._assert_not_cached(registration)
            self._registry.add(registration)

    def _assert_not_cached(self, registration: ServiceRegistration) -> None:
        found, _ = self._cache.try_get_exact(registration)
        if not found:
            return
        name = "" if registration.name is None else f" named {registration.name!r}"
        msg = (
            f"Cannot register '{describe_type(registration.service_type)}'{name}: an instance "
            "was already resolved and cached by this container. Register services before "
            "resolving them, or register the replacement in a child container."
        )
        raise FlexDiServiceReRegisteredAfterResolutionError(msg)

    def is_resolved_instance_cached(self, service_type: Any, name: str | None = None) -> bool:
        """Return whether this container (not an ancestor) cached an instance for the key."""
        self._assert_not_disposed()
        return self._cache.has(RegistrationKey(service_type, name))

    def create_child_container(self) -> Container:
        """Create a container that shares these options and falls back to this container."""
        self._assert_not_disposed()
        return Container(self._options, parent=self)

    def add_service_resolved_listener(self, listener: ServiceResolvedListener) -> None:
        self._assert_not_disposed()
        with self._listeners_lock:
            self._listeners.append(listener)

    def remove_service_resolved_listener(self, listener: ServiceResolvedListener) -> None:
        self._assert_not_disposed()
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _on_service_resolved(self, event: ServiceResolvedEvent) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(event)

    def dispose(self) -> None:
        """Dispose instances cached for this container's own registrations.

        Only registrations that are cacheable and marked
        ``dispose_with_container`` are considered. Calling ``dispose`` again
        does nothing.
        """
        with self._dispose_lock:
            if self._is_disposed:
                return
            self._is_disposed = True
        logger.debug("Disposing container with %d registrations", len(self._registry))
        ServiceInstanceDisposer().dispose_instances(self._registry, self._cache)

    def _assert_not_disposed(self) -> None:
        if self._is_disposed:
            msg = "The container has been disposed and can no longer be used."
            raise FlexDiContainerDisposedError(msg)
        # Children resolve through their ancestors.
        ancestor = self._parent
        while ancestor is not None:
            if ancestor.is_disposed:
                msg = (
                    "A parent of this container has been disposed, so the container can no "
                    "longer be used."
                )
                raise FlexDiContainerDisposedError(msg)
            ancestor = ancestor.parent

    def __repr__(self) -> str:
        state = "disposed" if self._is_disposed else f"registrations={len(self._registry)}"
        return f"Container({state}, has_parent={self._parent is not None})"


__all__ = ["Container"]
