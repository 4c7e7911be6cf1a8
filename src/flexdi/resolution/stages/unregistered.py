from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flexdi.registry import Registry, UnregisteredServiceRegistrationProvider
from flexdi.resolution.request import ResolutionRequest, ResolutionResult
from flexdi.resolution.resolver import ProxyingResolver, Resolver, ResolverBase

if TYPE_CHECKING:
    from flexdi.container_interface import ResolutionInfo
    from flexdi.registrations import ServiceRegistration
    from flexdi.resolution.cache import ResolvedServiceCache

logger = logging.getLogger(__name__)


class UnregisteredServiceResolverProxy(ProxyingResolver):
    """Resolve types that have no registration by synthesizing one.

    When the inner stages fail, a registration is built for the requested
    type and resolved by the core resolver. A successful result makes the
    synthetic registration permanent: it is added to the registry and, when
    caching is enabled, its instance to the cache.
    """

    def __init__(
        self,
        proxied_resolver: ResolverBase,
        registration_resolver: Resolver,
        unregistered_registration_provider: UnregisteredServiceRegistrationProvider,
        registry: Registry,
        cache: ResolvedServiceCache | None = None,
    ) -> None:
        super().__init__(proxied_resolver)
        self._registration_resolver = registration_resolver
        self._unregistered_registration_provider = unregistered_registration_provider
        self._registry = registry
        self._cache = cache

    def resolve(self, request: ResolutionRequest) -> ResolutionResult:
        result = self._proxied_resolver.resolve(request)
        if result.is_success:
            return result

        # Synthetic registrations are unnamed so that a parameter name never
        # splits the instance of a type into several cache slots.
        unnamed_request = request.without_name()
        if request.name is not None:
            unnamed_result = self._proxied_resolver.resolve(unnamed_request)
            if unnamed_result.is_success:
                return unnamed_result

        registration = self._unregistered_registration_provider.get(unnamed_request)
        if registration is None:
            return result

        logger.debug("Resolving unregistered service %r with %r", request, registration)
        result = self._registration_resolver.resolve_registration(unnamed_request, registration)
        if result.is_success:
            self._registry.add(registration)
            if self._cache is not None:
                self._cache.add(registration, result.resolved_object)
        return result

    def get_registration(self, request: ResolutionRequest) -> ServiceRegistration | None:
        registration = super().get_registration(request)
        if registration is not None:
            return registration
        return self._unregistered_registration_provider.get(request.without_name())


class UnregisteredServiceResolverProxyFactory:
    """Install unregistered-type resolution on top of ``core_resolver``."""

    def __init__(
        self,
        core_resolver: Resolver,
        unregistered_registration_provider: UnregisteredServiceRegistrationProvider | None = None,
    ) -> None:
        self._core_resolver = core_resolver
        self._unregistered_registration_provider = unregistered_registration_provider

    def create(
        self,
        resolution_info: ResolutionInfo,
        resolver: ResolverBase,
    ) -> ResolverBase | None:
        options = resolution_info.options
        if not options.resolve_unregistered_types:
            return None
        provider = self._unregistered_registration_provider or UnregisteredServiceRegistrationProvider(
            resolution_info.constructor_selector,
        )
        return UnregisteredServiceResolverProxy(
            resolver,
            self._core_resolver,
            provider,
            resolution_info.registry,
            resolution_info.cache if options.use_instance_cache else None,
        )


__all__ = ["UnregisteredServiceResolverProxy", "UnregisteredServiceResolverProxyFactory"]
