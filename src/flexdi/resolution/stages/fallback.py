from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from flexdi.resolution.request import ResolutionRequest, ResolutionResult
from flexdi.resolution.resolver import ProxyingResolver, ResolverBase

if TYPE_CHECKING:
    from flexdi.container_interface import ResolutionInfo
    from flexdi.registrations import ServiceRegistration


class FallbackResolverProxy(ProxyingResolver):
    """Retry failed requests against a fallback resolver."""

    def __init__(self, proxied_resolver: ResolverBase, fallback_resolver: ResolverBase) -> None:
        if fallback_resolver is None:
            msg = "fallback_resolver must not be None."
            raise ValueError(msg)
        super().__init__(proxied_resolver)
        self._fallback_resolver = fallback_resolver
        fallback_resolver.add_service_resolved_listener(self._publish_service_resolved)

    @property
    def fallback_resolver(self) -> ResolverBase:
        return self._fallback_resolver

    def resolve(self, request: ResolutionRequest) -> ResolutionResult:
        result = self._proxied_resolver.resolve(request)
        if result.is_success:
            return result
        return self._fallback_resolver.resolve(request)

    def get_registration(self, request: ResolutionRequest) -> ServiceRegistration | None:
        registration = self._proxied_resolver.get_registration(request)
        if registration is not None:
            return registration
        return self._fallback_resolver.get_registration(request)


class FallbackToParentResolverProxyFactory:
    """Fall back to a resolver built for the parent container, when there is one."""

    def __init__(
        self,
        parent_resolver_creator: Callable[[ResolutionInfo], ResolverBase | None],
    ) -> None:
        self._parent_resolver_creator = parent_resolver_creator

    def create(
        self,
        resolution_info: ResolutionInfo,
        resolver: ResolverBase,
    ) -> ResolverBase | None:
        parent = resolution_info.parent
        if parent is None:
            return None
        parent_resolver = self._parent_resolver_creator(parent)
        if parent_resolver is None:
            return None
        return FallbackResolverProxy(resolver, parent_resolver)


__all__ = ["FallbackResolverProxy", "FallbackToParentResolverProxyFactory"]
