from __future__ import annotations

from typing import TYPE_CHECKING, Any

from flexdi._internal.type_checks import describe_type
from flexdi.exceptions import FlexDiResolutionError
from flexdi.lazy import Lazy, get_lazy_inner_type
from flexdi.resolution.request import ResolutionRequest, ResolutionResult
from flexdi.resolution.resolver import ProxyingResolver, ResolverBase

if TYPE_CHECKING:
    from flexdi.container_interface import ResolutionInfo


class LazyInstanceResolverProxy(ProxyingResolver):
    """Answer ``Lazy[T]`` requests with a wrapper that resolves ``T`` on first use.

    The deferred request keeps the original name and resolution path and is
    sent to the inner stage.
    """

    def resolve(self, request: ResolutionRequest) -> ResolutionResult:
        inner_type = get_lazy_inner_type(request.service_type)
        if inner_type is None:
            return self._proxied_resolver.resolve(request)

        lazy_request = ResolutionRequest(inner_type, request.name, request.resolution_path)
        return ResolutionResult.success(request.resolution_path, Lazy(self._factory_for(lazy_request)))

    def _factory_for(self, lazy_request: ResolutionRequest) -> Any:
        def resolve_lazily() -> Any:
            result = self._proxied_resolver.resolve(lazy_request)
            if not result.is_success:
                msg = f"Lazy resolution failure: '{describe_type(lazy_request.service_type)}'."
                raise FlexDiResolutionError(msg, resolution_path=lazy_request.resolution_path)
            return result.resolved_object

        return resolve_lazily


class LazyInstanceResolverProxyFactory:
    def create(
        self,
        resolution_info: ResolutionInfo,
        resolver: ResolverBase,
    ) -> ResolverBase | None:
        if not resolution_info.options.support_resolving_lazy_instances:
            return None
        return LazyInstanceResolverProxy(resolver)


__all__ = ["LazyInstanceResolverProxy", "LazyInstanceResolverProxyFactory"]
