from __future__ import annotations

from typing import TYPE_CHECKING

from flexdi.resolution.request import ResolutionRequest, ResolutionResult
from flexdi.resolution.resolver import ProxyingResolver, ResolverBase

if TYPE_CHECKING:
    from flexdi.container_interface import ResolutionInfo


class OptionalResolutionResolverProxy(ProxyingResolver):
    """Turn every failed result of the inner stages into a success carrying ``None``."""

    def resolve(self, request: ResolutionRequest) -> ResolutionResult:
        result = self._proxied_resolver.resolve(request)
        if result.is_success:
            return result
        return ResolutionResult.success(result.resolution_path, None)


class OptionalResolutionResolverProxyFactory:
    def create(
        self,
        resolution_info: ResolutionInfo,
        resolver: ResolverBase,
    ) -> ResolverBase | None:
        if not resolution_info.options.make_all_resolution_optional:
            return None
        return OptionalResolutionResolverProxy(resolver)


__all__ = ["OptionalResolutionResolverProxy", "OptionalResolutionResolverProxyFactory"]
