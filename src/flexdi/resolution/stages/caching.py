from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flexdi.resolution.request import ResolutionRequest, ResolutionResult
from flexdi.resolution.resolver import ProxyingResolver, ResolverBase

if TYPE_CHECKING:
    from flexdi.container_interface import ResolutionInfo
    from flexdi.resolution.cache import ResolvedServiceCache

logger = logging.getLogger(__name__)


class CachingResolverProxy(ProxyingResolver):
    """Serve cacheable registrations from the instance cache.

    On a miss the request is delegated inward and a successful result is
    stored when its registration is cacheable. Concurrent first resolutions
    of the same registration may each build an instance; the cache keeps the
    first one stored and every caller still receives the instance it built.
    """

    def __init__(self, proxied_resolver: ResolverBase, cache: ResolvedServiceCache) -> None:
        if cache is None:
            msg = "cache must not be None."
            raise ValueError(msg)
        super().__init__(proxied_resolver)
        self._cache = cache

    def resolve(self, request: ResolutionRequest) -> ResolutionResult:
        registration = self.get_registration(request)
        if registration is not None and registration.cacheable:
            found, instance = self._cache.try_get(registration)
            if found:
                logger.debug("Cache hit for %r", request)
                return ResolutionResult.success(request.resolution_path, instance)

        result = self._proxied_resolver.resolve(request)
        if result.is_success and registration is not None and registration.cacheable:
            self._cache.add(registration, result.resolved_object)
        return result


class CachingResolverProxyFactory:
    def create(
        self,
        resolution_info: ResolutionInfo,
        resolver: ResolverBase,
    ) -> ResolverBase | None:
        if not resolution_info.options.use_instance_cache:
            return None
        return CachingResolverProxy(resolver, resolution_info.cache)


__all__ = ["CachingResolverProxy", "CachingResolverProxyFactory"]
