from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flexdi.exceptions import FlexDiCircularDependencyError
from flexdi.resolution.request import ResolutionPath, ResolutionRequest, ResolutionResult
from flexdi.resolution.resolver import ProxyingResolver, ResolverBase

if TYPE_CHECKING:
    from flexdi.container_interface import ResolutionInfo
    from flexdi.registrations import ServiceRegistration

logger = logging.getLogger(__name__)


class CircularDependencyDetector:
    def has_circular_dependency(
        self,
        registration: ServiceRegistration,
        resolution_path: ResolutionPath,
    ) -> bool:
        return resolution_path.contains(registration)

    def throw_on_circular_dependency(
        self,
        registration: ServiceRegistration,
        resolution_path: ResolutionPath,
    ) -> None:
        if not self.has_circular_dependency(registration, resolution_path):
            return
        logger.debug("Circular dependency on %r", registration)
        msg = f"Circular dependency detected while resolving {registration!r}; this is not supported."
        raise FlexDiCircularDependencyError(msg, resolution_path=resolution_path)


class CircularDependencyPreventingResolverProxy(ProxyingResolver):
    """Raise when the registration about to be used is already in the resolution path."""

    def __init__(
        self,
        proxied_resolver: ResolverBase,
        detector: CircularDependencyDetector | None = None,
    ) -> None:
        super().__init__(proxied_resolver)
        self._detector = detector or CircularDependencyDetector()

    def resolve(self, request: ResolutionRequest) -> ResolutionResult:
        registration = self.get_registration(request)
        if registration is not None:
            self._detector.throw_on_circular_dependency(registration, request.resolution_path)
        return self._proxied_resolver.resolve(request)


class CircularDependencyPreventingResolverProxyFactory:
    def create(
        self,
        resolution_info: ResolutionInfo,
        resolver: ResolverBase,
    ) -> ResolverBase | None:
        if not resolution_info.options.throw_on_circular_dependencies:
            return None
        return CircularDependencyPreventingResolverProxy(resolver)


__all__ = [
    "CircularDependencyDetector",
    "CircularDependencyPreventingResolverProxy",
    "CircularDependencyPreventingResolverProxyFactory",
]
