from __future__ import annotations

from typing import TYPE_CHECKING, Any

from flexdi.container_interface import IContainer, ResolvesServices
from flexdi.resolution.request import ResolutionPath, ResolutionRequest, ResolutionResult
from flexdi.resolution.resolver import ProxyingResolver, ResolverBase

if TYPE_CHECKING:
    from flexdi.container_interface import ResolutionInfo


class ServiceResolvingContainerProxy(ResolvesServices):
    """Resolver handed to services that depend on ``ResolvesServices``.

    Every request made through this proxy continues the resolution path of
    the service that received it, so a service resolving its own dependents
    later (for example from a stored reference) is still caught by
    circular-dependency detection.
    """

    def __init__(self, container: IContainer, resolution_path: ResolutionPath) -> None:
        if container is None or resolution_path is None:
            msg = "container and resolution_path are required."
            raise ValueError(msg)
        self._container = container
        self._resolution_path = resolution_path

    @property
    def container(self) -> IContainer:
        return self._container

    @property
    def resolution_path(self) -> ResolutionPath:
        return self._resolution_path

    def try_resolve_request(self, request: ResolutionRequest) -> ResolutionResult:
        bound_request = ResolutionRequest(request.service_type, request.name, self._resolution_path)
        return self._container.try_resolve_request(bound_request)

    def resolve_all(self, service_type: Any) -> list[Any]:
        return [
            self.resolve(registration.service_type, registration.name)
            for registration in self._container.get_registrations(service_type)
        ]

    def __repr__(self) -> str:
        return f"ServiceResolvingContainerProxy(depth={len(self._resolution_path)})"


class DynamicRecursionResolverProxy(ProxyingResolver):
    """Answer ``ResolvesServices`` requests made during construction with a path-aware proxy.

    Requests with an empty path (made directly by application code) are
    passed through unchanged.
    """

    def resolve(self, request: ResolutionRequest) -> ResolutionResult:
        if request.service_type is not ResolvesServices or request.resolution_path.is_empty:
            return self._proxied_resolver.resolve(request)

        container_request = ResolutionRequest(IContainer, request.name, request.resolution_path)
        result = self._proxied_resolver.resolve(container_request)
        if not result.is_success:
            return result

        proxy = ServiceResolvingContainerProxy(result.resolved_object, request.resolution_path)
        return ResolutionResult.success(request.resolution_path, proxy)


class DynamicRecursionResolverProxyFactory:
    def create(
        self,
        resolution_info: ResolutionInfo,  # noqa: ARG002
        resolver: ResolverBase,
    ) -> ResolverBase | None:
        return DynamicRecursionResolverProxy(resolver)


__all__ = [
    "DynamicRecursionResolverProxy",
    "DynamicRecursionResolverProxyFactory",
    "ServiceResolvingContainerProxy",
]
