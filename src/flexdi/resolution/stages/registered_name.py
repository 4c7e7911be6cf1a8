from __future__ import annotations

from typing import TYPE_CHECKING

from flexdi.registrations import InstanceRegistration
from flexdi.resolution.request import ResolutionRequest, ResolutionResult
from flexdi.resolution.resolver import ProxyingResolver, ResolverBase

if TYPE_CHECKING:
    from flexdi.container_interface import ResolutionInfo

REGISTERED_NAME = "registeredName"
REGISTERED_NAME_PARAMETERS = frozenset({REGISTERED_NAME, "registered_name"})


class RegisteredNameInjectingResolverProxy(ProxyingResolver):
    """Answer ``str`` parameters named ``registeredName`` with the current registration's name.

    The value comes from the registration at the top of the resolution path
    (the one being constructed), not from a registry lookup. ``registered_name``
    is accepted as the snake-case spelling.
    """

    def resolve(self, request: ResolutionRequest) -> ResolutionResult:
        if request.service_type is not str or request.name not in REGISTERED_NAME_PARAMETERS:
            return self._proxied_resolver.resolve(request)

        path = request.resolution_path
        current = path.current_registration
        registered_name = None if current is None else current.name
        if registered_name is None:
            return ResolutionResult.success(path, None)

        name_registration = InstanceRegistration(
            registered_name,
            service_type=str,
            name=REGISTERED_NAME,
        )
        return ResolutionResult.success(path.create_child(name_registration), registered_name)


class RegisteredNameInjectingResolverProxyFactory:
    def create(
        self,
        resolution_info: ResolutionInfo,  # noqa: ARG002
        resolver: ResolverBase,
    ) -> ResolverBase | None:
        return RegisteredNameInjectingResolverProxy(resolver)


__all__ = [
    "REGISTERED_NAME",
    "REGISTERED_NAME_PARAMETERS",
    "RegisteredNameInjectingResolverProxy",
    "RegisteredNameInjectingResolverProxyFactory",
]
