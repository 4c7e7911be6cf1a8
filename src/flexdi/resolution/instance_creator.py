from __future__ import annotations

from typing import TYPE_CHECKING, Any

from flexdi._internal.type_checks import describe_type
from flexdi.exceptions import FlexDiCannotResolveParameterError
from flexdi.resolution.factories import USE_DEFAULT, FactoryAdapter
from flexdi.resolution.parameters import ParameterDescriptor
from flexdi.resolution.request import ResolutionPath, ResolutionRequest

if TYPE_CHECKING:
    from flexdi.registrations import ServiceRegistration
    from flexdi.resolution.resolver import ResolverBase


class InstanceCreator:
    """Execute factory adapters, resolving their parameters first.

    Parameters are resolved through the outermost pipeline stage so nested
    requests pass through every stage, including cycle detection.
    """

    def __init__(self, resolver: ResolverBase) -> None:
        if resolver is None:
            msg = "resolver must not be None."
            raise ValueError(msg)
        self._resolver = resolver

    def create_from_factory(
        self,
        factory: FactoryAdapter,
        path: ResolutionPath,
        registration: ServiceRegistration,
    ) -> Any:
        if factory is None:
            msg = "factory must not be None."
            raise ValueError(msg)

        if not factory.requires_parameter_resolution:
            return factory.execute([])

        child_path = path.create_child(registration)
        arguments = [
            self._resolve_parameter(parameter, path, child_path)
            for parameter in factory.get_parameters()
        ]
        return factory.execute(arguments)

    def _resolve_parameter(
        self,
        parameter: ParameterDescriptor,
        path: ResolutionPath,
        child_path: ResolutionPath,
    ) -> Any:
        if not parameter.resolvable:
            return USE_DEFAULT

        request = ResolutionRequest(parameter.service_type, parameter.name, child_path)
        result = self._resolver.resolve(request)
        if result.is_success:
            return result.resolved_object
        if parameter.has_default:
            return USE_DEFAULT

        msg = (
            f"Cannot resolve parameter '{parameter.name}' of type "
            f"'{describe_type(parameter.service_type)}'."
        )
        raise FlexDiCannotResolveParameterError(
            msg,
            parameter_name=parameter.name,
            service_type=parameter.service_type,
            resolution_path=path,
        )


__all__ = ["InstanceCreator"]
