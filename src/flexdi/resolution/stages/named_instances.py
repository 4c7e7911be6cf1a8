from __future__ import annotations

import collections.abc
import enum
from typing import TYPE_CHECKING, Any, get_args, get_origin

from flexdi._internal.type_checks import describe_type, is_subclass_safe
from flexdi.exceptions import FlexDiNoMatchingEnumerationConstantError
from flexdi.registrations import InstanceRegistration
from flexdi.registry import RegistrationProvider, create_registry_stack
from flexdi.resolution.request import ResolutionRequest, ResolutionResult
from flexdi.resolution.resolver import ProxyingResolver, ResolverBase

if TYPE_CHECKING:
    from flexdi.container_interface import ResolutionInfo
    from flexdi.registrations import ServiceRegistration

_MAPPING_ORIGINS: tuple[Any, ...] = (
    dict,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
)


def get_mapping_types(service_type: Any) -> tuple[Any, Any] | None:
    """Return ``(key_type, value_type)`` for mapping service types, otherwise ``None``."""
    if get_origin(service_type) not in _MAPPING_ORIGINS:
        return None
    arguments = get_args(service_type)
    if len(arguments) != 2:
        return None
    return arguments[0], arguments[1]


class NamedInstanceDictionaryResolverProxy(ProxyingResolver):
    """Resolve ``dict[str, T]`` or ``dict[SomeEnum, T]`` into every named ``T``.

    Each registration of ``T`` contributes one entry keyed by its name
    (converted to the enum member with a case-insensitive name match for enum
    keys). Registrations that fail to resolve are skipped.
    """

    def __init__(
        self,
        proxied_resolver: ResolverBase,
        registration_provider: RegistrationProvider,
    ) -> None:
        super().__init__(proxied_resolver)
        self._registration_provider = registration_provider

    def resolve(self, request: ResolutionRequest) -> ResolutionResult:
        mapping_types = get_mapping_types(request.service_type)
        if mapping_types is None or not _is_name_key_type(mapping_types[0]):
            return self._proxied_resolver.resolve(request)

        key_type, value_type = mapping_types
        instances: dict[Any, Any] = {}
        for registration in self._registration_provider.get_all(value_type):
            result = self._resolve_single_instance(registration, request)
            if not result.is_success:
                continue
            instances[_convert_name(registration.name, key_type)] = result.resolved_object

        dictionary_registration = InstanceRegistration(
            instances,
            service_type=request.service_type,
        )
        path = request.resolution_path.create_child(dictionary_registration)
        return ResolutionResult.success(path, instances)

    def _resolve_single_instance(
        self,
        registration: ServiceRegistration,
        request: ResolutionRequest,
    ) -> ResolutionResult:
        single_request = ResolutionRequest(
            registration.service_type,
            registration.name,
            request.resolution_path,
        )
        return self._proxied_resolver.resolve(single_request)


def _is_name_key_type(key_type: Any) -> bool:
    return key_type is str or is_subclass_safe(key_type, enum.Enum)


def _convert_name(registered_name: str | None, key_type: Any) -> Any:
    if key_type is str:
        return registered_name
    if registered_name is not None:
        for member_name, member in key_type.__members__.items():
            if member_name.lower() == registered_name.lower():
                return member
    msg = (
        f"There must be a value in the enumeration '{describe_type(key_type)}' "
        f"which matches the name {registered_name!r}."
    )
    raise FlexDiNoMatchingEnumerationConstantError(msg)


class NamedInstanceDictionaryResolverProxyFactory:
    def create(
        self,
        resolution_info: ResolutionInfo,
        resolver: ResolverBase,
    ) -> ResolverBase | None:
        if not resolution_info.options.support_resolving_named_instance_dictionaries:
            return None
        return NamedInstanceDictionaryResolverProxy(resolver, create_registry_stack(resolution_info))


__all__ = [
    "NamedInstanceDictionaryResolverProxy",
    "NamedInstanceDictionaryResolverProxyFactory",
    "get_mapping_types",
]
