from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from flexdi._internal.autoregistration import ConcreteTypeAutoregistrationPolicy
from flexdi.integrations.pydantic_settings import (
    is_pydantic_settings_subclass,
    settings_registration,
)
from flexdi.registrations import (
    RegistrationKey,
    ServiceRegistration,
    TypeRegistration,
)
from flexdi.resolution.constructors import ConstructorWithMostParametersSelector
from flexdi.resolution.request import ResolutionRequest

if TYPE_CHECKING:
    from flexdi.container_interface import ResolutionInfo

logger = logging.getLogger(__name__)

KeyOrRequest = RegistrationKey | ResolutionRequest


def _as_key(key_or_request: KeyOrRequest) -> RegistrationKey:
    if key_or_request is None:
        msg = "A registration key or resolution request is required."
        raise ValueError(msg)
    if isinstance(key_or_request, ResolutionRequest):
        return RegistrationKey.from_request(key_or_request)
    return key_or_request


@runtime_checkable
class RegistrationProvider(Protocol):
    """Read access to a source of registrations."""

    def can_fulfil_request(self, request: ResolutionRequest) -> bool: ...

    def has_registration(self, key: KeyOrRequest) -> bool: ...

    def get(self, key: KeyOrRequest) -> ServiceRegistration | None: ...

    def get_all(self, service_type: Any = None) -> list[ServiceRegistration]: ...


class Registry:
    """Thread-safe store of registrations, one per registration key.

    Adding a registration for an existing key replaces it. Lookups consider the
    exact key first, then every registration whose ``matches_key`` accepts the
    key, and return the one with the highest priority.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._registrations: dict[RegistrationKey, ServiceRegistration] = {}

    def add(self, registration: ServiceRegistration) -> None:
        if registration is None:
            msg = "registration must not be None."
            raise ValueError(msg)
        registration.assert_is_valid()

        key = registration.key
        with self._lock:
            self._registrations.pop(key, None)
            self._registrations[key] = registration
        logger.debug("Registered %r", registration)

    def can_fulfil_request(self, request: ResolutionRequest) -> bool:
        return self.has_registration(request)

    def has_registration(self, key: KeyOrRequest) -> bool:
        return self.get(key) is not None

    def get(self, key: KeyOrRequest) -> ServiceRegistration | None:
        matches = self._matching_registrations(_as_key(key))
        if not matches:
            return None
        # max() keeps the first of equal priorities, so the exact match wins ties.
        return max(matches, key=lambda registration: registration.priority)

    def get_all(self, service_type: Any = None) -> list[ServiceRegistration]:
        with self._lock:
            items = list(self._registrations.items())
        return [
            registration
            for key, registration in items
            if service_type is None or key.service_type == service_type
        ]

    def _matching_registrations(self, key: RegistrationKey) -> list[ServiceRegistration]:
        with self._lock:
            exact = self._registrations.get(key)
            matches = [] if exact is None else [exact]
            matches.extend(
                registration
                for registration in self._registrations.values()
                if registration is not exact and registration.matches_key(key)
            )
        return matches

    def __len__(self) -> int:
        with self._lock:
            return len(self._registrations)


class RegistryStack:
    """Combine several registration providers, innermost first.

    The first provider with a registration for a key answers lookups; when
    listing registrations, those of inner providers shadow outer ones with the
    same key.
    """

    def __init__(self, providers_innermost_first: Sequence[RegistrationProvider]) -> None:
        self._providers = tuple(providers_innermost_first)

    @property
    def providers(self) -> tuple[RegistrationProvider, ...]:
        return self._providers

    def can_fulfil_request(self, request: ResolutionRequest) -> bool:
        return any(provider.has_registration(request) for provider in self._providers)

    def has_registration(self, key: KeyOrRequest) -> bool:
        return any(provider.has_registration(key) for provider in self._providers)

    def get(self, key: KeyOrRequest) -> ServiceRegistration | None:
        for provider in self._providers:
            if provider.has_registration(key):
                return provider.get(key)
        return None

    def get_all(self, service_type: Any = None) -> list[ServiceRegistration]:
        found: dict[RegistrationKey, ServiceRegistration] = {}
        for provider in self._providers:
            for registration in provider.get_all(service_type):
                found.setdefault(registration.key, registration)
        return list(found.values())


def create_registry_stack(resolution_info: ResolutionInfo) -> RegistryStack:
    """Stack the registries of a container and all of its ancestors, innermost first."""
    registries: list[RegistrationProvider] = []
    current: ResolutionInfo | None = resolution_info
    while current is not None:
        registries.append(current.registry)
        current = current.parent
    return RegistryStack(registries)


class UnregisteredServiceRegistrationProvider:
    """Synthesize registrations for concrete types that were never registered.

    Eligible classes get a cacheable ``TypeRegistration``; pydantic settings
    classes get a zero-argument cacheable factory so that values are loaded
    from the environment. Ineligible service types (builtins, protocols,
    abstract classes, metaclasses, generic aliases) get no registration.
    """

    def __init__(
        self,
        constructor_selector: ConstructorWithMostParametersSelector,
        policy: ConcreteTypeAutoregistrationPolicy | None = None,
    ) -> None:
        self._constructor_selector = constructor_selector
        self._policy = policy or ConcreteTypeAutoregistrationPolicy()

    def can_fulfil_request(self, request: ResolutionRequest) -> bool:
        return self.has_registration(request)

    def has_registration(self, key: KeyOrRequest) -> bool:
        return self._policy.is_eligible_concrete(_as_key(key).service_type)

    def get(self, key: KeyOrRequest) -> ServiceRegistration | None:
        key = _as_key(key)
        service_type = key.service_type
        if not self._policy.is_eligible_concrete(service_type):
            return None
        if is_pydantic_settings_subclass(service_type):
            return settings_registration(service_type, key.name)
        return TypeRegistration(
            service_type,
            self._constructor_selector,
            service_type=service_type,
            name=key.name,
            cacheable=True,
        )

    def get_all(self, service_type: Any = None) -> list[ServiceRegistration]:
        if service_type is None:
            msg = "get_all() without a service type is not supported for unregistered services."
            raise TypeError(msg)
        registration = self.get(RegistrationKey(service_type))
        return [] if registration is None else [registration]


__all__ = [
    "RegistrationProvider",
    "Registry",
    "RegistryStack",
    "UnregisteredServiceRegistrationProvider",
    "create_registry_stack",
]
