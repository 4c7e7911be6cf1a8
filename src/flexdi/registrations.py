from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, get_args, get_origin, get_type_hints

from flexdi._internal.type_checks import (
    describe_type,
    is_assignable,
    is_runtime_class,
    is_subclass_safe,
)
from flexdi.exceptions import FlexDiInvalidRegistrationError, FlexDiInvalidTypeRegistrationError
from flexdi.resolution.constructors import ConstructorWithMostParametersSelector
from flexdi.resolution.factories import (
    ConstructorFactory,
    DelegateFactory,
    FactoryAdapter,
    InstanceFactory,
)

if TYPE_CHECKING:
    from flexdi.resolution.request import ResolutionRequest

DEFAULT_PRIORITY = 1
INSTANCE_PRIORITY = 2


@dataclass(frozen=True, slots=True)
class RegistrationKey:
    """Identity of a registry slot: a service type and an optional name."""

    service_type: Any
    name: str | None = None

    @classmethod
    def from_registration(cls, registration: ServiceRegistration) -> RegistrationKey:
        return cls(registration.service_type, registration.name)

    @classmethod
    def from_request(cls, request: ResolutionRequest) -> RegistrationKey:
        return cls(request.service_type, request.name)

    def __repr__(self) -> str:
        name = "" if self.name is None else f", name={self.name!r}"
        return f"RegistrationKey({describe_type(self.service_type)}{name})"


class ServiceRegistration(ABC):
    """A rule describing how to produce an instance for a service identity.

    Registrations stay mutable until they are added to a registry, which
    validates them with :meth:`assert_is_valid`.
    """

    def __init__(
        self,
        *,
        service_type: Any = None,
        name: str | None = None,
        cacheable: bool = True,
        dispose_with_container: bool = True,
        priority: int = DEFAULT_PRIORITY,
    ) -> None:
        self._service_type = service_type
        self.name = name
        self.cacheable = cacheable
        self.dispose_with_container = dispose_with_container
        self._priority = priority

    @property
    def service_type(self) -> Any:
        return self._service_type

    @service_type.setter
    def service_type(self, value: Any) -> None:
        self._service_type = value

    @property
    def priority(self) -> int:
        """Tie breaker when several registrations match a key; higher wins."""
        return self._priority

    @property
    def key(self) -> RegistrationKey:
        return RegistrationKey.from_registration(self)

    @abstractmethod
    def get_factory_adapter(self, request: ResolutionRequest) -> FactoryAdapter:
        """Return the adapter used to produce an instance for ``request``."""

    def assert_is_valid(self) -> None:
        """Raise ``FlexDiInvalidRegistrationError`` when the registration is unusable."""
        if self.service_type is None:
            msg = f"{type(self).__name__} has no service type."
            raise FlexDiInvalidRegistrationError(msg)
        self._assert_cacheability_and_disposal_are_valid()

    def _assert_cacheability_and_disposal_are_valid(self) -> None:
        if not self.cacheable and self.dispose_with_container:
            msg = (
                f"Invalid registration for '{describe_type(self.service_type)}': "
                "dispose_with_container=True requires cacheable=True."
            )
            raise FlexDiInvalidRegistrationError(msg)

    def matches_key(self, key: RegistrationKey) -> bool:
        return self.service_type == key.service_type and self.name == key.name

    def _describe_name(self) -> str:
        return "" if self.name is None else f" named {self.name!r}"


class TypedRegistration(ServiceRegistration):
    """Registration that knows its implementation type.

    The service type defaults to the implementation type. Besides its own
    key, a typed registration also matches any key whose service type is a
    base class of the implementation type (with the same name).
    """

    @property
    @abstractmethod
    def implementation_type(self) -> Any: ...

    @property
    def service_type(self) -> Any:
        explicit = self._service_type
        if explicit is not None:
            return explicit
        return self.implementation_type

    @service_type.setter
    def service_type(self, value: Any) -> None:
        self._service_type = value

    def matches_key(self, key: RegistrationKey) -> bool:
        if super().matches_key(key):
            return True
        return is_subclass_safe(self.implementation_type, key.service_type) and self.name == key.name


class TypeRegistration(TypedRegistration):
    """Build instances by invoking a constructor of the implementation type."""

    def __init__(
        self,
        implementation_type: Any,
        constructor_selector: ConstructorWithMostParametersSelector | None = None,
        *,
        service_type: Any = None,
        name: str | None = None,
        cacheable: bool = True,
        dispose_with_container: bool = True,
    ) -> None:
        if implementation_type is None:
            msg = "implementation_type must not be None."
            raise ValueError(msg)
        super().__init__(
            service_type=service_type,
            name=name,
            cacheable=cacheable,
            dispose_with_container=dispose_with_container,
        )
        self._implementation_type = implementation_type
        self._constructor_selector = constructor_selector or ConstructorWithMostParametersSelector()

    @property
    def implementation_type(self) -> Any:
        return self._implementation_type

    @property
    def constructor_selector(self) -> ConstructorWithMostParametersSelector:
        return self._constructor_selector

    def get_factory_adapter(self, request: ResolutionRequest) -> FactoryAdapter:  # noqa: ARG002
        return self._adapter_for(self._implementation_type)

    def _adapter_for(self, implementation_type: Any) -> FactoryAdapter:
        selected = self._constructor_selector.select(implementation_type)
        return ConstructorFactory(selected.target, selected.parameters)

    def assert_is_valid(self) -> None:
        if not is_assignable(self.implementation_type, self.service_type):
            msg = (
                f"{type(self).__name__}: implementation type "
                f"'{describe_type(self.implementation_type)}' is not assignable to service type "
                f"'{describe_type(self.service_type)}'."
            )
            raise FlexDiInvalidTypeRegistrationError(msg)
        super().assert_is_valid()

    def __repr__(self) -> str:
        return (
            f"[Type registration for '{describe_type(self.service_type)}'{self._describe_name()}, "
            f"using type '{describe_type(self.implementation_type)}']"
        )


class OpenGenericTypeRegistration(TypeRegistration):
    """Register an open generic implementation for an open generic service.

    ``OpenGenericTypeRegistration(SqlRepository, service_type=Repository)``
    serves every closed ``Repository[X]`` request by constructing
    ``SqlRepository[X]``.
    """

    def __init__(
        self,
        implementation_type: Any,
        constructor_selector: ConstructorWithMostParametersSelector | None = None,
        *,
        service_type: Any = None,
        name: str | None = None,
        cacheable: bool = True,
        dispose_with_container: bool = True,
    ) -> None:
        super().__init__(
            implementation_type,
            constructor_selector,
            service_type=service_type,
            name=name,
            cacheable=cacheable,
            dispose_with_container=dispose_with_container,
        )
        self._closed_lock = threading.Lock()
        self._closed_registrations: dict[Any, TypeRegistration] = {}

    def close(self, service_type: Any) -> TypeRegistration:
        """Return the registration serving the closed generic ``service_type``.

        The same closed registration is returned for repeated calls, so each
        closed service type gets its own cache slot.
        """
        with self._closed_lock:
            closed = self._closed_registrations.get(service_type)
            if closed is None:
                closed = TypeRegistration(
                    self.close_implementation_type(get_args(service_type)),
                    self.constructor_selector,
                    service_type=service_type,
                    name=self.name,
                    cacheable=self.cacheable,
                    dispose_with_container=self.dispose_with_container,
                )
                self._closed_registrations[service_type] = closed
            return closed

    def get_closed_registrations(self) -> list[TypeRegistration]:
        with self._closed_lock:
            return list(self._closed_registrations.values())

    def matches_key(self, key: RegistrationKey) -> bool:
        if get_origin(key.service_type) is None:
            return False
        return get_origin(key.service_type) == self.service_type and self.name == key.name

    def get_factory_adapter(self, request: ResolutionRequest) -> FactoryAdapter:
        type_arguments = get_args(request.service_type)
        if get_origin(request.service_type) is None or not type_arguments:
            msg = f"{request!r} is not a request for a closed generic type."
            raise ValueError(msg)
        return self._adapter_for(self.close_implementation_type(type_arguments))

    def close_implementation_type(self, type_arguments: tuple[Any, ...]) -> Any:
        implementation_type = self.implementation_type
        if not getattr(implementation_type, "__parameters__", ()):
            return implementation_type
        return implementation_type[type_arguments]

    def assert_is_valid(self) -> None:
        if not _is_assignable_to_generic_type(self.implementation_type, self.service_type):
            msg = (
                f"{type(self).__name__}: implementation type "
                f"'{describe_type(self.implementation_type)}' does not derive from the open "
                f"generic service type '{describe_type(self.service_type)}'."
            )
            raise FlexDiInvalidTypeRegistrationError(msg)
        self._assert_cacheability_and_disposal_are_valid()

    def __repr__(self) -> str:
        return (
            f"[Open generic registration for '{describe_type(self.service_type)}'"
            f"{self._describe_name()}, using type '{describe_type(self.implementation_type)}']"
        )


def _is_assignable_to_generic_type(given_type: Any, generic_type: Any) -> bool:
    if given_type is generic_type:
        return True
    if not is_runtime_class(given_type):
        return False
    for klass in given_type.__mro__:
        if klass is generic_type:
            return True
        for base in getattr(klass, "__orig_bases__", ()):
            if get_origin(base) is generic_type:
                return True
    return False


class FactoryRegistration(ServiceRegistration):
    """Build instances by calling a factory; its parameters are resolved first.

    The service type defaults to the factory's return annotation.
    """

    def __init__(
        self,
        factory: Callable[..., Any],
        *,
        service_type: Any = None,
        name: str | None = None,
        cacheable: bool = True,
        dispose_with_container: bool = True,
    ) -> None:
        if factory is None:
            msg = "factory must not be None."
            raise ValueError(msg)
        super().__init__(
            service_type=service_type if service_type is not None else _return_type(factory),
            name=name,
            cacheable=cacheable,
            dispose_with_container=dispose_with_container,
        )
        self._factory = factory

    @property
    def factory(self) -> Callable[..., Any]:
        return self._factory

    def get_factory_adapter(self, request: ResolutionRequest) -> FactoryAdapter:  # noqa: ARG002
        return DelegateFactory.from_callable(self._factory)

    def __repr__(self) -> str:
        return f"[Factory registration for '{describe_type(self.service_type)}'{self._describe_name()}]"


def _return_type(factory: Callable[..., Any]) -> Any:
    try:
        return_type = get_type_hints(factory).get("return")
    except (AttributeError, NameError, TypeError):
        return None
    if return_type is type(None):
        return None
    return return_type


class InstanceRegistration(TypedRegistration):
    """Serve a pre-built instance. Always cacheable; never disposed by default."""

    def __init__(
        self,
        instance: Any,
        *,
        service_type: Any = None,
        name: str | None = None,
        dispose_with_container: bool = False,
    ) -> None:
        if instance is None:
            msg = "instance must not be None."
            raise ValueError(msg)
        super().__init__(
            service_type=service_type,
            name=name,
            cacheable=True,
            dispose_with_container=dispose_with_container,
            priority=INSTANCE_PRIORITY,
        )
        self._instance = instance

    @property
    def implementation_type(self) -> Any:
        return type(self._instance)

    @property
    def instance(self) -> Any:
        return self._instance

    def get_factory_adapter(self, request: ResolutionRequest) -> FactoryAdapter:  # noqa: ARG002
        return InstanceFactory(self._instance)

    def assert_is_valid(self) -> None:
        super().assert_is_valid()
        if not is_assignable(self.implementation_type, self.service_type):
            msg = (
                f"{type(self).__name__}: an instance of "
                f"'{describe_type(self.implementation_type)}' cannot serve "
                f"'{describe_type(self.service_type)}'."
            )
            raise FlexDiInvalidTypeRegistrationError(msg)
        if not self.cacheable:
            msg = f"{type(self).__name__} for '{describe_type(self.service_type)}' must be cacheable."
            raise FlexDiInvalidRegistrationError(msg)

    def __repr__(self) -> str:
        return (
            f"[InstanceRegistration for '{describe_type(self.service_type)}'{self._describe_name()}, "
            f"using an instance of '{describe_type(self.implementation_type)}']"
        )


__all__ = [
    "FactoryRegistration",
    "InstanceRegistration",
    "OpenGenericTypeRegistration",
    "RegistrationKey",
    "ServiceRegistration",
    "TypeRegistration",
    "TypedRegistration",
]
