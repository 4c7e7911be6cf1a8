from __future__ import annotations

from collections.abc import Callable, Sequence
from inspect import Parameter
from typing import Any, Protocol, runtime_checkable

from flexdi.resolution.parameters import ParameterDescriptor, ParameterExtractor

USE_DEFAULT: Any = object()
"""Argument placeholder telling a factory adapter to keep the parameter's default."""


@runtime_checkable
class FactoryAdapter(Protocol):
    """Uniform way to produce an instance from a registration."""

    @property
    def requires_parameter_resolution(self) -> bool: ...

    def get_parameters(self) -> list[ParameterDescriptor]: ...

    def execute(self, arguments: Sequence[Any]) -> Any: ...


class _CallableFactory:
    __slots__ = ("_parameters", "_target")

    def __init__(self, target: Callable[..., Any], parameters: list[ParameterDescriptor]) -> None:
        self._target = target
        self._parameters = parameters

    @property
    def target(self) -> Callable[..., Any]:
        return self._target

    def get_parameters(self) -> list[ParameterDescriptor]:
        return list(self._parameters)

    def execute(self, arguments: Sequence[Any]) -> Any:
        if len(arguments) != len(self._parameters):
            msg = (
                f"Expected {len(self._parameters)} arguments for "
                f"'{getattr(self._target, '__qualname__', self._target)!r}', got {len(arguments)}."
            )
            raise ValueError(msg)

        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for descriptor, argument in zip(self._parameters, arguments):
            if descriptor.kind is Parameter.POSITIONAL_ONLY:
                args.append(descriptor.default if argument is USE_DEFAULT else argument)
            elif argument is not USE_DEFAULT:
                kwargs[descriptor.name] = argument
        return self._target(*args, **kwargs)


class ConstructorFactory(_CallableFactory):
    """Invoke a selected constructor: the class itself or an alternate class method."""

    __slots__ = ()

    @property
    def requires_parameter_resolution(self) -> bool:
        return True


class DelegateFactory(_CallableFactory):
    """Invoke a user supplied factory callable."""

    __slots__ = ()

    @classmethod
    def from_callable(
        cls,
        factory: Callable[..., Any],
        extractor: ParameterExtractor | None = None,
    ) -> DelegateFactory:
        extractor = extractor or ParameterExtractor()
        return cls(factory, extractor.extract(factory))

    @property
    def requires_parameter_resolution(self) -> bool:
        return bool(self._parameters)


class InstanceFactory:
    """Return a pre-built instance."""

    __slots__ = ("_instance",)

    def __init__(self, instance: Any) -> None:
        self._instance = instance

    @property
    def requires_parameter_resolution(self) -> bool:
        return False

    def get_parameters(self) -> list[ParameterDescriptor]:
        return []

    def execute(self, arguments: Sequence[Any]) -> Any:  # noqa: ARG002
        return self._instance


__all__ = [
    "USE_DEFAULT",
    "ConstructorFactory",
    "DelegateFactory",
    "FactoryAdapter",
    "InstanceFactory",
]
