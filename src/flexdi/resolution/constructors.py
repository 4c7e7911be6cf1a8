from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar, get_args

from flexdi._internal.type_checks import describe_type, runtime_class_of
from flexdi.exceptions import (
    FlexDiAmbiguousConstructorError,
    FlexDiCannotInstantiateTypeError,
)
from flexdi.resolution.parameters import ParameterDescriptor, ParameterExtractor

F = TypeVar("F")

_CONSTRUCTOR_MARKER = "__flexdi_constructor__"


def constructor(method: F) -> F:
    """Mark a class method or static method as an alternate constructor.

    Alternate constructors compete with the class signature during
    constructor selection; the candidate with the most parameters wins.

    Examples:
        .. code-block:: python

            class Client:
                def __init__(self) -> None: ...

                @constructor
                @classmethod
                def with_session(cls, session: Session) -> Client: ...

    """
    target = getattr(method, "__func__", method)
    setattr(target, _CONSTRUCTOR_MARKER, True)
    return method


@dataclass(frozen=True, slots=True, kw_only=True)
class ConstructorCandidate:
    """A callable able to build an implementation type."""

    name: str
    target: Callable[..., Any]
    parameters: list[ParameterDescriptor]

    @property
    def parameter_count(self) -> int:
        return len(self.parameters)


class ConstructorWithMostParametersSelector:
    """Select the constructor with the most parameters, refusing ties.

    Candidates are the class signature itself (covering ``__init__``,
    dataclasses, attrs and pydantic models) plus every method decorated with
    :func:`constructor`. Methods whose name starts with an underscore are only
    considered when ``use_non_public_constructors`` is true.
    """

    def __init__(
        self,
        *,
        use_non_public_constructors: bool = False,
        parameter_extractor: ParameterExtractor | None = None,
    ) -> None:
        self._use_non_public_constructors = use_non_public_constructors
        self._parameter_extractor = parameter_extractor or ParameterExtractor()

    @property
    def use_non_public_constructors(self) -> bool:
        return self._use_non_public_constructors

    def select(self, implementation_type: Any) -> ConstructorCandidate:
        candidates = self.get_candidates(implementation_type)
        if not candidates:
            msg = (
                f"Cannot create an instance of '{describe_type(implementation_type)}'; "
                "it has no usable constructors."
            )
            raise FlexDiCannotInstantiateTypeError(msg)

        most_parameters = max(candidate.parameter_count for candidate in candidates)
        best = [c for c in candidates if c.parameter_count == most_parameters]
        if len(best) > 1:
            noun = "parameter" if most_parameters == 1 else "parameters"
            names = ", ".join(candidate.name for candidate in best)
            msg = (
                f"Cannot choose a constructor for '{describe_type(implementation_type)}'; "
                f"{len(best)} constructors ({names}) take {most_parameters} {noun}."
            )
            raise FlexDiAmbiguousConstructorError(msg)
        return best[0]

    def get_candidates(self, implementation_type: Any) -> list[ConstructorCandidate]:
        implementation_class = runtime_class_of(implementation_type)
        if implementation_class is None:
            return []
        type_arguments = _type_arguments(implementation_type, implementation_class)

        candidates: list[ConstructorCandidate] = []
        primary = self._primary_candidate(implementation_type, implementation_class, type_arguments)
        if primary is not None:
            candidates.append(primary)

        for name, target in self._alternate_constructors(implementation_class):
            candidates.append(
                ConstructorCandidate(
                    name=f"{implementation_class.__qualname__}.{name}",
                    target=target,
                    parameters=self._parameter_extractor.extract(
                        target,
                        type_arguments=type_arguments,
                    ),
                ),
            )
        return candidates

    def _primary_candidate(
        self,
        implementation_type: Any,
        implementation_class: type[Any],
        type_arguments: Mapping[TypeVar, Any],
    ) -> ConstructorCandidate | None:
        if inspect.isabstract(implementation_class):
            return None
        if getattr(implementation_class, "_is_protocol", False):
            return None
        try:
            inspect.signature(implementation_class)
        except (TypeError, ValueError):
            return None

        parameters = self._parameter_extractor.extract(
            implementation_class,
            target_name=implementation_class.__qualname__,
            hints_owner=_own_init(implementation_class),
            type_arguments=type_arguments,
        )
        return ConstructorCandidate(
            name=implementation_class.__qualname__,
            target=implementation_type,
            parameters=parameters,
        )

    def _alternate_constructors(
        self,
        implementation_class: type[Any],
    ) -> list[tuple[str, Callable[..., Any]]]:
        found: dict[str, Callable[..., Any]] = {}
        seen: set[str] = set()
        for klass in implementation_class.__mro__:
            for name, attribute in vars(klass).items():
                if name in seen:
                    continue
                seen.add(name)
                if not isinstance(attribute, (classmethod, staticmethod)):
                    continue
                if not getattr(attribute.__func__, _CONSTRUCTOR_MARKER, False):
                    continue
                if name.startswith("_") and not self._use_non_public_constructors:
                    continue
                found[name] = getattr(implementation_class, name)
        return list(found.items())


def _own_init(implementation_class: type[Any]) -> Callable[..., Any] | None:
    init = implementation_class.__init__
    if init is object.__init__:
        return None
    return init


def _type_arguments(implementation_type: Any, implementation_class: type[Any]) -> dict[TypeVar, Any]:
    if implementation_type is implementation_class:
        return {}
    parameters = getattr(implementation_class, "__parameters__", ())
    return dict(zip(parameters, get_args(implementation_type)))


__all__ = [
    "ConstructorCandidate",
    "ConstructorWithMostParametersSelector",
    "constructor",
]
