from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from inspect import Parameter
from typing import Any, TypeVar, get_type_hints

from flexdi._internal.type_checks import is_primitive_type
from flexdi.exceptions import FlexDiDependencyInferenceError

_MISSING_ANNOTATION = object()


@dataclass(frozen=True, slots=True, kw_only=True)
class ParameterDescriptor:
    """Describe one parameter of a constructor or factory callable.

    ``resolvable`` is false for defaulted parameters without a usable service
    annotation; those keep their default and never issue a nested request.
    """

    name: str
    service_type: Any
    kind: inspect._ParameterKind = Parameter.POSITIONAL_OR_KEYWORD
    default: Any = Parameter.empty
    resolvable: bool = True

    @property
    def has_default(self) -> bool:
        return self.default is not Parameter.empty


class ParameterExtractor:
    """Extracts parameter descriptors from constructors and factory callables."""

    def extract(
        self,
        target: Callable[..., Any],
        *,
        target_name: str | None = None,
        hints_owner: Callable[..., Any] | None = None,
        type_arguments: Mapping[TypeVar, Any] | None = None,
    ) -> list[ParameterDescriptor]:
        """Return descriptors for the parameters of ``target``.

        Args:
            target: Callable whose signature is inspected.
            target_name: Name used in error messages.
            hints_owner: Callable whose type hints are merged in when ``target``
                is a class (usually its ``__init__``).
            type_arguments: Type variable substitutions for closed generics.

        """
        name = target_name or getattr(target, "__qualname__", repr(target))
        annotations, annotation_error = self._resolved_type_hints(target, hints_owner)
        descriptors: list[ParameterDescriptor] = []

        for parameter in inspect.signature(target).parameters.values():
            if parameter.kind in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD):
                continue
            annotation = self._resolve_parameter_annotation(
                parameter=parameter,
                annotations=annotations,
                annotation_error=annotation_error,
                target_name=name,
            )
            if annotation is not _MISSING_ANNOTATION and type_arguments:
                annotation = substitute_type_arguments(annotation, type_arguments)

            resolvable = True
            if parameter.default is not Parameter.empty and (
                annotation is _MISSING_ANNOTATION or is_primitive_type(annotation)
            ):
                resolvable = False

            descriptors.append(
                ParameterDescriptor(
                    name=parameter.name,
                    service_type=None if annotation is _MISSING_ANNOTATION else annotation,
                    kind=parameter.kind,
                    default=parameter.default,
                    resolvable=resolvable,
                ),
            )

        return descriptors

    def _resolve_parameter_annotation(
        self,
        *,
        parameter: Parameter,
        annotations: dict[str, Any],
        annotation_error: Exception | None,
        target_name: str,
    ) -> Any:
        annotation = annotations.get(parameter.name, _MISSING_ANNOTATION)
        if annotation is not _MISSING_ANNOTATION:
            return annotation

        raw_annotation = parameter.annotation
        if raw_annotation is not Parameter.empty and not isinstance(raw_annotation, str):
            return raw_annotation

        if parameter.default is not Parameter.empty:
            return _MISSING_ANNOTATION

        error_message = (
            f"Unable to infer dependency for required parameter '{parameter.name}' "
            f"of '{target_name}'. Add a type annotation or register a factory."
        )
        if annotation_error is None:
            raise FlexDiDependencyInferenceError(error_message)
        msg = f"{error_message} Original annotation error: {annotation_error}"
        raise FlexDiDependencyInferenceError(msg) from annotation_error

    def _resolved_type_hints(
        self,
        target: Callable[..., Any],
        hints_owner: Callable[..., Any] | None,
    ) -> tuple[dict[str, Any], Exception | None]:
        annotations: dict[str, Any] = {}
        annotation_error: Exception | None = None

        for owner in (hints_owner, target):
            if owner is None:
                continue
            try:
                owner_annotations = get_type_hints(owner, include_extras=True)
            except (AttributeError, NameError, TypeError) as error:
                if annotation_error is None:
                    annotation_error = error
                continue
            for parameter_name, parameter_annotation in owner_annotations.items():
                annotations.setdefault(parameter_name, parameter_annotation)

        annotations.pop("return", None)
        return annotations, annotation_error


def substitute_type_arguments(annotation: Any, type_arguments: Mapping[TypeVar, Any]) -> Any:
    """Replace type variables in ``annotation`` with their closed arguments."""
    if isinstance(annotation, TypeVar):
        return type_arguments.get(annotation, annotation)
    parameters = getattr(annotation, "__parameters__", ())
    if not parameters or not hasattr(annotation, "__getitem__"):
        return annotation
    try:
        return annotation[tuple(type_arguments.get(param, param) for param in parameters)]
    except TypeError:
        return annotation


__all__ = [
    "ParameterDescriptor",
    "ParameterExtractor",
    "substitute_type_arguments",
]
