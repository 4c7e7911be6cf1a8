from __future__ import annotations

import enum
import types
from typing import Any, TypeGuard, get_origin

PRIMITIVE_TYPES: tuple[type[Any], ...] = (
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    bytearray,
    type(None),
    enum.Enum,
)


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def runtime_class_of(service_type: object) -> type[Any] | None:
    """Return the runtime class behind a service type, unwrapping generic aliases."""
    if is_runtime_class(service_type):
        return service_type
    origin = get_origin(service_type)
    if is_runtime_class(origin):
        return origin
    return None


def is_primitive_type(service_type: object) -> bool:
    """Return whether a service type is a value type that is never constructed."""
    if service_type is None:
        return True
    if not is_runtime_class(service_type):
        return False
    return issubclass(service_type, PRIMITIVE_TYPES)


def is_assignable(implementation_type: object, service_type: object) -> bool:
    """Return whether instances of ``implementation_type`` can serve ``service_type``.

    Generic aliases are compared through their origins. Protocols that do not
    support ``issubclass`` checks are accepted structurally.
    """
    if implementation_type == service_type:
        return True
    implementation_class = runtime_class_of(implementation_type)
    service_class = runtime_class_of(service_type)
    if implementation_class is None or service_class is None:
        return False
    if service_class is object:
        return True
    try:
        return issubclass(implementation_class, service_class)
    except TypeError:
        return bool(getattr(service_class, "_is_protocol", False))


def is_subclass_safe(candidate: object, base: object) -> bool:
    """Return ``issubclass(candidate, base)`` for runtime classes, false otherwise."""
    if not is_runtime_class(candidate) or not is_runtime_class(base):
        return False
    try:
        return issubclass(candidate, base)
    except TypeError:
        return False


def describe_type(service_type: object) -> str:
    """Return a short human readable name for a service type."""
    if is_runtime_class(service_type):
        return service_type.__qualname__
    return repr(service_type).replace("typing.", "")


__all__ = [
    "PRIMITIVE_TYPES",
    "describe_type",
    "is_assignable",
    "is_primitive_type",
    "is_runtime_class",
    "is_subclass_safe",
    "runtime_class_of",
]
