from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from typing_extensions import Self

from flexdi._internal.type_checks import describe_type
from flexdi.registrations import ServiceRegistration, TypedRegistration


class ResolutionPath:
    """Immutable ancestry of the registrations traversed in one resolve call tree.

    Every ``create_child`` call returns a new path that shares its ancestors
    with the original; a path is never mutated once created.
    """

    __slots__ = ("_depth", "_parent", "_registration")

    def __init__(
        self,
        registration: ServiceRegistration | None = None,
        *,
        _parent: ResolutionPath | None = None,
    ) -> None:
        self._registration = registration
        self._parent = _parent
        if registration is None:
            self._depth = 0
        else:
            self._depth = 1 if _parent is None else _parent._depth + 1

    @classmethod
    def from_registrations(cls, registrations: list[ServiceRegistration]) -> ResolutionPath:
        """Build a path from registrations ordered from the root to the top."""
        path = cls()
        for registration in registrations:
            path = path.create_child(registration)
        return path

    @property
    def is_empty(self) -> bool:
        return self._depth == 0

    @property
    def current_registration(self) -> ServiceRegistration | None:
        """Return the registration at the top of the path, or ``None`` when empty."""
        return self._registration

    def create_child(self, registration: ServiceRegistration) -> ResolutionPath:
        if registration is None:
            msg = "A resolution path cannot be extended with None."
            raise ValueError(msg)
        parent = self if self._depth else None
        return ResolutionPath(registration, _parent=parent)

    def contains(self, registration: ServiceRegistration) -> bool:
        """Return whether an equivalent registration was already traversed.

        Typed registrations are equivalent when both their service and
        implementation types match; any other registration is equivalent when
        the service types match. Names are compared only when
        ``registration.name`` is set.
        """
        if registration is None:
            msg = "Cannot search a resolution path for None."
            raise ValueError(msg)
        for candidate in self:
            if not _registrations_match(candidate, registration):
                continue
            if registration.name is not None and candidate.name != registration.name:
                continue
            return True
        return False

    def contains_service(self, service_type: Any, name: str | None = None) -> bool:
        for candidate in self:
            if candidate.service_type != service_type:
                continue
            if name is not None and candidate.name != name:
                continue
            return True
        return False

    def get_registrations(self) -> list[ServiceRegistration]:
        """Return registrations ordered from the top of the path down to the root."""
        return list(self)

    def __iter__(self) -> Iterator[ServiceRegistration]:
        node: ResolutionPath | None = self
        while node is not None and node._registration is not None:
            yield node._registration
            node = node._parent

    def __len__(self) -> int:
        return self._depth

    def __str__(self) -> str:
        registrations = list(reversed(self.get_registrations()))
        return "\n".join(f"  {index}. {reg!r}" for index, reg in enumerate(registrations, 1))

    def __repr__(self) -> str:
        return f"ResolutionPath(depth={self._depth})"


def _registrations_match(candidate: ServiceRegistration, actual: ServiceRegistration) -> bool:
    if not isinstance(candidate, TypedRegistration) or not isinstance(actual, TypedRegistration):
        return candidate.service_type == actual.service_type
    return (
        candidate.service_type == actual.service_type
        and candidate.implementation_type == actual.implementation_type
    )


EMPTY_PATH = ResolutionPath()


@dataclass(frozen=True, slots=True)
class ResolutionRequest:
    """Request for an instance of ``service_type``, optionally by ``name``."""

    service_type: Any
    name: str | None = None
    resolution_path: ResolutionPath = field(default=EMPTY_PATH, compare=False)

    def without_name(self) -> ResolutionRequest:
        return ResolutionRequest(self.service_type, None, self.resolution_path)

    def with_service_type(self, service_type: Any) -> ResolutionRequest:
        return ResolutionRequest(service_type, self.name, self.resolution_path)

    def __repr__(self) -> str:
        name = "" if self.name is None else repr(self.name)
        return f"[ResolutionRequest: {describe_type(self.service_type)}({name})]"


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Outcome of a pipeline stage.

    Failure is a value, not an exception; only the mandatory resolve entry
    points turn a failed outermost result into an error.
    """

    is_success: bool
    resolution_path: ResolutionPath
    resolved_object: Any = None

    @classmethod
    def success(cls, resolution_path: ResolutionPath, resolved_object: Any) -> Self:
        return cls(is_success=True, resolution_path=resolution_path, resolved_object=resolved_object)

    @classmethod
    def failure(cls, resolution_path: ResolutionPath) -> Self:
        return cls(is_success=False, resolution_path=resolution_path)


__all__ = [
    "EMPTY_PATH",
    "ResolutionPath",
    "ResolutionRequest",
    "ResolutionResult",
]
