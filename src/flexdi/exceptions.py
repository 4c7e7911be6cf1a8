from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from flexdi.resolution.request import ResolutionPath


class FlexDiError(Exception):
    """Represent a base class for all FlexDi-specific failures.

    Catch this type when you want to handle any FlexDi error path without
    matching each concrete exception class individually.

    Errors raised while a resolution is in flight carry the
    ``resolution_path`` that led to the failure; it is ``None`` for errors
    raised outside of resolution (for example at registration time).
    """

    def __init__(
        self,
        message: str,
        *,
        resolution_path: ResolutionPath | None = None,
    ) -> None:
        super().__init__(message)
        self.resolution_path = resolution_path

    def __str__(self) -> str:
        message = super().__str__()
        if self.resolution_path is None or self.resolution_path.is_empty:
            return message
        return f"{message}\nResolution path:\n{self.resolution_path}"


class FlexDiResolutionError(FlexDiError):
    """Signal that a mandatory resolution could not be satisfied.

    Raised by ``resolve``/``resolve_request`` when the outermost pipeline
    result is a failure, and by ``Lazy.value`` when the deferred resolution
    fails.

    Typical fixes include registering the service, enabling
    ``resolve_unregistered_types`` for concrete classes, or using
    ``try_resolve``/``resolve_optional`` when absence is expected.
    """


class FlexDiCircularDependencyError(FlexDiResolutionError):
    """Signal a registration that is already present in the resolution path.

    Raised by the circular-dependency stage when
    ``throw_on_circular_dependencies`` is enabled. The attached
    ``resolution_path`` lists every registration traversed up to the cycle.

    Deferred resolutions made through ``Lazy[T]`` or an injected
    ``ResolvesServices`` continue the path of the service that received them,
    so they are checked too. Typical fixes include moving the shared behaviour
    into a third service that both sides depend on.
    """


class FlexDiCannotResolveParameterError(FlexDiResolutionError):
    """Signal that a constructor or factory parameter could not be resolved.

    Raised by the instance creator while building an instance. The error
    exposes ``parameter_name`` and ``service_type`` of the failing parameter.
    """

    def __init__(
        self,
        message: str,
        *,
        parameter_name: str,
        service_type: Any,
        resolution_path: ResolutionPath | None = None,
    ) -> None:
        super().__init__(message, resolution_path=resolution_path)
        self.parameter_name = parameter_name
        self.service_type = service_type


class FlexDiInvalidResolutionRequestError(FlexDiResolutionError):
    """Signal a request for a primitive or value service type.

    Only object graphs are constructed; ``str``, ``int``, ``bytes``, enums and
    similar value types cannot be requested (with the exception of the
    contextual ``registeredName`` string parameter).
    """


class FlexDiNoMatchingEnumerationConstantError(FlexDiResolutionError):
    """Signal a registration name that has no matching enum member.

    Raised while building a named-instance dictionary keyed by an ``Enum``
    when a registration name does not match any member name
    (case-insensitively).
    """


class FlexDiAmbiguousConstructorError(FlexDiResolutionError):
    """Signal that more than one constructor shares the highest parameter count.

    The constructor selector never silently picks between equally sized
    candidates. Typical fixes include removing one of the alternate
    ``@constructor`` class methods or registering a factory instead.
    """


class FlexDiCannotInstantiateTypeError(FlexDiResolutionError):
    """Signal that a type exposes no usable constructor.

    Raised for abstract classes and protocols with no alternate
    ``@constructor`` class methods, or when every alternate constructor is
    non-public and ``use_non_public_constructors`` is disabled.
    """


class FlexDiDependencyInferenceError(FlexDiResolutionError):
    """Signal that required constructor dependencies cannot be inferred.

    Common triggers are missing or unresolvable type annotations on required
    parameters.

    Typical fixes include adding concrete parameter annotations or registering
    a factory that builds the instance explicitly.
    """


class FlexDiInvalidRegistrationError(FlexDiError):
    """Signal an invalid registration.

    Raised eagerly by ``Registry.add`` and ``Container.add_registrations``,
    never deferred to resolution time. A registration that is not cacheable
    but is marked ``dispose_with_container`` is the most common trigger.
    """


class FlexDiInvalidTypeRegistrationError(FlexDiInvalidRegistrationError):
    """Signal an implementation type that does not satisfy its service type."""


class FlexDiServiceReRegisteredAfterResolutionError(FlexDiInvalidRegistrationError):
    """Signal re-registration of a key whose instance is already cached.

    Replacing such a registration would leave a stale instance in the cache.
    Register the replacement on a child container instead.
    """


class FlexDiContainerDisposedError(FlexDiError):
    """Signal use of a container after ``dispose`` was called.

    Every container operation except ``dispose`` itself raises this error once
    the container has been disposed.
    """
