from flexdi.container import Container
from flexdi.container_interface import IContainer, ReceivesRegistrations, ResolvesServices
from flexdi.exceptions import (
    FlexDiAmbiguousConstructorError,
    FlexDiCannotInstantiateTypeError,
    FlexDiCannotResolveParameterError,
    FlexDiCircularDependencyError,
    FlexDiContainerDisposedError,
    FlexDiDependencyInferenceError,
    FlexDiError,
    FlexDiInvalidRegistrationError,
    FlexDiInvalidResolutionRequestError,
    FlexDiInvalidTypeRegistrationError,
    FlexDiNoMatchingEnumerationConstantError,
    FlexDiResolutionError,
    FlexDiServiceReRegisteredAfterResolutionError,
)
from flexdi.lazy import Lazy
from flexdi.options import ContainerOptions
from flexdi.registrations import (
    FactoryRegistration,
    InstanceRegistration,
    OpenGenericTypeRegistration,
    ServiceRegistration,
    TypeRegistration,
)
from flexdi.resolution.constructors import constructor
from flexdi.resolution.pipeline import ResolverFactory
from flexdi.resolution.request import ResolutionPath, ResolutionRequest, ResolutionResult
from flexdi.resolution.resolver import ServiceResolvedEvent

__all__ = [
    "Container",
    "ContainerOptions",
    "FactoryRegistration",
    "FlexDiAmbiguousConstructorError",
    "FlexDiCannotInstantiateTypeError",
    "FlexDiCannotResolveParameterError",
    "FlexDiCircularDependencyError",
    "FlexDiContainerDisposedError",
    "FlexDiDependencyInferenceError",
    "FlexDiError",
    "FlexDiInvalidRegistrationError",
    "FlexDiInvalidResolutionRequestError",
    "FlexDiInvalidTypeRegistrationError",
    "FlexDiNoMatchingEnumerationConstantError",
    "FlexDiResolutionError",
    "FlexDiServiceReRegisteredAfterResolutionError",
    "IContainer",
    "InstanceRegistration",
    "Lazy",
    "OpenGenericTypeRegistration",
    "ReceivesRegistrations",
    "ResolutionPath",
    "ResolutionRequest",
    "ResolutionResult",
    "ResolverFactory",
    "ResolvesServices",
    "ServiceRegistration",
    "ServiceResolvedEvent",
    "TypeRegistration",
    "constructor",
]
