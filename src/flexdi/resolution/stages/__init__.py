from flexdi.resolution.stages.base import ResolverStageFactory
from flexdi.resolution.stages.caching import CachingResolverProxy, CachingResolverProxyFactory
from flexdi.resolution.stages.circular import (
    CircularDependencyPreventingResolverProxy,
    CircularDependencyPreventingResolverProxyFactory,
)
from flexdi.resolution.stages.dynamic_recursion import (
    DynamicRecursionResolverProxy,
    DynamicRecursionResolverProxyFactory,
    ServiceResolvingContainerProxy,
)
from flexdi.resolution.stages.fallback import (
    FallbackResolverProxy,
    FallbackToParentResolverProxyFactory,
)
from flexdi.resolution.stages.lazy import LazyInstanceResolverProxy, LazyInstanceResolverProxyFactory
from flexdi.resolution.stages.named_instances import (
    NamedInstanceDictionaryResolverProxy,
    NamedInstanceDictionaryResolverProxyFactory,
)
from flexdi.resolution.stages.optional import (
    OptionalResolutionResolverProxy,
    OptionalResolutionResolverProxyFactory,
)
from flexdi.resolution.stages.registered_name import (
    REGISTERED_NAME_PARAMETERS,
    RegisteredNameInjectingResolverProxy,
    RegisteredNameInjectingResolverProxyFactory,
)
from flexdi.resolution.stages.unregistered import (
    UnregisteredServiceResolverProxy,
    UnregisteredServiceResolverProxyFactory,
)

__all__ = [
    "REGISTERED_NAME_PARAMETERS",
    "CachingResolverProxy",
    "CachingResolverProxyFactory",
    "CircularDependencyPreventingResolverProxy",
    "CircularDependencyPreventingResolverProxyFactory",
    "DynamicRecursionResolverProxy",
    "DynamicRecursionResolverProxyFactory",
    "FallbackResolverProxy",
    "FallbackToParentResolverProxyFactory",
    "LazyInstanceResolverProxy",
    "LazyInstanceResolverProxyFactory",
    "NamedInstanceDictionaryResolverProxy",
    "NamedInstanceDictionaryResolverProxyFactory",
    "OptionalResolutionResolverProxy",
    "OptionalResolutionResolverProxyFactory",
    "RegisteredNameInjectingResolverProxy",
    "RegisteredNameInjectingResolverProxyFactory",
    "ResolverStageFactory",
    "ServiceResolvingContainerProxy",
    "UnregisteredServiceResolverProxy",
    "UnregisteredServiceResolverProxyFactory",
]
