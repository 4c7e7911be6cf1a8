from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flexdi.resolution.instance_creator import InstanceCreator
from flexdi.resolution.resolver import LateBoundResolverProxy, Resolver, ResolverBase
from flexdi.resolution.stages import (
    CachingResolverProxyFactory,
    CircularDependencyPreventingResolverProxyFactory,
    DynamicRecursionResolverProxyFactory,
    FallbackToParentResolverProxyFactory,
    LazyInstanceResolverProxyFactory,
    NamedInstanceDictionaryResolverProxyFactory,
    OptionalResolutionResolverProxyFactory,
    RegisteredNameInjectingResolverProxyFactory,
    ResolverStageFactory,
    UnregisteredServiceResolverProxyFactory,
)

if TYPE_CHECKING:
    from flexdi.container_interface import ResolutionInfo

logger = logging.getLogger(__name__)


class ResolverFactory:
    """Assemble the resolution pipeline for a container.

    The core :class:`Resolver` is wrapped by each configured stage in turn,
    innermost first:

    1. caching
    2. fallback to the parent container
    3. unregistered-type resolution (innermost container only)
    4. circular-dependency prevention
    5. lazy instances
    6. registered-name injection
    7. named-instance dictionaries
    8. optional resolution
    9. dynamic recursion

    Stages disabled by the container's options are skipped. The core resolves
    nested parameters through a late-bound proxy that is bound to the
    outermost stage once the pipeline is complete; that proxy is the
    resolver returned to the container.

    Subclass and override :meth:`get_stage_factories` to customize the stage
    list, then pass an instance as ``ContainerOptions.resolver_factory``.
    """

    def create_resolver(self, resolution_info: ResolutionInfo) -> ResolverBase:
        return self._create_resolver(resolution_info, is_innermost_resolver=True)

    def _create_resolver(
        self,
        resolution_info: ResolutionInfo,
        *,
        is_innermost_resolver: bool,
    ) -> ResolverBase:
        late_bound_proxy = LateBoundResolverProxy()
        core_resolver = self.get_core_resolver(resolution_info, late_bound_proxy)

        current: ResolverBase = core_resolver
        installed: list[str] = []
        for stage_factory in self.get_stage_factories(
            core_resolver,
            is_innermost_resolver=is_innermost_resolver,
        ):
            stage = stage_factory.create(resolution_info, current)
            if stage is not None:
                current = stage
                installed.append(type(stage).__name__)

        late_bound_proxy.set_proxied_resolver(current)
        logger.debug(
            "Resolution pipeline built: innermost=%s stages=%s",
            is_innermost_resolver,
            installed,
        )
        return late_bound_proxy

    def get_core_resolver(
        self,
        resolution_info: ResolutionInfo,
        outermost_resolver: ResolverBase,
    ) -> Resolver:
        return Resolver(resolution_info.registry, InstanceCreator(outermost_resolver))

    def get_stage_factories(
        self,
        core_resolver: Resolver,
        *,
        is_innermost_resolver: bool,
    ) -> list[ResolverStageFactory]:
        factories: list[ResolverStageFactory] = [
            CachingResolverProxyFactory(),
            FallbackToParentResolverProxyFactory(self._create_parent_resolver),
        ]
        if is_innermost_resolver:
            factories.append(UnregisteredServiceResolverProxyFactory(core_resolver))
        factories.extend(
            [
                CircularDependencyPreventingResolverProxyFactory(),
                LazyInstanceResolverProxyFactory(),
                RegisteredNameInjectingResolverProxyFactory(),
                NamedInstanceDictionaryResolverProxyFactory(),
                OptionalResolutionResolverProxyFactory(),
                DynamicRecursionResolverProxyFactory(),
            ],
        )
        return factories

    def _create_parent_resolver(self, parent_info: ResolutionInfo) -> ResolverBase:
        return self._create_resolver(parent_info, is_innermost_resolver=False)


__all__ = ["ResolverFactory"]
