from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from flexdi.container_interface import ResolutionInfo
    from flexdi.resolution.resolver import ResolverBase


class ResolverStageFactory(Protocol):
    """Build one pipeline stage around an inner resolver.

    Returning ``None`` leaves the stage out of the pipeline, which is how
    stages disabled by ``ContainerOptions`` are skipped.
    """

    def create(
        self,
        resolution_info: ResolutionInfo,
        resolver: ResolverBase,
    ) -> ResolverBase | None: ...


__all__ = ["ResolverStageFactory"]
