from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from typing_extensions import Self

if TYPE_CHECKING:
    from flexdi.resolution.pipeline import ResolverFactory


@dataclass(frozen=True, slots=True, kw_only=True)
class ContainerOptions:
    """Switches controlling which resolution stages a container installs.

    Args:
        use_non_public_constructors: Consider alternate ``@constructor``
            methods whose name starts with an underscore.
        resolve_unregistered_types: Resolve eligible concrete classes that
            have no registration, registering them on first use.
        use_instance_cache: Reuse instances of cacheable registrations.
        throw_on_circular_dependencies: Raise
            ``FlexDiCircularDependencyError`` when a registration re-enters its
            own resolution path. When disabled, a true cycle recurses until
            Python raises ``RecursionError``.
        support_resolving_named_instance_dictionaries: Resolve
            ``dict[str, T]`` (or enum keyed) requests into every named ``T``.
        self_register_a_resolver: Register the container as
            ``ResolvesServices`` and ``IContainer``.
        self_register_the_registry: Register the container as
            ``ReceivesRegistrations``.
        support_resolving_lazy_instances: Resolve ``Lazy[T]`` requests into
            deferred wrappers.
        make_all_resolution_optional: Turn every failed resolution into
            ``None`` instead of an error.
        resolver_factory: Replace the default stage list.

    """

    use_non_public_constructors: bool = False
    resolve_unregistered_types: bool = False
    use_instance_cache: bool = True
    throw_on_circular_dependencies: bool = True
    support_resolving_named_instance_dictionaries: bool = False
    self_register_a_resolver: bool = True
    self_register_the_registry: bool = False
    support_resolving_lazy_instances: bool = True
    make_all_resolution_optional: bool = False
    resolver_factory: ResolverFactory | None = None

    @classmethod
    def default(cls) -> ContainerOptions:
        """Return the shared instance holding every default value."""
        return _DEFAULT_OPTIONS

    def evolve(self, **changes: Any) -> Self:
        """Return a copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)


_DEFAULT_OPTIONS = ContainerOptions()

__all__ = ["ContainerOptions"]
