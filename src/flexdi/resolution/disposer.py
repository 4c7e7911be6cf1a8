from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from flexdi.registrations import OpenGenericTypeRegistration, ServiceRegistration

if TYPE_CHECKING:
    from flexdi.registry import RegistrationProvider
    from flexdi.resolution.cache import ResolvedServiceCache

logger = logging.getLogger(__name__)


def dispose_instance(instance: Any) -> bool:
    """Release ``instance`` when it is disposable and report whether it was.

    Objects with a callable ``close()`` are closed; other context managers are
    exited with ``(None, None, None)``.
    """
    close = getattr(instance, "close", None)
    if callable(close):
        close()
        return True
    exit_method = getattr(instance, "__exit__", None)
    if callable(exit_method):
        exit_method(None, None, None)
        return True
    return False


class ServiceInstanceDisposer:
    """Dispose of cached instances owned by one container.

    Only registrations of the given provider are considered (never a parent's),
    and only those that are cacheable and marked ``dispose_with_container``.
    An instance cached under several registrations is disposed once.
    """

    def dispose_instances(
        self,
        registration_provider: RegistrationProvider,
        cache: ResolvedServiceCache,
    ) -> None:
        disposed_ids: set[int] = set()
        registrations = [
            registration
            for registration in _expand_open_generics(registration_provider.get_all())
            if registration.cacheable and registration.dispose_with_container
        ]
        for registration in registrations:
            found, instance = cache.try_get_exact(registration)
            if not found or id(instance) in disposed_ids:
                continue
            if dispose_instance(instance):
                disposed_ids.add(id(instance))
                logger.debug("Disposed instance of %r", registration)


def _expand_open_generics(
    registrations: list[ServiceRegistration],
) -> list[ServiceRegistration]:
    expanded: list[ServiceRegistration] = []
    for registration in registrations:
        if isinstance(registration, OpenGenericTypeRegistration):
            expanded.extend(registration.get_closed_registrations())
        else:
            expanded.append(registration)
    return expanded


__all__ = ["ServiceInstanceDisposer", "dispose_instance"]
