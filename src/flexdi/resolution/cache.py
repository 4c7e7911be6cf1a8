from __future__ import annotations

import functools
import logging
import threading
from dataclasses import dataclass
from typing import Any

from flexdi._internal.type_checks import describe_type, is_subclass_safe
from flexdi.registrations import RegistrationKey, ServiceRegistration

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True, slots=True)
class ServiceCacheKey:
    """Cache slot: the type an instance is stored under and the registration name."""

    implementation_type: Any
    name: str | None = None

    @classmethod
    def from_registration_key(cls, key: RegistrationKey) -> ServiceCacheKey:
        return cls(key.service_type, key.name)

    @classmethod
    def from_registration_key_and_instance(
        cls,
        key: RegistrationKey,
        instance: Any,
    ) -> list[ServiceCacheKey]:
        """Return the registration's own key plus one for the instance's runtime type."""
        keys = [cls.from_registration_key(key)]
        if instance is None:
            return keys
        instance_key = cls(type(instance), key.name)
        if instance_key != keys[0]:
            keys.append(instance_key)
        return keys

    def __repr__(self) -> str:
        name = "" if self.name is None else f", name={self.name!r}"
        return f"ServiceCacheKey({describe_type(self.implementation_type)}{name})"


def compare_cache_key_specificity(first: ServiceCacheKey, second: ServiceCacheKey) -> int:
    """Order cache keys so that more derived implementation types sort higher.

    Returns 0 for equal types, -1 when ``first`` is a base of ``second`` and 1
    otherwise.
    """
    if first.implementation_type == second.implementation_type:
        return 0
    if is_subclass_safe(second.implementation_type, first.implementation_type):
        return -1
    return 1


class ResolvedServiceCache:
    """Thread-safe cache of resolved instances.

    An instance is stored under its registration's key and, when different,
    under its runtime type, so it is found whether it is later requested
    through the service type or the concrete type. The first instance stored
    for a key is kept.

    Lookups return the exact key when present. Unnamed lookups without an exact
    hit fall back to keys whose type derives from the requested type, under
    any name, preferring the most derived type.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._instances: dict[ServiceCacheKey, Any] = {}

    def add(self, registration: ServiceRegistration, instance: Any) -> None:
        if registration is None:
            msg = "registration must not be None."
            raise ValueError(msg)
        cache_keys = ServiceCacheKey.from_registration_key_and_instance(registration.key, instance)
        with self._lock:
            for cache_key in cache_keys:
                self._instances.setdefault(cache_key, instance)
        logger.debug("Cached instance for %r under %s", registration, cache_keys)

    def has(self, key: RegistrationKey) -> bool:
        if key is None:
            msg = "key must not be None."
            raise ValueError(msg)
        return self._lookup(key) is not _MISSING

    def try_get(self, registration: ServiceRegistration) -> tuple[bool, Any]:
        """Return ``(True, instance)`` for a cached registration, ``(False, None)`` otherwise."""
        instance = self._lookup(registration.key)
        if instance is _MISSING:
            return False, None
        return True, instance

    def try_get_exact(self, registration: ServiceRegistration) -> tuple[bool, Any]:
        """Like :meth:`try_get`, but only consider the registration's own key."""
        cache_key = ServiceCacheKey.from_registration_key(registration.key)
        with self._lock:
            if cache_key not in self._instances:
                return False, None
            return True, self._instances[cache_key]

    def _lookup(self, key: RegistrationKey) -> Any:
        with self._lock:
            cache_key = self._best_matching_key_locked(ServiceCacheKey.from_registration_key(key))
            if cache_key is None:
                return _MISSING
            return self._instances[cache_key]

    def _best_matching_key_locked(self, requested: ServiceCacheKey) -> ServiceCacheKey | None:
        if requested in self._instances:
            return requested
        if requested.name is not None:
            return None

        candidates = [
            cache_key
            for cache_key in self._instances
            if is_subclass_safe(cache_key.implementation_type, requested.implementation_type)
        ]
        if not candidates:
            return None
        ordered = sorted(
            candidates,
            key=functools.cmp_to_key(compare_cache_key_specificity),
            reverse=True,
        )
        return ordered[0]

    def __len__(self) -> int:
        with self._lock:
            return len(self._instances)


__all__ = [
    "ResolvedServiceCache",
    "ServiceCacheKey",
    "compare_cache_key_specificity",
]
