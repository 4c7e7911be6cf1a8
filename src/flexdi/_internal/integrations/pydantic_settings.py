from __future__ import annotations

import importlib
import warnings
from typing import Any

from flexdi._internal.type_checks import is_subclass_safe

_PYDANTIC_V1_WARNING_PATTERN = (
    r"Core Pydantic V1 functionality isn't compatible with Python 3\.14 or greater\."
)


def _load_base_settings(module_name: str) -> type[Any] | None:
    try:
        module = importlib.import_module(module_name)
    except ImportError:
        return None
    base_settings = getattr(module, "BaseSettings", None)
    return base_settings if isinstance(base_settings, type) else None


def _discover_settings_bases() -> tuple[type[Any], ...]:
    with warnings.catch_warnings():
        warnings.filterwarnings(
            "ignore",
            message=_PYDANTIC_V1_WARNING_PATTERN,
            category=UserWarning,
        )
        candidates = (
            _load_base_settings("pydantic_settings"),
            _load_base_settings("pydantic.v1"),
        )

    bases: list[type[Any]] = []
    for candidate in candidates:
        if candidate is not None and candidate not in bases:
            bases.append(candidate)
    return tuple(bases)


SETTINGS_BASES: tuple[type[Any], ...] = _discover_settings_bases()


def is_pydantic_settings_subclass(candidate: object) -> bool:
    """Return whether ``candidate`` is a pydantic settings class.

    Both ``pydantic_settings.BaseSettings`` and the legacy
    ``pydantic.v1.BaseSettings`` are recognised when they can be imported;
    without pydantic every candidate is rejected. The base classes themselves
    are not settings models and are rejected too.
    """
    if candidate in SETTINGS_BASES:
        return False
    return any(is_subclass_safe(candidate, base) for base in SETTINGS_BASES)


__all__ = [
    "SETTINGS_BASES",
    "is_pydantic_settings_subclass",
]
