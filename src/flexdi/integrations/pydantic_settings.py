from __future__ import annotations

from typing import Any

from flexdi._internal.integrations.pydantic_settings import (
    SETTINGS_BASES,
    is_pydantic_settings_subclass,
)
from flexdi.registrations import FactoryRegistration


def settings_registration(
    settings_type: type[Any],
    name: str | None = None,
) -> FactoryRegistration:
    """Return a cacheable registration that loads ``settings_type`` from its sources.

    The settings object is created once, by calling the class without
    arguments, so values come from the environment and dotenv files the
    model is configured with.

    Examples:
        .. code-block:: python

            class DatabaseSettings(BaseSettings):
                dsn: str = "sqlite://"

            container.add_registrations([settings_registration(DatabaseSettings)])

    """
    if not is_pydantic_settings_subclass(settings_type):
        msg = f"{settings_type!r} is not a pydantic settings class."
        raise TypeError(msg)
    return FactoryRegistration(
        lambda: settings_type(),
        service_type=settings_type,
        name=name,
        cacheable=True,
    )


__all__ = [
    "SETTINGS_BASES",
    "is_pydantic_settings_subclass",
    "settings_registration",
]
