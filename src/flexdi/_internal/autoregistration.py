from __future__ import annotations

import datetime
import decimal
import inspect
import pathlib
import uuid
from dataclasses import dataclass
from typing import Any, TypeGuard

from flexdi._internal.type_checks import is_primitive_type, is_runtime_class


@dataclass(frozen=True, slots=True)
class ConcreteTypeAutoregistrationPolicy:
    """Decide which unregistered service types may be resolved on demand."""

    ignored_base_types: tuple[type[Any], ...] = (
        pathlib.PurePath,
        datetime.datetime,
        datetime.date,
        datetime.time,
        datetime.timedelta,
        uuid.UUID,
        decimal.Decimal,
        BaseException,
    )

    def is_eligible_concrete(self, candidate: object) -> TypeGuard[type[Any]]:
        """Return true when a candidate can be resolved without a registration.

        Args:
            candidate: Requested service type.

        """
        if not is_runtime_class(candidate):
            return False
        if candidate.__module__ == "builtins" or is_primitive_type(candidate):
            return False
        if inspect.isabstract(candidate) or getattr(candidate, "_is_protocol", False):
            return False
        if issubclass(candidate, type):
            return False
        return not issubclass(candidate, self.ignored_base_types)


__all__ = ["ConcreteTypeAutoregistrationPolicy"]
