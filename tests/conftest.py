"""Shared pytest fixtures for flexdi tests."""

import pytest

from flexdi.container import Container
from flexdi.options import ContainerOptions
from flexdi.registry import Registry
from flexdi.resolution.cache import ResolvedServiceCache
from flexdi.resolution.constructors import ConstructorWithMostParametersSelector


@pytest.fixture()
def container() -> Container:
    """Container with default options (no unregistered type resolution)."""
    return Container()


@pytest.fixture()
def container_unregistered() -> Container:
    """Container that resolves concrete classes without registrations."""
    return Container(ContainerOptions(resolve_unregistered_types=True))


@pytest.fixture()
def registry() -> Registry:
    return Registry()


@pytest.fixture()
def cache() -> ResolvedServiceCache:
    return ResolvedServiceCache()


@pytest.fixture()
def constructor_selector() -> ConstructorWithMostParametersSelector:
    return ConstructorWithMostParametersSelector()
