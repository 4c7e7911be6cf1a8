from __future__ import annotations

from collections.abc import Iterator

import pytest

from flexdi.container import Container
from flexdi.options import ContainerOptions


@pytest.fixture()
def flexdi_container_options() -> ContainerOptions:
    """Options used to build ``flexdi_container``.

    Override this fixture to change which resolution stages the test
    container installs.

    Examples:
        .. code-block:: python

            @pytest.fixture()
            def flexdi_container_options() -> ContainerOptions:
                return ContainerOptions(resolve_unregistered_types=True)

    """
    return ContainerOptions.default()


@pytest.fixture()
def flexdi_container(flexdi_container_options: ContainerOptions) -> Iterator[Container]:
    """Create a per-test container and dispose it after the test.

    The fixture is function-scoped, so registrations are isolated between
    tests unless the fixture scope is overridden.

    Yields:
        A new ``Container``.

    """
    container = Container(flexdi_container_options)
    yield container
    container.dispose()


__all__ = ["flexdi_container", "flexdi_container_options"]
