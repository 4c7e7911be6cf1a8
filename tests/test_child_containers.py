"""Parent/child container behaviour."""

import abc

import pytest

from flexdi.container import Container
from flexdi.exceptions import FlexDiCannotResolveParameterError, FlexDiContainerDisposedError
from flexdi.options import ContainerOptions
from flexdi.registrations import TypeRegistration


class Service(abc.ABC):
    pass


class ServiceImpl(Service):
    def __init__(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True


class OtherImpl(Service):
    pass


class Dependency:
    pass


class NeedsDependency:
    def __init__(self, dependency: Dependency) -> None:
        self.dependency = dependency


@pytest.fixture()
def parent() -> Container:
    container = Container()
    container.add_registrations([TypeRegistration(ServiceImpl, service_type=Service)])
    return container


class TestFallbackToParent:
    def test_child_resolves_parent_registration(self, parent: Container) -> None:
        child = parent.create_child_container()

        assert isinstance(child.resolve(Service), ServiceImpl)
        assert child.has_registration(Service)

    def test_parent_owns_the_cached_instance(self, parent: Container) -> None:
        child = parent.create_child_container()

        service = child.resolve(Service)

        assert parent.is_resolved_instance_cached(Service)
        assert not child.is_resolved_instance_cached(Service)
        assert parent.resolve(Service) is service

    def test_child_registration_hides_parent_registration(self, parent: Container) -> None:
        child = parent.create_child_container()
        child.add_registrations([TypeRegistration(OtherImpl, service_type=Service)])

        assert isinstance(child.resolve(Service), OtherImpl)
        assert isinstance(parent.resolve(Service), ServiceImpl)
        assert len(child.get_registrations(Service)) == 1
        assert child.get_registrations(Service)[0].implementation_type is OtherImpl

    def test_parent_does_not_see_child_registrations(self, parent: Container) -> None:
        child = parent.create_child_container()
        child.add_registrations([TypeRegistration(Dependency)])

        found, _ = parent.try_resolve(Dependency)

        assert not found

    def test_parent_registration_cannot_use_child_dependencies(self) -> None:
        parent = Container()
        parent.add_registrations([TypeRegistration(NeedsDependency)])
        child = parent.create_child_container()
        child.add_registrations([TypeRegistration(Dependency)])

        with pytest.raises(FlexDiCannotResolveParameterError):
            child.resolve(NeedsDependency)

    def test_child_inherits_options(self) -> None:
        options = ContainerOptions(make_all_resolution_optional=True)
        child = Container(options).create_child_container()

        assert child.options is options
        assert child.resolve(Dependency) is None

    def test_grandchild_falls_back_through_every_ancestor(self, parent: Container) -> None:
        grandchild = parent.create_child_container().create_child_container()

        assert grandchild.resolve(Service) is parent.resolve(Service)

    def test_parent_resolution_events_reach_child_listeners(self, parent: Container) -> None:
        child = parent.create_child_container()
        instances: list[object] = []
        child.add_service_resolved_listener(lambda event: instances.append(event.instance))

        service = child.resolve(Service)

        assert instances == [service]


class TestUnregisteredTypesInChild:
    def test_synthetic_registration_belongs_to_child(self) -> None:
        parent = Container(ContainerOptions(resolve_unregistered_types=True))
        child = parent.create_child_container()

        child.resolve(Dependency)

        assert child.is_resolved_instance_cached(Dependency)
        assert not parent.has_registration(Dependency)


class TestDisposal:
    def test_parent_disposes_instances_resolved_through_child(self, parent: Container) -> None:
        child = parent.create_child_container()
        service = child.resolve(Service)

        child.dispose()
        assert not service.closed

        parent.dispose()
        assert service.closed

    def test_child_of_disposed_parent_cannot_resolve(self, parent: Container) -> None:
        child = parent.create_child_container()

        parent.dispose()

        with pytest.raises(FlexDiContainerDisposedError):
            child.resolve(Service)
