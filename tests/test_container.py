"""End-to-end resolution through Container."""

import abc
from enum import Enum
from typing import Generic, TypeVar

import pytest

from flexdi.container import Container
from flexdi.container_interface import IContainer, ReceivesRegistrations, ResolvesServices
from flexdi.exceptions import (
    FlexDiCannotResolveParameterError,
    FlexDiCircularDependencyError,
    FlexDiContainerDisposedError,
    FlexDiInvalidResolutionRequestError,
    FlexDiNoMatchingEnumerationConstantError,
    FlexDiResolutionError,
    FlexDiServiceReRegisteredAfterResolutionError,
)
from flexdi.lazy import Lazy
from flexdi.options import ContainerOptions
from flexdi.registrations import (
    FactoryRegistration,
    InstanceRegistration,
    OpenGenericTypeRegistration,
    TypeRegistration,
)
from flexdi.resolution.resolver import ServiceResolvedEvent
from flexdi.resolution.stages import ServiceResolvingContainerProxy

T = TypeVar("T")


class Engine:
    pass


class Car:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine


class Handler(abc.ABC):
    @abc.abstractmethod
    def handle(self) -> str: ...


class RedHandler(Handler):
    def handle(self) -> str:
        return "red"


class GreenHandler(Handler):
    def handle(self) -> str:
        return "green"


class BlueHandler(Handler):
    def handle(self) -> str:
        return "blue"


class Color(Enum):
    RED = 1
    GREEN = 2


class Named:
    def __init__(self, registeredName: str) -> None:  # noqa: N803
        self.registered_name = registeredName


class SnakeNamed:
    def __init__(self, registered_name: str) -> None:
        self.registered_name = registered_name


class UsesLazy:
    def __init__(self, engine: Lazy[Engine]) -> None:
        self.engine = engine


class UsesResolver:
    def __init__(self, resolver: ResolvesServices) -> None:
        self.resolver = resolver


class ResolvesItselfOnConstruction:
    def __init__(self, resolver: ResolvesServices) -> None:
        self.other = resolver.resolve(ResolvesItselfOnConstruction)


class Egg:
    def __init__(self, chicken: "Chicken") -> None:
        self.chicken = chicken


class Chicken:
    def __init__(self, egg: Egg) -> None:
        self.egg = egg


class LazyEgg:
    def __init__(self, chicken: "Lazy[LazyChicken]") -> None:
        self.chicken = chicken


class LazyChicken:
    def __init__(self, egg: LazyEgg) -> None:
        self.egg = egg


class Left:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine


class Right:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine


class Diamond:
    def __init__(self, left: Left, right: Right) -> None:
        self.left = left
        self.right = right


class Repository(Generic[T]):
    pass


class SqlRepository(Repository[T]):
    pass


class Item:
    pass


class Order:
    pass


class UsesHandlers:
    def __init__(self, handlers: dict[str, Handler]) -> None:
        self.handlers = handlers


class TestResolve:
    def test_resolves_type_registration_with_dependencies(self, container: Container) -> None:
        container.add_registrations([TypeRegistration(Engine), TypeRegistration(Car)])

        car = container.resolve(Car)

        assert isinstance(car, Car)
        assert isinstance(car.engine, Engine)

    def test_cacheable_registration_returns_same_instance(self, container: Container) -> None:
        container.add_registrations([TypeRegistration(Engine), TypeRegistration(Car)])

        first = container.resolve(Car)
        second = container.resolve(Car)

        assert first is second
        assert first.engine is container.resolve(Engine)
        assert container.is_resolved_instance_cached(Car)

    def test_non_cacheable_registration_returns_new_instances(self, container: Container) -> None:
        container.add_registrations(
            [TypeRegistration(Engine, cacheable=False, dispose_with_container=False)],
        )

        assert container.resolve(Engine) is not container.resolve(Engine)
        assert not container.is_resolved_instance_cached(Engine)

    def test_service_type_mapping(self, container: Container) -> None:
        container.add_registrations([TypeRegistration(RedHandler, service_type=Handler)])

        handler = container.resolve(Handler)

        assert isinstance(handler, RedHandler)
        assert container.has_registration(Handler)

    def test_factory_registration(self, container: Container) -> None:
        engine = Engine()

        def make_car() -> Car:
            return Car(engine)

        container.add_registrations([FactoryRegistration(make_car)])

        assert container.resolve(Car).engine is engine

    def test_factory_parameters_are_resolved(self, container: Container) -> None:
        def make_car(engine: Engine) -> Car:
            return Car(engine)

        container.add_registrations([TypeRegistration(Engine), FactoryRegistration(make_car)])

        assert container.resolve(Car).engine is container.resolve(Engine)

    def test_instance_registration(self, container: Container) -> None:
        engine = Engine()
        container.add_registrations([InstanceRegistration(engine)])

        assert container.resolve(Engine) is engine

    def test_named_registration(self, container: Container) -> None:
        container.add_registrations(
            [
                TypeRegistration(RedHandler, service_type=Handler, name="red"),
                TypeRegistration(GreenHandler, service_type=Handler, name="green"),
            ],
        )

        assert isinstance(container.resolve(Handler, "red"), RedHandler)
        assert isinstance(container.resolve(Handler, "green"), GreenHandler)
        assert not container.has_registration(Handler)

    def test_named_request_falls_back_to_unnamed_registration(self, container: Container) -> None:
        container.add_registrations([TypeRegistration(Engine)])

        assert isinstance(container.resolve(Engine, "anything"), Engine)

    def test_unnamed_request_reuses_cached_named_instance(self, container: Container) -> None:
        container.add_registrations(
            [TypeRegistration(Engine, name="spare"), TypeRegistration(Engine)],
        )

        spare = container.resolve(Engine, "spare")

        assert container.resolve(Engine) is spare
        assert container.is_resolved_instance_cached(Engine)

    def test_missing_registration_raises(self, container: Container) -> None:
        with pytest.raises(FlexDiResolutionError, match="Cannot resolve component type"):
            container.resolve(Engine)

    def test_missing_dependency_raises_parameter_error(self, container: Container) -> None:
        container.add_registrations([TypeRegistration(Car)])

        with pytest.raises(FlexDiCannotResolveParameterError) as exc_info:
            container.resolve(Car)

        assert exc_info.value.parameter_name == "engine"
        assert exc_info.value.service_type is Engine

    def test_primitive_request_raises(self, container: Container) -> None:
        with pytest.raises(FlexDiInvalidResolutionRequestError):
            container.resolve(int)

    def test_try_resolve(self, container: Container) -> None:
        container.add_registrations([TypeRegistration(Engine)])

        found, engine = container.try_resolve(Engine)
        missing, car = container.try_resolve(Car)

        assert found
        assert isinstance(engine, Engine)
        assert not missing
        assert car is None

    def test_resolve_optional(self, container: Container) -> None:
        assert container.resolve_optional(Engine) is None

    def test_resolve_all(self, container: Container) -> None:
        container.add_registrations(
            [
                TypeRegistration(RedHandler, service_type=Handler, name="red"),
                TypeRegistration(GreenHandler, service_type=Handler, name="green"),
                TypeRegistration(Engine),
            ],
        )

        handlers = container.resolve_all(Handler)

        assert sorted(handler.handle() for handler in handlers) == ["green", "red"]


class TestRegistrations:
    def test_re_registration_before_resolution_replaces(self, container: Container) -> None:
        container.add_registrations([TypeRegistration(RedHandler, service_type=Handler)])
        container.add_registrations([TypeRegistration(GreenHandler, service_type=Handler)])

        assert isinstance(container.resolve(Handler), GreenHandler)

    def test_re_registration_after_resolution_raises(self, container: Container) -> None:
        container.add_registrations([TypeRegistration(RedHandler, service_type=Handler, name="a")])
        container.resolve(Handler, "a")

        with pytest.raises(FlexDiServiceReRegisteredAfterResolutionError):
            container.add_registrations(
                [TypeRegistration(GreenHandler, service_type=Handler, name="a")],
            )

    def test_re_registration_in_child_after_resolution_succeeds(self, container: Container) -> None:
        container.add_registrations([TypeRegistration(RedHandler, service_type=Handler, name="a")])
        container.resolve(Handler, "a")
        child = container.create_child_container()

        child.add_registrations([TypeRegistration(GreenHandler, service_type=Handler, name="a")])

        assert isinstance(child.resolve(Handler, "a"), GreenHandler)

    def test_get_registrations(self, container: Container) -> None:
        registration = TypeRegistration(Engine)
        container.add_registrations([registration])

        assert container.get_registrations(Engine) == [registration]


class TestSelfRegistration:
    def test_resolver_and_container_are_registered(self, container: Container) -> None:
        assert container.resolve(ResolvesServices) is container
        assert container.resolve(IContainer) is container

    def test_registry_is_registered_when_enabled(self) -> None:
        container = Container(ContainerOptions(self_register_the_registry=True))

        assert container.resolve(ReceivesRegistrations) is container

    def test_nothing_registered_when_disabled(self) -> None:
        container = Container(ContainerOptions(self_register_a_resolver=False))

        found, _ = container.try_resolve(ResolvesServices)

        assert not found


class TestDynamicRecursion:
    def test_constructor_receives_path_bound_proxy(self, container: Container) -> None:
        container.add_registrations([TypeRegistration(UsesResolver), TypeRegistration(Engine)])

        service = container.resolve(UsesResolver)

        assert isinstance(service.resolver, ServiceResolvingContainerProxy)
        assert service.resolver.container is container
        assert len(service.resolver.resolution_path) == 1
        assert service.resolver.resolve(Engine) is container.resolve(Engine)

    def test_cycle_through_proxy_is_detected(self, container: Container) -> None:
        container.add_registrations([TypeRegistration(ResolvesItselfOnConstruction)])

        with pytest.raises(FlexDiCircularDependencyError):
            container.resolve(ResolvesItselfOnConstruction)


class TestRegisteredName:
    def test_named_registration_receives_its_name(self, container: Container) -> None:
        container.add_registrations([TypeRegistration(Named, name="alpha")])

        assert container.resolve(Named, "alpha").registered_name == "alpha"

    def test_snake_case_parameter(self, container: Container) -> None:
        container.add_registrations([TypeRegistration(SnakeNamed, name="beta")])

        assert container.resolve(SnakeNamed, "beta").registered_name == "beta"

    def test_unnamed_registration_receives_none(self, container: Container) -> None:
        container.add_registrations([TypeRegistration(Named)])

        assert container.resolve(Named).registered_name is None


class TestLazy:
    def test_lazy_dependency_is_resolved_on_first_access(self, container: Container) -> None:
        container.add_registrations([TypeRegistration(UsesLazy), TypeRegistration(Engine)])

        service = container.resolve(UsesLazy)

        assert not service.engine.is_value_created
        assert container.is_resolved_instance_cached(Engine)
        assert service.engine.value is container.resolve(Engine)

    def test_lazy_failure_raises_on_access(self, container: Container) -> None:
        container.add_registrations([TypeRegistration(UsesLazy)])
        service = container.resolve(UsesLazy)

        with pytest.raises(FlexDiResolutionError, match="Lazy resolution failure"):
            _ = service.engine.value

    def test_lazy_disabled(self) -> None:
        container = Container(ContainerOptions(support_resolving_lazy_instances=False))
        container.add_registrations([TypeRegistration(UsesLazy), TypeRegistration(Engine)])

        with pytest.raises(FlexDiResolutionError):
            container.resolve(UsesLazy)

    def test_lazy_does_not_break_cycles(self, container: Container) -> None:
        container.add_registrations([TypeRegistration(LazyEgg), TypeRegistration(LazyChicken)])
        egg = container.resolve(LazyEgg)

        with pytest.raises(FlexDiCircularDependencyError):
            _ = egg.chicken.value


class TestOptionalResolution:
    def test_missing_service_resolves_to_none(self) -> None:
        container = Container(ContainerOptions(make_all_resolution_optional=True))

        assert container.resolve(Engine) is None

    def test_missing_dependency_is_injected_as_none(self) -> None:
        container = Container(ContainerOptions(make_all_resolution_optional=True))
        container.add_registrations([TypeRegistration(Car)])

        assert container.resolve(Car).engine is None


class TestNamedInstanceDictionaries:
    @pytest.fixture()
    def dict_container(self) -> Container:
        container = Container(ContainerOptions(support_resolving_named_instance_dictionaries=True))
        container.add_registrations(
            [
                TypeRegistration(RedHandler, service_type=Handler, name="red"),
                TypeRegistration(GreenHandler, service_type=Handler, name="green"),
            ],
        )
        return container

    def test_string_keys(self, dict_container: Container) -> None:
        handlers = dict_container.resolve(dict[str, Handler])

        assert set(handlers) == {"red", "green"}
        assert isinstance(handlers["red"], RedHandler)
        assert handlers["green"] is dict_container.resolve(Handler, "green")

    def test_enum_keys(self, dict_container: Container) -> None:
        handlers = dict_container.resolve(dict[Color, Handler])

        assert set(handlers) == {Color.RED, Color.GREEN}

    def test_unmatched_enum_name_raises(self, dict_container: Container) -> None:
        dict_container.add_registrations(
            [TypeRegistration(BlueHandler, service_type=Handler, name="blue")],
        )

        with pytest.raises(FlexDiNoMatchingEnumerationConstantError):
            dict_container.resolve(dict[Color, Handler])

    def test_dictionary_as_dependency(self, dict_container: Container) -> None:
        dict_container.add_registrations([TypeRegistration(UsesHandlers)])

        service = dict_container.resolve(UsesHandlers)

        assert set(service.handlers) == {"red", "green"}

    def test_disabled_by_default(self, container: Container) -> None:
        container.add_registrations([TypeRegistration(RedHandler, service_type=Handler, name="red")])

        found, _ = container.try_resolve(dict[str, Handler])

        assert not found


class TestCircularDependencies:
    def test_cycle_raises(self, container: Container) -> None:
        container.add_registrations([TypeRegistration(Egg), TypeRegistration(Chicken)])

        with pytest.raises(FlexDiCircularDependencyError) as exc_info:
            container.resolve(Egg)

        assert exc_info.value.resolution_path is not None
        assert len(exc_info.value.resolution_path) == 2

    def test_diamond_is_not_a_cycle(self, container: Container) -> None:
        container.add_registrations(
            [
                TypeRegistration(Engine),
                TypeRegistration(Left),
                TypeRegistration(Right),
                TypeRegistration(Diamond),
            ],
        )

        diamond = container.resolve(Diamond)

        assert diamond.left.engine is diamond.right.engine

    def test_cycle_without_detection_exhausts_recursion(self) -> None:
        container = Container(ContainerOptions(throw_on_circular_dependencies=False))
        container.add_registrations([TypeRegistration(Egg), TypeRegistration(Chicken)])

        with pytest.raises(RecursionError):
            container.resolve(Egg)


class TestUnregisteredTypes:
    def test_resolves_concrete_graph(self, container_unregistered: Container) -> None:
        car = container_unregistered.resolve(Car)

        assert isinstance(car.engine, Engine)
        assert container_unregistered.has_registration(Car)
        assert container_unregistered.resolve(Car) is car

    def test_dependency_is_shared_with_later_requests(
        self,
        container_unregistered: Container,
    ) -> None:
        car = container_unregistered.resolve(Car)

        assert car.engine is container_unregistered.resolve(Engine)
        assert [registration.name for registration in container_unregistered.get_registrations(Engine)] == [
            None,
        ]

    def test_named_request_uses_unnamed_registration(
        self,
        container_unregistered: Container,
    ) -> None:
        engine = container_unregistered.resolve(Engine, "spare")

        assert container_unregistered.resolve(Engine) is engine
        assert container_unregistered.resolve(Car).engine is engine

    def test_abstract_type_is_not_resolved(self, container_unregistered: Container) -> None:
        found, _ = container_unregistered.try_resolve(Handler)

        assert not found

    def test_disabled_by_default(self, container: Container) -> None:
        found, _ = container.try_resolve(Engine)

        assert not found


class TestOpenGenerics:
    def test_closed_requests_are_served(self, container: Container) -> None:
        container.add_registrations(
            [OpenGenericTypeRegistration(SqlRepository, service_type=Repository)],
        )

        items = container.resolve(Repository[Item])
        orders = container.resolve(Repository[Order])

        assert isinstance(items, SqlRepository)
        assert isinstance(orders, SqlRepository)
        assert items is not orders
        assert container.resolve(Repository[Item]) is items

    def test_bare_open_type_is_not_served(self, container: Container) -> None:
        container.add_registrations(
            [OpenGenericTypeRegistration(SqlRepository, service_type=Repository)],
        )

        found, _ = container.try_resolve(Repository)

        assert not found


class TestListeners:
    def test_listener_receives_new_instances_only(self, container: Container) -> None:
        events: list[ServiceResolvedEvent] = []
        container.add_service_resolved_listener(events.append)
        container.add_registrations([TypeRegistration(Engine), TypeRegistration(Car)])

        car = container.resolve(Car)
        container.resolve(Car)

        instances = [event.instance for event in events]
        assert car in instances
        assert car.engine in instances
        assert len(events) == 2

    def test_removed_listener_is_not_called(self, container: Container) -> None:
        events: list[ServiceResolvedEvent] = []
        container.add_service_resolved_listener(events.append)
        container.remove_service_resolved_listener(events.append)
        container.add_registrations([TypeRegistration(Engine)])

        container.resolve(Engine)

        assert events == []


class TestDisposedContainer:
    def test_operations_after_dispose_raise(self, container: Container) -> None:
        container.dispose()

        assert container.is_disposed
        with pytest.raises(FlexDiContainerDisposedError):
            container.resolve(Engine)
        with pytest.raises(FlexDiContainerDisposedError):
            container.add_registrations([TypeRegistration(Engine)])
        with pytest.raises(FlexDiContainerDisposedError):
            container.create_child_container()
        with pytest.raises(FlexDiContainerDisposedError):
            container.add_service_resolved_listener(lambda event: None)
        with pytest.raises(FlexDiContainerDisposedError):
            container.remove_service_resolved_listener(lambda event: None)
