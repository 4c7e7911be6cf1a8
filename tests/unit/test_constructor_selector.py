"""Tests for constructor discovery and selection."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

import pytest

from flexdi.exceptions import FlexDiAmbiguousConstructorError, FlexDiCannotInstantiateTypeError
from flexdi.resolution.constructors import ConstructorWithMostParametersSelector, constructor

T = TypeVar("T")


class Dependency:
    pass


class NoArguments:
    pass


class TwoArguments:
    def __init__(self, first: Dependency, second: Dependency) -> None:
        self.first = first
        self.second = second


class WithAlternate:
    def __init__(self) -> None:
        self.dependency = None

    @constructor
    @classmethod
    def with_dependency(cls, dependency: Dependency) -> "WithAlternate":
        instance = cls()
        instance.dependency = dependency
        return instance


class Tied:
    def __init__(self, first: Dependency) -> None:
        self.first = first

    @constructor
    @classmethod
    def build(cls, other: Dependency) -> "Tied":
        return cls(other)


class Hidden:
    def __init__(self) -> None:
        self.dependency = None

    @constructor
    @classmethod
    def _build(cls, dependency: Dependency) -> "Hidden":
        instance = cls()
        instance.dependency = dependency
        return instance


class Unmarked:
    def __init__(self) -> None:
        pass

    @classmethod
    def build(cls, dependency: Dependency) -> "Unmarked":
        return cls()


class AbstractService(ABC):
    @abstractmethod
    def run(self) -> None: ...


class ConcreteService(AbstractService):
    def run(self) -> None:
        pass


class AbstractWithFactory(ABC):
    @abstractmethod
    def run(self) -> None: ...

    @constructor
    @staticmethod
    def create(dependency: Dependency) -> AbstractService:
        return ConcreteService()


class Box(Generic[T]):
    def __init__(self, item: T) -> None:
        self.item = item


class VariadicArguments:
    def __init__(self, dependency: Dependency, *args: object, **kwargs: object) -> None:
        self.dependency = dependency


class TestSelect:
    def test_class_without_init(self, constructor_selector: ConstructorWithMostParametersSelector) -> None:
        selected = constructor_selector.select(NoArguments)

        assert selected.target is NoArguments
        assert selected.parameter_count == 0

    def test_init_parameters(self, constructor_selector: ConstructorWithMostParametersSelector) -> None:
        selected = constructor_selector.select(TwoArguments)

        assert [parameter.name for parameter in selected.parameters] == ["first", "second"]
        assert all(parameter.service_type is Dependency for parameter in selected.parameters)

    def test_alternate_constructor_with_more_parameters_wins(
        self,
        constructor_selector: ConstructorWithMostParametersSelector,
    ) -> None:
        selected = constructor_selector.select(WithAlternate)

        assert selected.name == "WithAlternate.with_dependency"
        dependency = Dependency()
        instance = selected.target(dependency)
        assert isinstance(instance, WithAlternate)
        assert instance.dependency is dependency

    def test_tie_is_ambiguous(self, constructor_selector: ConstructorWithMostParametersSelector) -> None:
        with pytest.raises(FlexDiAmbiguousConstructorError, match="take 1 parameter"):
            constructor_selector.select(Tied)

    def test_non_public_alternates_are_ignored_by_default(
        self,
        constructor_selector: ConstructorWithMostParametersSelector,
    ) -> None:
        assert constructor_selector.select(Hidden).name == "Hidden"

    def test_non_public_alternates_when_enabled(self) -> None:
        selector = ConstructorWithMostParametersSelector(use_non_public_constructors=True)

        assert selector.select(Hidden).name == "Hidden._build"

    def test_unmarked_class_methods_are_not_constructors(
        self,
        constructor_selector: ConstructorWithMostParametersSelector,
    ) -> None:
        assert constructor_selector.select(Unmarked).parameter_count == 0

    def test_abstract_class_cannot_be_instantiated(
        self,
        constructor_selector: ConstructorWithMostParametersSelector,
    ) -> None:
        with pytest.raises(FlexDiCannotInstantiateTypeError, match="AbstractService"):
            constructor_selector.select(AbstractService)

    def test_abstract_class_with_alternate_constructor(
        self,
        constructor_selector: ConstructorWithMostParametersSelector,
    ) -> None:
        selected = constructor_selector.select(AbstractWithFactory)

        assert selected.name == "AbstractWithFactory.create"
        assert isinstance(selected.target(Dependency()), ConcreteService)

    def test_closed_generic_substitutes_type_variables(
        self,
        constructor_selector: ConstructorWithMostParametersSelector,
    ) -> None:
        selected = constructor_selector.select(Box[Dependency])

        assert selected.parameters[0].service_type is Dependency
        assert selected.target == Box[Dependency]

    def test_variadic_parameters_are_skipped(
        self,
        constructor_selector: ConstructorWithMostParametersSelector,
    ) -> None:
        selected = constructor_selector.select(VariadicArguments)

        assert [parameter.name for parameter in selected.parameters] == ["dependency"]

    def test_non_class_has_no_candidates(
        self,
        constructor_selector: ConstructorWithMostParametersSelector,
    ) -> None:
        assert constructor_selector.get_candidates("not a type") == []
        with pytest.raises(FlexDiCannotInstantiateTypeError):
            constructor_selector.select("not a type")
