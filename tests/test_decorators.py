import logging

import pytest

from injectinator import (
    ClassProvider,
    Inject,
    Injector,
    InvalidProviderError,
    ObjectProvider,
    UnresolvedTokenError,
    get_global_injector,
    injectable,
)


def test_injectable_returns_target_unchanged():
    class A: ...

    assert injectable()(A) is A


def test_inject_property_from_global_injector():
    get_global_injector().bind({"key": "MY_NUM", "provide_constant": 6})

    class Receiver:
        num = Inject("MY_NUM")

        def add_num(self, a):
            return self.num + a

    rec = Receiver()
    assert rec.num == 6
    assert rec.add_num(5) == 11


def test_inject_property_uses_annotation_as_token():
    class Dependency:
        def __init__(self):
            self.prop = "Dependency property"

        def foo(self):
            return f"Foo called, prop: {self.prop}"

    injector = Injector(None)
    injector.bind(ClassProvider(Dependency, True))

    class Receiver:
        dep: Dependency = Inject(provided_in=injector)

    target = Receiver()
    assert target.dep.foo() == "Foo called, prop: Dependency property"


def test_inject_property_is_resolved_once_per_instance():
    calls = []

    def make():
        calls.append(1)
        return object()

    injector = Injector(None)
    injector.bind({"key": "obj", "provide_factory": make})

    class Receiver:
        value = Inject("obj", provided_in=injector)

    first, second = Receiver(), Receiver()
    assert first.value is first.value
    assert first.value is not second.value
    assert len(calls) == 2


def test_inject_is_lazy():
    injector = Injector(None)

    class Receiver:
        value = Inject("late", provided_in=injector)

    rec = Receiver()
    injector.bind(ObjectProvider("bound later", "late"))
    assert rec.value == "bound later"


def test_inject_unbound_token_raises_on_access():
    class Receiver:
        value = Inject("missing", provided_in=Injector(None))

    with pytest.raises(UnresolvedTokenError):
        Receiver().value


def test_inject_without_token_or_annotation_raises():
    class Receiver:
        value = Inject(provided_in=Injector(None))

    with pytest.raises(InvalidProviderError):
        Receiver().value


def test_inject_on_class_returns_descriptor():
    descriptor = Inject("x")

    class Receiver:
        value = descriptor

    assert Receiver.value is descriptor
    assert descriptor.token == "x"


def test_inject_with_unresolvable_annotation_warns_and_raises(caplog):
    class Receiver:
        value: "DoesNotExist" = Inject(provided_in=Injector(None))  # noqa: F821

    with caplog.at_level(logging.WARNING, logger="injectinator"), pytest.raises(InvalidProviderError):
        Receiver().value

    assert "DoesNotExist" in caplog.text
    assert "Receiver" in caplog.text
