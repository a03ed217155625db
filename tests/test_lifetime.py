import unittest

from injectinator import ClassProvider, FactoryProvider, Injector, Lifetime, ObjectProvider, injectable


class TestLifetimeControl(unittest.TestCase):
    injector: Injector

    def setUp(self):
        self.injector = Injector(None)

    def test_resolve_singleton_class_returns_same_instance(self):
        class A: ...

        self.injector.bind({"key": A, "provide": A, "singleton": True})
        a1 = self.injector.get(A)
        a2 = self.injector.get(A)
        assert a2 is a1, "SINGLETON should return the cached instance"

    def test_resolve_transient_class_returns_new_instances(self):
        class A: ...

        self.injector.bind({"key": A, "provide": A})
        a1 = self.injector.get(A)
        a2 = self.injector.get(A)
        assert a2 is not a1, "TRANSIENT should return new instances"

    def test_constant_is_always_the_same_object(self):
        class A: ...

        inst = A()
        self.injector.bind(ObjectProvider(inst, A))
        assert self.injector.get(A) is inst
        assert self.injector.get(A) is inst

    def test_singleton_created_once_across_transitive_dependents(self):
        @injectable(singleton=True)
        class A:
            count = 0

            def __init__(self):
                A.count += 1

        class B:
            count = 0

            def __init__(self, a: A):
                self.a = a
                B.count += 1

        class C:
            def __init__(self, b: B):
                self.b = b

        self.injector.bind(A).bind(B).bind(C)

        one = self.injector.apply(C)
        two = self.injector.apply(C)
        three = self.injector.get(C)

        assert A.count == 1
        assert B.count == 3
        assert one.b.a is two.b.a
        assert one.b.a is three.b.a
        assert one.b is not two.b
        assert one.b is not three.b

    def test_singleton_factory_caches_falsy_results(self):
        calls = []

        def make_nothing():
            calls.append(1)

        self.injector.bind(FactoryProvider(make_nothing, True, "nothing"))

        assert self.injector.resolve("nothing", "nothing") == [None, None]
        assert len(calls) == 1

    def test_transient_factory_is_invoked_every_time(self):
        calls = []

        def make_list():
            calls.append(1)
            return []

        self.injector.bind(FactoryProvider(make_list, False, "list"))

        first, second = self.injector.resolve("list", "list")
        assert first is not second
        assert len(calls) == 2

    def test_singleton_cache_is_per_provider_instance(self):
        class A: ...

        first = ClassProvider(A, True)
        second = ClassProvider(A, True)

        assert first.get(self.injector) is first.get(self.injector)
        assert first.get(self.injector) is not second.get(self.injector)

    def test_lifetime_reflects_singleton_flag(self):
        class A: ...

        assert ClassProvider(A, True).lifetime is Lifetime.SINGLETON
        assert ClassProvider(A).lifetime is Lifetime.TRANSIENT
        assert FactoryProvider(A, False, "a").lifetime is Lifetime.TRANSIENT
        assert ObjectProvider(1, "one").lifetime is Lifetime.SINGLETON

    def test_unmarked_bare_class_binds_transient(self):
        class A: ...

        self.injector.bind(A)
        assert self.injector.get(A) is not self.injector.get(A)

    def test_singleton_mark_is_not_inherited(self):
        @injectable(singleton=True)
        class Base: ...

        class Derived(Base): ...

        self.injector.bind(Base).bind(Derived)
        assert self.injector.get(Base) is self.injector.get(Base)
        assert self.injector.get(Derived) is not self.injector.get(Derived)
