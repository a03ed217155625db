"""Providers deliver a dependency to an `Injector`.

A provider decides what is being provided (its `token`) and how the value is
produced (`get`). The injector only stores providers and walks the parent chain;
constants, factories and classes all go through the same lookup.
"""

from __future__ import annotations

import inspect
import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from ._manifest import TargetKind
from ._tokens import describe_token


if TYPE_CHECKING:
    from collections.abc import Callable

    from ._injector import Injector
    from ._tokens import Token


logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSET: Any = object()

# Guards the first construction of every singleton. Shared and reentrant: a cycle
# entered from two threads runs on one thread at a time and is reported there.
_construction_lock = threading.RLock()

# Set by `injectable(singleton=True)`; honoured when a bare class is bound.
SINGLETON_ATTR = "__inject_singleton__"


class Lifetime(Enum):
    SINGLETON = "singleton"
    TRANSIENT = "transient"


class Provider(ABC, Generic[T]):
    token: Token

    @abstractmethod
    def get(self, injector: Injector) -> T:
        """Produce the dependency, resolving sub-dependencies from `injector`."""

    @property
    def lifetime(self) -> Lifetime:
        return Lifetime.SINGLETON

    def __repr__(self) -> str:
        return f"{type(self).__name__}(token={describe_token(self.token)}, lifetime={self.lifetime.value})"


class ObjectProvider(Provider[T]):
    """Provides a pre-existing value. Every `get` returns the same reference."""

    def __init__(self, obj: T, token: Token) -> None:
        self._obj = obj
        self.token = token

    def get(self, injector: Injector | None = None) -> T:
        return self._obj


ConstantProvider = ObjectProvider


class _ApplyingProvider(Provider[T]):
    """Shared construct-once logic for class and factory providers."""

    _kind: TargetKind

    def __init__(self, target: Callable[..., T], singleton: bool, token: Token) -> None:
        self._target = target
        self.singleton = singleton
        self.token = token
        self._instance: T = _UNSET

    @property
    def lifetime(self) -> Lifetime:
        return Lifetime.SINGLETON if self.singleton else Lifetime.TRANSIENT

    def get(self, injector: Injector) -> T:
        if not self.singleton:
            return injector.apply(self._target, kind=self._kind)

        if self._instance is _UNSET:
            with _construction_lock:
                if self._instance is _UNSET:
                    self._instance = injector.apply(self._target, kind=self._kind)
                    logger.debug("Created singleton for token %s", describe_token(self.token))
        return self._instance


class ClassProvider(_ApplyingProvider[T]):
    """Provides instances of a class, injecting its constructor arguments.

    Example:
      injector.bind(ClassProvider(Foo))                   # token is Foo itself
      injector.bind(ClassProvider(FooImpl, True, IFoo))   # one shared FooImpl under IFoo

    """

    _kind = TargetKind.CLASS

    def __init__(self, clazz: type[T], singleton: bool = False, token: Token | None = None) -> None:
        if not inspect.isclass(clazz):
            msg = f"ClassProvider expects a class, got {clazz!r}"
            raise TypeError(msg)
        super().__init__(clazz, singleton, token if token is not None else clazz)


class FactoryProvider(_ApplyingProvider[T]):
    """Provides whatever a factory function returns; its arguments are injected."""

    _kind = TargetKind.FACTORY

    def __init__(self, factory: Callable[..., T], singleton: bool, token: Token) -> None:
        super().__init__(factory, singleton, token)


def is_singleton_marked(cls: type) -> bool:
    # Own namespace only, a subclass of a singleton-marked class is not itself marked.
    return bool(vars(cls).get(SINGLETON_ATTR, False))


def is_provider(obj: object) -> bool:
    """Duck-typed check: anything with a `token` and a callable `get` is a provider."""
    if isinstance(obj, Provider):
        return True
    if isinstance(obj, type):
        return False
    return hasattr(obj, "token") and callable(getattr(obj, "get", None))
