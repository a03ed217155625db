from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from ._errors import (
    CyclicDependencyError,
    GlobalInjectorAlreadySetError,
    InvalidProviderError,
    ManifestUnavailableError,
    UnresolvedTokenError,
)
from ._manifest import AnnotationManifestProvider, TargetKind
from ._providers import (
    ClassProvider,
    FactoryProvider,
    ObjectProvider,
    Provider,
    is_provider,
    is_singleton_marked,
)
from ._tokens import describe_token


if TYPE_CHECKING:
    from collections.abc import Callable

    from ._manifest import ManifestProvider
    from ._tokens import Token


logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSET: Any = object()
# Default for `Injector(parent=...)`: use the global injector. `None` means "root".
_GLOBAL: Any = object()

# Aliases accepted in mapping specs, mostly for configs written against the camelCase names.
_OPTION_ALIASES = {
    "key": "key",
    "provide": "provide",
    "provide_factory": "provide_factory",
    "provideFactory": "provide_factory",
    "provide_constant": "provide_constant",
    "provideConstant": "provide_constant",
    "singleton": "singleton",
}


@dataclass(frozen=True)
class ProviderOptions:
    """Declarative provider spec accepted by `Injector.bind`.

    Exactly one of `provide`, `provide_factory` or `provide_constant` should be
    set. When several are, a class wins over a factory, which wins over a constant.
    `singleton` only applies to classes and factories.
    """

    key: Token
    provide: type | None = None
    provide_factory: Callable[..., Any] | None = None
    provide_constant: Any = _UNSET
    singleton: bool = False

    @classmethod
    def from_mapping(cls, spec: Mapping[str, Any]) -> ProviderOptions:
        if "key" not in spec:
            msg = f"Provider spec {dict(spec)!r} is missing the required 'key' field."
            raise InvalidProviderError(msg)

        kwargs: dict[str, Any] = {}
        for name, value in spec.items():
            field = _OPTION_ALIASES.get(name)
            if field is None:
                msg = f"Unknown provider spec field {name!r}."
                raise InvalidProviderError(msg)
            kwargs[field] = value
        return cls(**kwargs)

    def to_provider(self) -> Provider[Any]:
        if self.key is None:
            msg = "Provider spec 'key' must not be None."
            raise InvalidProviderError(msg)

        if self.provide is not None:
            return ClassProvider(self.provide, self.singleton, self.key)
        if self.provide_factory is not None:
            return FactoryProvider(self.provide_factory, self.singleton, self.key)
        if self.provide_constant is not _UNSET:
            return ObjectProvider(self.provide_constant, self.key)

        msg = f"Provider spec for {describe_token(self.key)} needs one of provide, provide_factory or provide_constant."
        raise InvalidProviderError(msg)


class Injector:
    """Registry of providers with an optional parent to delegate to.

    - `bind` providers (or specs / bare classes) under tokens
    - `resolve` tokens: local registry first, then the parent chain
    - `apply` a class or factory, injecting the tokens of its manifest
    - `spawn` child injectors

    Omitting `parent` makes the global injector the parent; pass `None` for a root.
    """

    def __init__(self, parent: Injector | None = _GLOBAL, *, manifests: ManifestProvider | None = None) -> None:
        if parent is _GLOBAL:
            parent = get_global_injector()
        self._parent: Injector | None = parent
        self._providers: dict[Any, Provider[Any]] = {}
        self._lock = threading.RLock()

        if manifests is None:
            manifests = parent.manifests if parent is not None else AnnotationManifestProvider()
        self._manifests: ManifestProvider = manifests

    @property
    def parent(self) -> Injector | None:
        return self._parent

    @property
    def manifests(self) -> ManifestProvider:
        return self._manifests

    # -- global injector --

    @staticmethod
    def global_injector() -> Injector:
        return get_global_injector()

    @staticmethod
    def set_global_injector(injector: Injector) -> None:
        set_global_injector(injector)

    # -- registration --

    def spawn(self) -> Injector:
        """Create a child injector that delegates to this one."""
        return Injector(self)

    def bind(self, provider: Provider[Any] | ProviderOptions | Mapping[str, Any] | type) -> Injector:
        """Bind a provider, provider spec or bare class. Returns `self` for chaining.

        Example:
          injector.bind(Foo)  # transient ClassProvider under Foo
          injector.bind({"key": "NUM", "provide_constant": 6})
          injector.bind(ProviderOptions(IFoo, provide=FooImpl, singleton=True))

        Binding an already bound token logs a warning and keeps the first binding.
        """
        if provider is None:
            msg = "Provider value is None."
            raise InvalidProviderError(msg)

        return self._bind(self._to_provider(provider))

    def _to_provider(self, dto: Any) -> Provider[Any]:
        if is_provider(dto):
            return dto
        if isinstance(dto, ProviderOptions):
            return dto.to_provider()
        if isinstance(dto, Mapping):
            return ProviderOptions.from_mapping(dto).to_provider()
        if inspect.isclass(dto):
            return ClassProvider(dto, is_singleton_marked(dto))

        msg = f"Cannot bind {dto!r}: expected a provider, a provider spec or a class."
        raise InvalidProviderError(msg)

    def _bind(self, provider: Provider[Any]) -> Injector:
        token = provider.token
        with self._lock:
            if token in self._providers:
                logger.warning("Tried to double bind a provider under token %s. Binding aborted.", describe_token(token))
                return self
            self._providers[token] = provider

        logger.debug("Bound %r", provider)
        return self

    # -- lookup --

    def __contains__(self, token: Token) -> bool:
        with self._lock:
            return token in self._providers

    def has(self, token: Token, *, local: bool = False) -> bool:
        if token in self:
            return True
        if local or self._parent is None:
            return False
        return self._parent.has(token)

    def resolve(self, *tokens: Token) -> list[Any]:
        """Resolve each token to its dependency, preserving order.

        Raises `UnresolvedTokenError` if any token is bound nowhere in the chain.
        """
        return [self._resolve_one(token) for token in tokens]

    def get(self, token: Token) -> Any:
        return self._resolve_one(token)

    def _resolve_one(self, token: Token) -> Any:
        with self._lock:
            provider = self._providers.get(token)

        if provider is not None:
            return _produce(provider, self)
        if self._parent is not None:
            return self._parent._resolve_one(token)  # noqa: SLF001
        raise UnresolvedTokenError(token)

    def apply(self, target: Callable[..., T], *, kind: TargetKind | None = None) -> T:
        """Call a class or factory with its manifest's tokens resolved as positional arguments.

        `kind` tags how the target is invoked; providers pass their own tag,
        otherwise the manifest decides.
        """
        manifest = self._manifests.get_manifest(target)
        if manifest is None:
            raise ManifestUnavailableError(target)

        kind = kind or manifest.kind
        if kind is TargetKind.CLASS and not inspect.isclass(target):
            msg = f"{describe_token(target)} was applied as a class but is not one."
            raise InvalidProviderError(msg)

        args = self.resolve(*manifest.tokens)
        return target(*args)

    def __repr__(self) -> str:
        with self._lock:
            count = len(self._providers)
        return f"Injector(bindings={count}, root={self._parent is None})"


# -- cycle detection --

_production = threading.local()


def _produce(provider: Provider[T], injector: Injector) -> T:
    stack: list[Provider[Any]] | None = getattr(_production, "stack", None)
    if stack is None:
        stack = _production.stack = []

    for index, active in enumerate(stack):
        if active is provider:
            path = tuple(p.token for p in stack[index:]) + (provider.token,)
            raise CyclicDependencyError(path)

    stack.append(provider)
    try:
        return provider.get(injector)
    finally:
        stack.pop()


# -- global injector --
#
# Uninitialized -> Locked on the first read (a root injector is created) or
# on an explicit set. Any set while Locked fails.

_global_lock = threading.Lock()
_global_injector: Injector | None = None
_global_locked = False


def get_global_injector() -> Injector:
    """Return the process-wide injector, creating a root one on first use."""
    global _global_injector, _global_locked  # noqa: PLW0603
    with _global_lock:
        if _global_injector is None:
            _global_injector = Injector(None)
            logger.debug("Created default global injector")
        _global_locked = True
        return _global_injector


def set_global_injector(injector: Injector) -> None:
    """Replace the global injector. Allowed once, and only before it is first used."""
    global _global_injector, _global_locked  # noqa: PLW0603
    if not isinstance(injector, Injector):
        msg = f"Global injector must be an Injector, got {type(injector).__name__}"
        raise TypeError(msg)

    with _global_lock:
        if _global_locked:
            raise GlobalInjectorAlreadySetError
        _global_injector = injector
        _global_locked = True
    logger.debug("Global injector assigned")


def _reset_global_injector() -> None:
    global _global_injector, _global_locked  # noqa: PLW0603
    with _global_lock:
        _global_injector = None
        _global_locked = False
