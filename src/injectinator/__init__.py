"""Hierarchical dependency injection.

Register providers in an `Injector` and resolve tokens or construct objects
with their dependencies injected. Injectors form a tree: a lookup that misses
locally walks up to the parent, ending at the process-wide global injector.

Exports:
- `Injector`: registry + resolver; `bind`, `resolve`, `apply`, `spawn`.
- `ClassProvider`, `FactoryProvider`, `ObjectProvider`: the provider strategies.
- `ProviderOptions`: declarative spec accepted by `Injector.bind`.
- `InjectionToken`: process-unique token.
- `injectable`, `Inject`: decorator and property-injection sugar.
- `AnnotationManifestProvider`, `ManifestRegistry`: where an injector learns
  which tokens a class or factory needs.
"""

from ._decorators import Inject, injectable
from ._errors import (
    CyclicDependencyError,
    GlobalInjectorAlreadySetError,
    InjectorError,
    InvalidProviderError,
    ManifestUnavailableError,
    ResolutionError,
    UnresolvedTokenError,
)
from ._injector import Injector, ProviderOptions, get_global_injector, set_global_injector
from ._manifest import AnnotationManifestProvider, Manifest, ManifestProvider, ManifestRegistry, TargetKind
from ._providers import ClassProvider, ConstantProvider, FactoryProvider, Lifetime, ObjectProvider, Provider
from ._tokens import InjectionToken, Token


__all__ = [
    "AnnotationManifestProvider",
    "ClassProvider",
    "ConstantProvider",
    "CyclicDependencyError",
    "FactoryProvider",
    "GlobalInjectorAlreadySetError",
    "Inject",
    "InjectionToken",
    "Injector",
    "InjectorError",
    "InvalidProviderError",
    "Lifetime",
    "Manifest",
    "ManifestProvider",
    "ManifestRegistry",
    "ManifestUnavailableError",
    "ObjectProvider",
    "Provider",
    "ProviderOptions",
    "ResolutionError",
    "TargetKind",
    "Token",
    "UnresolvedTokenError",
    "get_global_injector",
    "injectable",
    "set_global_injector",
]
