from __future__ import annotations

import inspect
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Annotated, Any, Protocol, get_origin, get_type_hints


if TYPE_CHECKING:
    from collections.abc import Callable

    from ._tokens import Token


logger = logging.getLogger(__name__)

# Attribute `injectable(...)` stores an explicit token list under.
MANIFEST_ATTR = "__inject_manifest__"


class TargetKind(Enum):
    CLASS = "class"
    FACTORY = "factory"

    @classmethod
    def of(cls, target: object) -> TargetKind:
        return cls.CLASS if inspect.isclass(target) else cls.FACTORY


@dataclass(frozen=True)
class Manifest:
    """Ordered tokens a class or factory needs, plus how to invoke it."""

    tokens: tuple[Token, ...]
    kind: TargetKind


class ManifestProvider(Protocol):
    def get_manifest(self, target: Callable[..., Any]) -> Manifest | None:
        """Return the manifest for `target`, or None when it cannot be determined."""
        ...


class AnnotationManifestProvider:
    """Builds manifests from explicit `@injectable(...)` tokens or from type hints.

    Each positional parameter contributes one token, in order:
    - the first `Annotated` metadata item, e.g. `Annotated[int, "NUM"]` -> `"NUM"`
    - otherwise the annotation itself (type-identity token)

    An unannotated parameter with a default ends the manifest; the rest keep
    their defaults. An unannotated parameter without a default, or a required
    keyword-only parameter, means the manifest is unavailable.
    """

    def get_manifest(self, target: Callable[..., Any]) -> Manifest | None:
        kind = TargetKind.of(target)

        explicit = _explicit_tokens(target)
        if explicit is not None:
            return Manifest(tokens=explicit, kind=kind)

        hints_from: tuple[Callable[..., Any], ...] | None = None
        if kind is TargetKind.CLASS:
            if _overrides(target, "__init__"):
                func = inspect.getattr_static(target, "__init__", None)
                skip_first = True
            elif _overrides(target, "__new__"):
                # e.g. NamedTuple: parameters live on __new__, hints on the class or __new__
                func = target
                skip_first = False
                hints_from = (target, target.__new__)
            else:
                return Manifest(tokens=(), kind=kind)
        else:
            func = target
            skip_first = False

        if func is None:
            return None

        tokens = _tokens_from_signature(target, func, skip_first=skip_first, hints_from=hints_from)
        if tokens is None:
            return None
        return Manifest(tokens=tokens, kind=kind)


class ManifestRegistry:
    """Explicit target -> tokens mapping, falling back to another provider."""

    def __init__(self, fallback: ManifestProvider | None = None) -> None:
        self._manifests: dict[Any, Manifest] = {}
        self._fallback = fallback if fallback is not None else AnnotationManifestProvider()
        self._lock = threading.Lock()

    def register(
        self,
        target: Callable[..., Any],
        *tokens: Token,
        kind: TargetKind | None = None,
    ) -> ManifestRegistry:
        manifest = Manifest(tokens=tuple(tokens), kind=kind or TargetKind.of(target))
        with self._lock:
            self._manifests[target] = manifest
        return self

    def get_manifest(self, target: Callable[..., Any]) -> Manifest | None:
        with self._lock:
            manifest = self._manifests.get(target)
        if manifest is not None:
            return manifest
        return self._fallback.get_manifest(target)


def _explicit_tokens(target: object) -> tuple[Token, ...] | None:
    # Only the target's own namespace counts; a subclass must not inherit its base's manifest.
    try:
        own = vars(target)
    except TypeError:
        return None
    tokens = own.get(MANIFEST_ATTR)
    return tuple(tokens) if tokens is not None else None


def _overrides(cls: type, name: str) -> bool:
    """Whether a class below `object` in the MRO defines `name`."""
    for klass in cls.__mro__:
        if klass is object:
            return False
        if name in vars(klass):
            return True
    return False


def _tokens_from_signature(
    target: Callable[..., Any],
    func: Callable[..., Any],
    *,
    skip_first: bool,
    hints_from: tuple[Callable[..., Any], ...] | None = None,
) -> tuple[Token, ...] | None:
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return None

    hints: dict[str, Any] = {}
    for source in hints_from or (func,):
        hints.update(_get_type_hints(target, source))
    params = list(sig.parameters.values())
    if skip_first and params:
        params = params[1:]

    tokens: list[Token] = []
    exhausted = False
    for p in params:
        if p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD):
            continue
        has_default = p.default is not p.empty

        if p.kind is p.KEYWORD_ONLY:
            if not has_default:
                return None
            continue

        if exhausted:
            if not has_default:
                return None
            continue

        hint = hints.get(p.name, p.empty)
        if hint is p.empty:
            if not has_default:
                return None
            exhausted = True
            continue

        tokens.append(token_for_hint(hint))

    return tuple(tokens)


def token_for_hint(hint: Any) -> Token:
    if get_origin(hint) is Annotated:
        return hint.__metadata__[0]
    return hint


def _get_type_hints(target: object, func: Callable[..., Any]) -> dict[str, Any]:
    try:
        hints = get_type_hints(func, include_extras=True)
    except TypeError:
        hints = {}
    except NameError as exc:
        name = getattr(target, "__qualname__", repr(target))
        logger.warning("'%s' name error retrieving %s type hints", exc.name, name)
        hints = {}

    hints.pop("return", None)
    return hints
