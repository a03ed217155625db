from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar, get_type_hints

from ._errors import InvalidProviderError
from ._manifest import MANIFEST_ATTR, token_for_hint
from ._providers import SINGLETON_ATTR


if TYPE_CHECKING:
    from collections.abc import Callable

    from ._injector import Injector
    from ._tokens import Token


logger = logging.getLogger(__name__)

T = TypeVar("T")
F = TypeVar("F", bound="Callable[..., Any]")


def injectable(*tokens: Token, singleton: bool = False) -> Callable[[F], F]:
    """Mark a class or factory as injectable.

    Tokens, when given, are the explicit manifest: they are resolved in order
    and passed positionally, overriding type hints. `singleton=True` makes a
    bare `injector.bind(cls)` cache one instance.

    Example:
      @injectable("NUM")
      class Receiver:
          def __init__(self, num): ...

    """

    def decorator(target: F) -> F:
        if tokens:
            setattr(target, MANIFEST_ATTR, tuple(tokens))
        if singleton:
            setattr(target, SINGLETON_ATTR, True)
        return target

    return decorator


class Inject(Generic[T]):
    """Property injection: the attribute is resolved on first access and cached per instance.

    class Receiver:
        num: int = Inject("NUM")
        dep: Dependency = Inject(provided_in=injector)

    Without a token the attribute's annotation is used. Without `provided_in`
    the global injector is used.
    """

    def __init__(self, token: Token | None = None, *, provided_in: Injector | None = None) -> None:
        self._token = token
        self._provided_in = provided_in
        self._owner: type | None = None
        self._name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self._owner = owner
        self._name = name

    @property
    def token(self) -> Token:
        if self._token is None:
            self._token = self._token_from_annotation()
        return self._token

    def _token_from_annotation(self) -> Token:
        hints: dict[str, Any] = {}
        if self._owner is not None:
            try:
                hints = get_type_hints(self._owner, include_extras=True)
            except NameError as exc:
                logger.warning("'%s' name error retrieving %s type hints", exc.name, self._owner.__qualname__)
                hints = {}

        if self._name not in hints:
            owner = self._owner.__qualname__ if self._owner is not None else "<unbound>"
            msg = f"Cannot infer a token for {owner}.{self._name}: pass a token or annotate the attribute."
            raise InvalidProviderError(msg)
        return token_for_hint(hints[self._name])

    def __get__(self, obj: object | None, owner: type | None = None) -> Any:
        if obj is None:
            return self

        if self._provided_in is not None:
            injector = self._provided_in
        else:
            from ._injector import get_global_injector

            injector = get_global_injector()

        value = injector.get(self.token)
        # Non-data descriptor: the instance attribute shadows us from now on.
        obj.__dict__[self._name] = value
        return value
