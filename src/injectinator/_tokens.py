from __future__ import annotations

import inspect
from collections.abc import Hashable
from typing import Any, Generic, TypeVar


T = TypeVar("T")

Token = Hashable


class InjectionToken(Generic[T]):
    """A process-unique token.

    Two tokens are only ever equal to themselves, even when created with the
    same description, so they are safe to use as keys across libraries:

        DB_URL = InjectionToken[str]("DB_URL")
        injector.bind({"key": DB_URL, "provide_constant": "sqlite://"})
    """

    __slots__ = ("description",)

    def __init__(self, description: str) -> None:
        self.description = description

    def __repr__(self) -> str:
        return f"InjectionToken({self.description!r})"


def describe_token(token: Any) -> str:
    if inspect.isclass(token) or inspect.isfunction(token):
        return token.__qualname__
    return repr(token)
