from __future__ import annotations

from typing import Any

from ._tokens import describe_token


class InjectorError(RuntimeError):
    """Base class for every error raised by an `Injector`."""


class ResolutionError(InjectorError):
    pass


class UnresolvedTokenError(ResolutionError, LookupError):
    def __init__(self, token: Any) -> None:
        self.token = token
        msg = f"Unable to resolve token {describe_token(token)}: no dependency exists under this token."
        super().__init__(msg)


class ManifestUnavailableError(ResolutionError):
    def __init__(self, target: Any) -> None:
        self.target = target
        msg = (
            f"Failed to determine parameter types for {describe_token(target)}. "
            "Annotate its parameters or declare them with @injectable(...)."
        )
        super().__init__(msg)


class CyclicDependencyError(ResolutionError):
    def __init__(self, path: tuple[Any, ...]) -> None:
        self.path = path
        msg = f"Cyclic dependency detected: {' -> '.join(describe_token(t) for t in path)}"
        super().__init__(msg)


class InvalidProviderError(InjectorError, ValueError):
    pass


class GlobalInjectorAlreadySetError(InjectorError):
    def __init__(self) -> None:
        msg = (
            "Attempted to re-assign the global injector after it has been used or previously assigned. "
            "Are you trying to reassign its value after using it?"
        )
        super().__init__(msg)
