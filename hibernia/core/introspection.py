"""
Signature inspection helpers.

Reads injection points from constructors and keyword-only parameters, and
checks handler arities. Problems are raised as TypeError with a message fit
for a scan report; callers decide whether to collect or propagate them.
"""

from __future__ import annotations

import inspect
import typing
from collections.abc import Callable
from typing import Any

from .models.capability import Dependency

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


def _type_hints(func: Callable[..., Any], owner: str) -> dict[str, Any]:
    try:
        return typing.get_type_hints(func)
    except Exception as e:
        raise TypeError(f"{owner} has an unresolvable type annotation: {e}") from e


def _binding_key(hint: Any, param: inspect.Parameter) -> Any:
    """The binding key for a parameter; `X | None = None` binds X."""
    if param.default is None and type(None) in typing.get_args(hint):
        rest = [a for a in typing.get_args(hint) if a is not type(None)]
        if len(rest) == 1:
            return rest[0]
    return hint


def constructor_dependencies(cls: type) -> tuple[Dependency, ...]:
    """
    Injection points of a class constructor, in parameter order.

    Every parameter after `self` must be annotated; the annotation is the
    binding key. Parameters with defaults become optional dependencies.

    Raises:
        TypeError: On unannotated, unresolvable or positional-only parameters
    """
    init = cls.__init__
    if init is object.__init__:
        return ()

    owner = f"{cls.__qualname__}.__init__"
    hints = _type_hints(init, owner)
    params = list(inspect.signature(init).parameters.values())[1:]

    deps = []
    for param in params:
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if param.kind == inspect.Parameter.POSITIONAL_ONLY:
            raise TypeError(f"parameter '{param.name}' of {owner} is positional-only")
        if param.name not in hints:
            raise TypeError(f"parameter '{param.name}' of {owner} has no type annotation")
        deps.append(
            Dependency(
                key=_binding_key(hints[param.name], param),
                name=param.name,
                optional=param.default is not inspect.Parameter.empty,
            )
        )
    return tuple(deps)


def keyword_dependencies(func: Callable[..., Any]) -> tuple[Dependency, ...]:
    """
    Injection points of a function: its keyword-only parameters.

    Raises:
        TypeError: On unannotated or unresolvable keyword-only parameters
    """
    owner = getattr(func, "__qualname__", repr(func))
    params = [
        p
        for p in inspect.signature(func).parameters.values()
        if p.kind == inspect.Parameter.KEYWORD_ONLY
    ]
    if not params:
        return ()

    hints = _type_hints(func, owner)
    deps = []
    for param in params:
        if param.name not in hints:
            raise TypeError(f"parameter '{param.name}' of {owner} has no type annotation")
        deps.append(
            Dependency(
                key=_binding_key(hints[param.name], param),
                name=param.name,
                optional=param.default is not inspect.Parameter.empty,
            )
        )
    return tuple(deps)


def accepts_positional(func: Callable[..., Any], count: int, *, skip: int = 0) -> bool:
    """
    Whether `func` can be called with exactly `count` positional arguments.

    Keyword-only parameters are ignored (they are injection points).

    Args:
        func: Callable to check
        count: Number of positional arguments the caller will pass
        skip: Leading parameters to ignore (1 for `self` on a plain method)
    """
    try:
        params = list(inspect.signature(func).parameters.values())[skip:]
    except (TypeError, ValueError):
        return False

    positional = [p for p in params if p.kind in _POSITIONAL]
    required = [p for p in positional if p.default is inspect.Parameter.empty]
    variadic = any(p.kind == inspect.Parameter.VAR_POSITIONAL for p in params)
    return len(required) <= count and (count <= len(positional) or variadic)


def method_accepts_positional(cls: type, name: str, count: int) -> bool:
    """
    Whether instances of `cls` expose a method `name` callable with `count` positionals.

    Returns False when the attribute is missing or not callable.
    """
    try:
        static = inspect.getattr_static(cls, name)
    except AttributeError:
        return False
    attr = getattr(cls, name, None)
    if attr is None or not callable(attr):
        return False
    skip = 0 if isinstance(static, (staticmethod, classmethod)) else 1
    return accepts_positional(attr, count, skip=skip)
