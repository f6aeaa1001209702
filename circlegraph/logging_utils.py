from __future__ import annotations

import dataclasses
import inspect
import logging
import reprlib
from functools import wraps
from typing import Any, Callable, Iterable, MutableMapping, Optional, Set, TypeVar, cast

import numpy as np

F = TypeVar("F", bound=Callable[..., Any])

_repr = reprlib.Repr()
_repr.maxother = 120
_repr.maxlist = 8
_repr.maxtuple = 8
_repr.maxdict = 8


def _summarize(value: Any, *, max_length: int = 240) -> str:
    if isinstance(value, np.ndarray):
        if value.size <= 6:
            return f"ndarray{tuple(value.shape)}={np.round(value, 3).tolist()}"
        return f"ndarray(shape={tuple(value.shape)}, dtype={value.dtype})"

    # Layout snapshots are large; the breakpoint name identifies them in logs.
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        label = getattr(value, "breakpoint", None)
        if isinstance(label, str):
            return f"{type(value).__name__}<{label}>"

    if isinstance(value, float):
        return f"{value:.6g}"

    try:
        rendered = _repr.repr(value)
    except Exception as exc:  # pragma: no cover - repr of foreign objects
        rendered = f"<repr-error {exc!r}>"
    if len(rendered) > max_length:
        return rendered[:max_length] + "..."
    return rendered


def _format_call(args: Iterable[Any], kwargs: MutableMapping[str, Any]) -> str:
    parts = [_summarize(arg) for arg in args]
    parts.extend(f"{key}={_summarize(val)}" for key, val in kwargs.items())
    return ", ".join(parts)


def debug_log_call(
    logger: logging.Logger, *, name: Optional[str] = None, log_result: bool = True
) -> Callable[[F], F]:
    """Return a decorator logging entry, exit and failures of a call at DEBUG level."""

    def decorator(func: F) -> F:
        if getattr(func, "_debug_logged", False):
            return func

        label = name or getattr(func, "__qualname__", getattr(func, "__name__", "<callable>"))

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            if not logger.isEnabledFor(logging.DEBUG):
                return func(*args, **kwargs)
            logger.debug("-> %s(%s)", label, _format_call(args, kwargs))
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                logger.debug("!! %s raised %s", label, exc.__class__.__name__)
                raise
            if log_result:
                logger.debug("<- %s = %s", label, _summarize(result))
            return result

        setattr(wrapper, "_debug_logged", True)
        return cast(F, wrapper)

    return decorator


def _wrap_class(cls: type, logger: logging.Logger, skip: Set[str]) -> None:
    for attr, value in list(cls.__dict__.items()):
        if attr.startswith("__"):
            continue
        qualified = f"{cls.__name__}.{attr}"
        if attr in skip or qualified in skip:
            continue
        if isinstance(value, staticmethod):
            setattr(cls, attr, staticmethod(debug_log_call(logger, name=qualified)(value.__func__)))
        elif isinstance(value, classmethod):
            setattr(cls, attr, classmethod(debug_log_call(logger, name=qualified)(value.__func__)))
        elif inspect.isfunction(value) and value.__module__ == cls.__module__:
            setattr(cls, attr, debug_log_call(logger, name=qualified)(value))


def apply_debug_logging(
    namespace: MutableMapping[str, Any],
    *,
    logger: Optional[logging.Logger] = None,
    skip: Optional[Iterable[str]] = None,
) -> None:
    """Wrap the public functions and classes defined in a module namespace.

    Call at the bottom of a module with ``globals()``. Names starting with an
    underscore and anything listed in ``skip`` (plain or ``Class.method``) are
    left untouched.
    """

    module_name = namespace.get("__name__")
    logger = logger or logging.getLogger(module_name if isinstance(module_name, str) else __name__)
    skip_set: Set[str] = set(skip or ())

    for name, value in list(namespace.items()):
        if name.startswith("_") or name in skip_set:
            continue
        if inspect.isfunction(value) and value.__module__ == module_name:
            namespace[name] = debug_log_call(logger, name=name)(value)
        elif inspect.isclass(value) and value.__module__ == module_name:
            _wrap_class(value, logger, skip_set)
