from __future__ import annotations

from collections.abc import Callable

from campus_hub.data_scope.types import DataModule, validate_module


def data_scope(module: str | DataModule) -> Callable:
    """
    Scope every query of this endpoint by the actor's grants for `module`.

    Decorator-style alternative to `data_scope_module` in the YAML route
    rules. It only attaches metadata; the global security dependency reads it
    after routing and wins over the route rule.
    """

    module_name = validate_module(module)

    def decorator(fn: Callable) -> Callable:
        setattr(fn, "__security_data_scope_module__", module_name)
        return fn

    return decorator
