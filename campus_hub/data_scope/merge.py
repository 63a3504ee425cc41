"""
Merge the scope grants of every role an actor holds for one module.

The most permissive grant wins; grants are not unioned per department:

    ALL > CUSTOM > DEPT_AND_CHILD > DEPT > SELF > NONE

Department expansion is injected so the merge stays a pure function.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Set

from campus_hub.data_scope.types import ResolvedScope, ScopeType

ExpandFn = Callable[[Set[int]], Set[int]]


def merge_scope_types(
    scope_types: Iterable[ScopeType],
    custom_department_ids: Set[int],
    user_department_ids: Set[int],
    expand: ExpandFn,
) -> ResolvedScope:
    held = frozenset(scope_types)

    if ScopeType.ALL in held:
        return ResolvedScope.all()

    if ScopeType.CUSTOM in held:
        expanded = expand(frozenset(custom_department_ids))
        if not expanded:
            return ResolvedScope.none()
        return ResolvedScope.departments(ScopeType.CUSTOM, expanded)

    if ScopeType.DEPT_AND_CHILD in held:
        expanded = expand(frozenset(user_department_ids))
        if not expanded:
            return ResolvedScope.none()
        return ResolvedScope.departments(ScopeType.DEPT_AND_CHILD, expanded)

    if ScopeType.DEPT in held:
        # Own departments only; descendants are what DEPT_AND_CHILD adds.
        if not user_department_ids:
            return ResolvedScope.none()
        return ResolvedScope.departments(ScopeType.DEPT, user_department_ids)

    if ScopeType.SELF in held:
        return ResolvedScope.self_only()

    return ResolvedScope.none()
