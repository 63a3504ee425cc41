"""
Turn a resolved scope into a SQL predicate over an owner column.

This is the only place the engine builds query fragments; everything upstream
is decision logic.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import Select, false, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from campus_hub.data_scope.resolver import ScopeResolver
from campus_hub.data_scope.types import DEPARTMENT_SCOPE_TYPES, DataModule, ResolvedScope, ScopeType
from campus_hub.models.organization import user_departments


@dataclass(frozen=True)
class OwnerCondition:
    scope: ResolvedScope
    # None means unrestricted: attach nothing.
    condition: ColumnElement[bool] | None


def scope_to_condition(scope: ResolvedScope, actor_id: int, owner_column: ColumnElement) -> ColumnElement[bool] | None:
    if scope.scope_type is ScopeType.ALL:
        return None
    if scope.scope_type is ScopeType.SELF:
        return owner_column == actor_id
    if scope.scope_type in DEPARTMENT_SCOPE_TYPES and scope.department_ids:
        members = select(user_departments.c.user_id).where(
            user_departments.c.department_id.in_(sorted(scope.department_ids))
        )
        return owner_column.in_(members)
    # NONE, or a department scope that ended up with no departments.
    return false()


def build_owner_condition(
    db: Session,
    actor_id: int,
    module: str | DataModule,
    owner_column: ColumnElement,
    resolver: ScopeResolver | None = None,
) -> OwnerCondition:
    """
    Resolve `actor_id`'s scope for `module` and express it over `owner_column`.

    Pass the request's `resolver` to share its memoized decisions.
    """

    resolver = resolver or ScopeResolver(db)
    scope = resolver.resolve(actor_id, module)
    return OwnerCondition(scope=scope, condition=scope_to_condition(scope, actor_id, owner_column))


def apply_owner_condition(stmt: Select, owner_condition: OwnerCondition) -> Select:
    if owner_condition.condition is None:
        return stmt
    return stmt.where(owner_condition.condition)
