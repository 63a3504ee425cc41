"""
Resolve an actor's effective data scope for one module.

The resolver only reads. One instance is meant to live for one request: it
memoizes results per (actor, module) so repeated lookups in the same request
cost nothing.
"""

from __future__ import annotations

from collections.abc import Iterable
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_hub.data_scope.merge import merge_scope_types
from campus_hub.data_scope.types import (
    DEFAULT_PRIVILEGED_ROLE_CODES,
    DataModule,
    ResolvedScope,
    ScopeType,
    validate_module,
)
from campus_hub.models.data_scope import RoleDataScope, RoleDataScopeDepartment
from campus_hub.models.organization import user_departments
from campus_hub.models.security import Role, user_roles
from campus_hub.organization.closure import expand_to_descendants

logger = logging.getLogger(__name__)


def get_user_role_ids(db: Session, user_id: int) -> list[int]:
    return list(db.scalars(select(user_roles.c.role_id).where(user_roles.c.user_id == user_id)))


def get_user_role_codes(db: Session, user_id: int) -> list[str]:
    stmt = (
        select(Role.code)
        .join(user_roles, user_roles.c.role_id == Role.id)
        .where(user_roles.c.user_id == user_id)
        .order_by(Role.code)
    )
    return list(db.scalars(stmt))


def get_user_department_ids(db: Session, user_id: int) -> frozenset[int]:
    return frozenset(
        db.scalars(select(user_departments.c.department_id).where(user_departments.c.user_id == user_id))
    )


class ScopeResolver:
    """
    Decide which rows of a module an actor may touch.

    Resolution steps:
    1. Actor holds no role -> SELF.
    2. No held role configures the module -> ALL for privileged role codes,
       SELF otherwise.
    3. Otherwise merge the configured grants (see `merge_scope_types`),
       loading CUSTOM departments and the actor's own departments only when a
       grant needs them.
    """

    def __init__(
        self,
        db: Session,
        privileged_role_codes: Iterable[str] = DEFAULT_PRIVILEGED_ROLE_CODES,
    ) -> None:
        self._db = db
        self._privileged_role_codes = frozenset(privileged_role_codes)
        self._cache: dict[tuple[int, str], ResolvedScope] = {}

    def resolve(self, actor_id: int, module: str | DataModule) -> ResolvedScope:
        # Reject malformed names before any query runs.
        module_name = validate_module(module)

        key = (actor_id, module_name)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        scope = self._resolve_uncached(actor_id, module_name)
        self._cache[key] = scope
        logger.debug("Data scope resolved actor_id=%s module=%s scope=%s", actor_id, module_name, scope.to_dict())
        return scope

    def _resolve_uncached(self, actor_id: int, module: str) -> ResolvedScope:
        db = self._db

        role_ids = get_user_role_ids(db, actor_id)
        if not role_ids:
            return ResolvedScope.self_only()

        grants = db.execute(
            select(RoleDataScope.role_id, RoleDataScope.scope_type).where(
                RoleDataScope.role_id.in_(role_ids),
                RoleDataScope.module == module,
            )
        ).all()

        if not grants:
            role_codes = set(get_user_role_codes(db, actor_id))
            if role_codes & self._privileged_role_codes:
                logger.debug(
                    "Module unconfigured, privileged role fallback actor_id=%s module=%s roles=%s",
                    actor_id,
                    module,
                    sorted(role_codes),
                )
                return ResolvedScope.all()
            return ResolvedScope.self_only()

        scope_types = {scope_type for _role_id, scope_type in grants}

        custom_department_ids: frozenset[int] = frozenset()
        if ScopeType.CUSTOM in scope_types:
            custom_role_ids = [role_id for role_id, scope_type in grants if scope_type is ScopeType.CUSTOM]
            custom_department_ids = frozenset(
                db.scalars(
                    select(RoleDataScopeDepartment.department_id).where(
                        RoleDataScopeDepartment.role_id.in_(custom_role_ids),
                        RoleDataScopeDepartment.module == module,
                    )
                )
            )

        user_department_ids: frozenset[int] = frozenset()
        if scope_types & {ScopeType.DEPT, ScopeType.DEPT_AND_CHILD}:
            user_department_ids = get_user_department_ids(db, actor_id)

        return merge_scope_types(
            scope_types,
            custom_department_ids,
            user_department_ids,
            lambda ids: expand_to_descendants(db, ids),
        )


def resolve_data_scope(db: Session, actor_id: int, module: str | DataModule) -> ResolvedScope:
    """One-shot resolution without memoization across calls."""
    return ScopeResolver(db).resolve(actor_id, module)
