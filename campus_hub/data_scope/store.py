"""
Role data-scope store.

A role's configuration is always replaced as a whole: callers submit the full
list of (module, scope type, departments) items and the previous rows are
deleted and re-inserted in one transaction.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
import logging
from typing import Any

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from campus_hub.audit import AuditActor, AuditEntry, AuditSink, record_audit
from campus_hub.data_scope.types import ScopeType, normalize_module
from campus_hub.errors import InternalError, NotFoundError, ValidationError
from campus_hub.models.data_scope import RoleDataScope, RoleDataScopeDepartment
from campus_hub.models.organization import Department
from campus_hub.models.security import Role

logger = logging.getLogger(__name__)

AUDIT_ACTION = "role.data_scopes.update"


@dataclass(frozen=True)
class DataScopeItem:
    module: str
    scope_type: ScopeType
    department_ids: tuple[int, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "module": self.module,
            "scope_type": self.scope_type.value,
            "department_ids": list(self.department_ids),
        }


@dataclass(frozen=True)
class RoleDataScopes:
    role_id: int
    items: list[DataScopeItem] = field(default_factory=list)


def _ensure_role_exists(db: Session, role_id: int) -> None:
    if db.scalar(select(Role.id).where(Role.id == role_id)) is None:
        raise NotFoundError("Role not found", {"role_id": role_id})


def get_role_data_scopes(db: Session, role_id: int) -> RoleDataScopes:
    _ensure_role_exists(db, role_id)

    scope_rows = db.execute(
        select(RoleDataScope.module, RoleDataScope.scope_type)
        .where(RoleDataScope.role_id == role_id)
        .order_by(RoleDataScope.module)
    ).all()

    custom_modules = [module for module, scope_type in scope_rows if scope_type is ScopeType.CUSTOM]
    departments_by_module: dict[str, list[int]] = {}
    if custom_modules:
        dept_rows = db.execute(
            select(RoleDataScopeDepartment.module, RoleDataScopeDepartment.department_id)
            .where(
                RoleDataScopeDepartment.role_id == role_id,
                RoleDataScopeDepartment.module.in_(custom_modules),
            )
            .order_by(RoleDataScopeDepartment.department_id)
        ).all()
        for module, department_id in dept_rows:
            departments_by_module.setdefault(module, []).append(department_id)

    return RoleDataScopes(
        role_id=role_id,
        items=[
            DataScopeItem(
                module=module,
                scope_type=scope_type,
                department_ids=tuple(departments_by_module.get(module, ())),
            )
            for module, scope_type in scope_rows
        ],
    )


def _normalize_items(items: Sequence[DataScopeItem]) -> list[DataScopeItem]:
    normalized: list[DataScopeItem] = []
    for item in items:
        scope_type = ScopeType(item.scope_type)
        department_ids: tuple[int, ...] = ()
        if scope_type is ScopeType.CUSTOM:
            # Order-preserving de-duplication.
            department_ids = tuple(dict.fromkeys(item.department_ids))
        normalized.append(
            DataScopeItem(
                module=normalize_module(item.module),
                scope_type=scope_type,
                department_ids=department_ids,
            )
        )

    counts = Counter(item.module for item in normalized)
    duplicates = sorted(module for module, count in counts.items() if count > 1)
    if duplicates:
        raise ValidationError("items.module must be unique", {"duplicates": duplicates})

    for item in normalized:
        if item.scope_type is ScopeType.CUSTOM and not item.department_ids:
            raise ValidationError("CUSTOM scope requires department_ids", {"module": item.module})

    return normalized


def _ensure_departments_exist(db: Session, items: Sequence[DataScopeItem]) -> None:
    referenced: set[int] = set()
    for item in items:
        if item.scope_type is ScopeType.CUSTOM:
            referenced.update(item.department_ids)
    if not referenced:
        return

    found = set(db.scalars(select(Department.id).where(Department.id.in_(sorted(referenced)))))
    missing = sorted(referenced - found)
    if missing:
        raise ValidationError("Unknown department_ids", {"missing": missing})


def set_role_data_scopes(
    db: Session,
    role_id: int,
    items: Sequence[DataScopeItem],
    actor: AuditActor,
    audit_sink: AuditSink,
    reason: str | None = None,
) -> RoleDataScopes:
    """
    Replace every data-scope grant of `role_id` with `items`.

    All validation happens before anything is written. The delete and insert
    are committed together; on a persistence error the session is rolled
    back, a failed audit entry carrying the attempted diff is recorded and
    `InternalError` is raised.
    """

    _ensure_role_exists(db, role_id)
    normalized = _normalize_items(items)
    _ensure_departments_exist(db, normalized)

    before = get_role_data_scopes(db, role_id)
    diff = {
        "before": [item.to_dict() for item in before.items],
        "after": [item.to_dict() for item in normalized],
    }

    try:
        db.execute(delete(RoleDataScopeDepartment).where(RoleDataScopeDepartment.role_id == role_id))
        db.execute(delete(RoleDataScope).where(RoleDataScope.role_id == role_id))

        scope_rows = [
            {"role_id": role_id, "module": item.module, "scope_type": item.scope_type} for item in normalized
        ]
        department_rows = [
            {"role_id": role_id, "module": item.module, "department_id": department_id}
            for item in normalized
            for department_id in item.department_ids
        ]
        # Parent rows first so the composite foreign key is satisfied.
        if scope_rows:
            db.execute(insert(RoleDataScope), scope_rows)
        if department_rows:
            db.execute(insert(RoleDataScopeDepartment), department_rows)
        db.flush()
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Replacing data scopes failed role_id=%s: %s", role_id, exc)
        record_audit(
            audit_sink,
            AuditEntry(
                actor=actor,
                action=AUDIT_ACTION,
                target_type="role",
                target_id=str(role_id),
                success=False,
                error_code="INTERNAL_ERROR",
                reason=reason,
                diff=diff,
            ),
        )
        raise InternalError("Failed to save role data scopes") from exc

    logger.info(
        "Replaced data scopes role_id=%s actor_id=%s modules=%s",
        role_id,
        actor.user_id,
        [item.module for item in normalized],
    )
    record_audit(
        audit_sink,
        AuditEntry(
            actor=actor,
            action=AUDIT_ACTION,
            target_type="role",
            target_id=str(role_id),
            success=True,
            reason=reason,
            diff=diff,
        ),
    )
    return get_role_data_scopes(db, role_id)


def seed_privileged_default_grants(db: Session, role: Role, modules: Sequence[str]) -> None:
    """
    Give `role` an explicit ALL grant for each of `modules`.

    Only adds rows for modules the role does not configure yet; the caller
    owns the transaction.
    """

    configured = set(db.scalars(select(RoleDataScope.module).where(RoleDataScope.role_id == role.id)))
    for module in modules:
        name = normalize_module(module)
        if name in configured:
            continue
        db.add(RoleDataScope(role_id=role.id, module=name, scope_type=ScopeType.ALL))
    db.flush()
