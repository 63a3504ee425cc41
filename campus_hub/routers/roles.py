from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from campus_hub.audit import AuditActor, SqlAuditSink
from campus_hub.data_scope.store import get_role_data_scopes, set_role_data_scopes
from campus_hub.db.session import SessionLocal, get_db
from campus_hub.models.security import User
from campus_hub.schemas.data_scope import RoleDataScopesOut, SetRoleDataScopesIn
from campus_hub.security.dependencies import get_current_user

router = APIRouter(prefix="/roles", tags=["roles"])


def get_audit_sink() -> SqlAuditSink:
    return SqlAuditSink(SessionLocal)


@router.get("/{role_id}/data-scopes", response_model=RoleDataScopesOut)
def read_role_data_scopes(role_id: int, db: Session = Depends(get_db)) -> RoleDataScopesOut:
    return RoleDataScopesOut.from_scopes(get_role_data_scopes(db, role_id))


@router.put("/{role_id}/data-scopes", response_model=RoleDataScopesOut)
def replace_role_data_scopes(
    role_id: int,
    body: SetRoleDataScopesIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    audit_sink: SqlAuditSink = Depends(get_audit_sink),
) -> RoleDataScopesOut:
    scopes = set_role_data_scopes(
        db,
        role_id,
        [item.to_item() for item in body.items],
        actor=AuditActor(user_id=user.id, email=user.email),
        audit_sink=audit_sink,
        reason=body.reason,
    )
    return RoleDataScopesOut.from_scopes(scopes)
