from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_hub.data_scope.store import seed_privileged_default_grants
from campus_hub.data_scope.types import DataModule, ScopeType
from campus_hub.db.base import Base
from campus_hub.db.session import SessionLocal, engine
from campus_hub.models import audit as _audit  # noqa: F401  (register audit_logs table)
from campus_hub.models.data_scope import RoleDataScope, RoleDataScopeDepartment
from campus_hub.models.notices import Notice
from campus_hub.models.organization import Department
from campus_hub.models.security import Role, User
from campus_hub.organization.closure import rebuild_department_closure

logger = logging.getLogger(__name__)


def init_db(seed: bool = True) -> None:
    """
    Create tables and, optionally, seed demo data.

    The seed is small and deterministic so the scoping behavior can be tried
    without additional setup.
    """

    Base.metadata.create_all(bind=engine)

    if not seed:
        return
    with SessionLocal() as db:
        if _has_seed_data(db):
            return
        seed_demo_data(db)
        logger.info("Seeded demo departments, roles, users and notices")


def _has_seed_data(db: Session) -> bool:
    return db.execute(select(Department.id).limit(1)).first() is not None


def seed_demo_data(db: Session) -> None:
    """Demo tree, roles, users, grants and notices; commits."""

    # Department tree:
    #   Campus
    #   ├── Academic Affairs
    #   │   └── Computer Science
    #   └── Student Affairs
    campus = Department(name="Campus", sort=0)
    db.add(campus)
    db.flush()
    academic = Department(name="Academic Affairs", parent_id=campus.id, sort=1)
    student = Department(name="Student Affairs", parent_id=campus.id, sort=2)
    db.add_all([academic, student])
    db.flush()
    cs = Department(name="Computer Science", parent_id=academic.id, sort=1)
    db.add(cs)
    db.flush()
    rebuild_department_closure(db)

    # Roles
    super_admin = Role(code="super_admin", name="Super administrator")
    admin = Role(code="admin", name="Administrator")
    lead = Role(code="department_lead", name="Department lead")
    librarian = Role(code="librarian", name="Librarian")
    member = Role(code="member", name="Member")
    db.add_all([super_admin, admin, lead, librarian, member])
    db.flush()

    # Users
    u1 = User(username="alice_admin", email="alice.admin@example.edu", is_active=True)
    u1.roles.append(admin)
    u1.departments.append(campus)

    u2 = User(username="lee_lead", email="lee.lead@example.edu", is_active=True)
    u2.roles.extend([lead, member])
    u2.departments.append(academic)

    u3 = User(username="cory_cs", email="cory.cs@example.edu", is_active=True)
    u3.roles.append(member)
    u3.departments.append(cs)

    u4 = User(username="sam_student", email="sam.student@example.edu", is_active=True)
    u4.roles.append(librarian)
    u4.departments.append(student)

    db.add_all([u1, u2, u3, u4])
    db.flush()

    # Explicit grants: privileged roles see everything in every known module.
    for role in (super_admin, admin):
        seed_privileged_default_grants(db, role, [m.value for m in DataModule])

    db.add_all(
        [
            RoleDataScope(role_id=lead.id, module=DataModule.NOTICE.value, scope_type=ScopeType.DEPT_AND_CHILD),
            RoleDataScope(role_id=lead.id, module=DataModule.USER.value, scope_type=ScopeType.DEPT_AND_CHILD),
            RoleDataScope(role_id=member.id, module=DataModule.NOTICE.value, scope_type=ScopeType.SELF),
            RoleDataScope(role_id=librarian.id, module=DataModule.LIBRARY.value, scope_type=ScopeType.CUSTOM),
            RoleDataScope(role_id=librarian.id, module=DataModule.NOTICE.value, scope_type=ScopeType.DEPT),
        ]
    )
    db.flush()
    db.add(RoleDataScopeDepartment(role_id=librarian.id, module=DataModule.LIBRARY.value, department_id=academic.id))

    db.add_all(
        [
            Notice(title="Campus closure for maintenance", body="Saturday, all buildings.", created_by=u1.id),
            Notice(title="Academic calendar update", body="Exam week moved.", created_by=u2.id),
            Notice(title="CS lab hours", body="Lab open until 22:00.", created_by=u3.id),
            Notice(title="Club fair", body="Student Affairs hosts the fair.", created_by=u4.id),
        ]
    )

    db.commit()
