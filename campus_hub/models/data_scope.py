from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, ForeignKeyConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from campus_hub.data_scope.types import ScopeType
from campus_hub.db.base import Base


class RoleDataScope(Base):
    """One scope grant per (role, module); replaced wholesale per role."""

    __tablename__ = "role_data_scopes"

    role_id: Mapped[int] = mapped_column(ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True, index=True)
    module: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)
    # Persisted lowercase ("dept_and_child"), exposed uppercase.
    scope_type: Mapped[ScopeType] = mapped_column(
        Enum(
            ScopeType,
            name="data_scope_type",
            values_callable=lambda enum_cls: [member.value.lower() for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )


class RoleDataScopeDepartment(Base):
    """Starting department set of a CUSTOM grant, before closure expansion."""

    __tablename__ = "role_data_scope_departments"
    __table_args__ = (
        ForeignKeyConstraint(
            ["role_id", "module"],
            ["role_data_scopes.role_id", "role_data_scopes.module"],
            ondelete="CASCADE",
        ),
    )

    role_id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    module: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)
    department_id: Mapped[int] = mapped_column(
        ForeignKey("departments.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
