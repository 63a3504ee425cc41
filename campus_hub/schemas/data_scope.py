from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from campus_hub.data_scope.store import DataScopeItem, RoleDataScopes
from campus_hub.data_scope.types import ResolvedScope, ScopeType


class DataScopeItemIn(BaseModel):
    module: str = Field(min_length=1, max_length=64)
    scope_type: ScopeType
    department_ids: list[int] = Field(default_factory=list)

    def to_item(self) -> DataScopeItem:
        return DataScopeItem(
            module=self.module,
            scope_type=self.scope_type,
            department_ids=tuple(self.department_ids),
        )


class SetRoleDataScopesIn(BaseModel):
    items: list[DataScopeItemIn] = Field(max_length=200)
    reason: str | None = Field(default=None, max_length=500)


class DataScopeItemOut(BaseModel):
    module: str
    scope_type: ScopeType
    department_ids: list[int]


class RoleDataScopesOut(BaseModel):
    role_id: int
    items: list[DataScopeItemOut]

    @classmethod
    def from_scopes(cls, scopes: RoleDataScopes) -> RoleDataScopesOut:
        return cls(
            role_id=scopes.role_id,
            items=[
                DataScopeItemOut(
                    module=item.module,
                    scope_type=item.scope_type,
                    department_ids=list(item.department_ids),
                )
                for item in scopes.items
            ],
        )


class ResolvedScopeOut(BaseModel):
    module: str
    scope_type: ScopeType
    department_ids: list[int] | None = None

    @classmethod
    def from_scope(cls, module: str, scope: ResolvedScope) -> ResolvedScopeOut:
        payload = scope.to_dict()
        return cls(module=module, scope_type=scope.scope_type, department_ids=payload.get("department_ids"))


class NoticeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    body: str | None
    created_by: int
    created_at: datetime
