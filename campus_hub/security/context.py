from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.sql.elements import ColumnElement

from campus_hub.data_scope.registry import ScopedModel
from campus_hub.data_scope.types import ResolvedScope


@dataclass(frozen=True)
class DataScopeContext:
    """
    Row-level scope of one request.

    Attached to `Session.info["data_scope"]`; `conditions` pairs every scoped
    model of the route's module with its prebuilt owner condition (None when
    the actor sees everything).
    """

    actor_id: int
    module: str
    scope: ResolvedScope
    conditions: tuple[tuple[ScopedModel, ColumnElement[bool] | None], ...] = ()
