from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.orm import Session, with_loader_criteria


@event.listens_for(Session, "do_orm_execute")
def _apply_data_scope_filters(execute_state) -> None:
    """
    Transparent row-level data scoping.

    Keeps query code unchanged:
        db.scalars(select(Notice)).all()
    only returns rows the request's actor may see, because the security
    dependency resolved owner conditions for the route's module up front and
    stored them in `Session.info["data_scope"]`.
    """

    if not execute_state.is_select:
        return

    ctx = execute_state.session.info.get("data_scope")
    if ctx is None:
        return

    options = [
        with_loader_criteria(scoped.model, condition, include_aliases=True)
        for scoped, condition in ctx.conditions
        if condition is not None
    ]
    if options:
        execute_state.statement = execute_state.statement.options(*options)
