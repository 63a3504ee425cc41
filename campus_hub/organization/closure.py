"""
Department hierarchy closure.

`department_closure` holds (ancestor, descendant) for every department and
itself plus every descendant. Expansion is a single indexed lookup.
"""

from __future__ import annotations

from collections.abc import Set
import logging

from sqlalchemy import delete, insert, select
from sqlalchemy.orm import Session

from campus_hub.models.organization import Department, DepartmentClosure

logger = logging.getLogger(__name__)


def expand_to_descendants(db: Session, department_ids: Set[int]) -> frozenset[int]:
    """Return `department_ids` plus every descendant; unknown ids vanish."""

    if not department_ids:
        return frozenset()
    rows = db.scalars(
        select(DepartmentClosure.descendant_id).where(DepartmentClosure.ancestor_id.in_(sorted(department_ids)))
    )
    return frozenset(rows)


def rebuild_department_closure(db: Session) -> int:
    """
    Recompute the closure from `departments.parent_id`.

    Parents missing from the table are treated as roots. A parent cycle stops
    the walk at the first repeated node instead of looping. Returns the number
    of closure rows written; the caller owns the transaction.
    """

    parents = dict(db.execute(select(Department.id, Department.parent_id)).all())

    rows: list[dict[str, int]] = []
    for department_id in parents:
        seen: set[int] = set()
        current: int | None = department_id
        depth = 0
        while current is not None and current in parents and current not in seen:
            seen.add(current)
            rows.append({"ancestor_id": current, "descendant_id": department_id, "depth": depth})
            current = parents[current]
            depth += 1
        if current is not None and current in seen:
            logger.warning("Department parent cycle detected at department_id=%s", current)

    db.execute(delete(DepartmentClosure))
    if rows:
        db.execute(insert(DepartmentClosure), rows)
    logger.info("Rebuilt department closure departments=%s rows=%s", len(parents), len(rows))
    return len(rows)
