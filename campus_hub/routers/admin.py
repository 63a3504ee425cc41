from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from campus_hub.db.session import get_db
from campus_hub.models.security import User
from campus_hub.schemas.security import UserOut

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/users", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db)) -> list[User]:
    # Scoped by the "user" module via config; rows outside the scope are absent.
    stmt = select(User).options(selectinload(User.departments), selectinload(User.roles)).order_by(User.id)
    return list(db.scalars(stmt).all())
