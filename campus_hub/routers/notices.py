from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_hub.data_scope.types import DataModule
from campus_hub.db.session import get_db
from campus_hub.models.notices import Notice
from campus_hub.schemas.data_scope import NoticeOut
from campus_hub.security.decorators import data_scope

router = APIRouter(prefix="/notices", tags=["notices"])


@router.get("", response_model=list[NoticeOut])
@data_scope(DataModule.NOTICE)
def list_notices(db: Session = Depends(get_db)) -> list[Notice]:
    # Filters are applied transparently via campus_hub/db/filters.py.
    return list(db.scalars(select(Notice).order_by(Notice.id)).all())


@router.get("/{notice_id}", response_model=NoticeOut)
@data_scope(DataModule.NOTICE)
def get_notice(notice_id: int, db: Session = Depends(get_db)) -> Notice:
    notice = db.scalars(select(Notice).where(Notice.id == notice_id)).first()
    if notice is None:
        # Out-of-scope rows look exactly like missing ones.
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notice not found")
    return notice
