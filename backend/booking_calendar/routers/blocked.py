from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ..database import get_db
from ..deps import get_current_entity
from ..schemas.blocked import BlockRangeIn, BlockRangeUpdateIn, BlockedRangeOut
from ..services import blocked_ranges

router = APIRouter(prefix="/availability/me/blocked", tags=["blocked"])


@router.get("", response_model=List[BlockedRangeOut])
def list_blocked(
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    me: str = Depends(get_current_entity),
):
    return blocked_ranges.list_ranges(db, me, include_inactive=include_inactive)


@router.post("", response_model=BlockedRangeOut, status_code=201)
def block(payload: BlockRangeIn, db: Session = Depends(get_db), me: str = Depends(get_current_entity)):
    return blocked_ranges.block_range(
        db, me, payload.start_date, payload.end_date, payload.reason, payload.notes
    )


@router.patch("/{range_id}", response_model=BlockedRangeOut)
def update_blocked(
    range_id: int,
    payload: BlockRangeUpdateIn,
    db: Session = Depends(get_db),
    me: str = Depends(get_current_entity),
):
    return blocked_ranges.update_range(db, me, range_id, payload.model_dump(exclude_unset=True))


@router.delete("/{range_id}")
def unblock(range_id: int, db: Session = Depends(get_db), me: str = Depends(get_current_entity)):
    blocked_ranges.unblock_range(db, me, range_id)
    return {"ok": True}
