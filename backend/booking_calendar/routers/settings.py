from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..deps import get_current_entity
from ..schemas.settings import SettingsIn, SettingsOut
from ..services import settings_store

router = APIRouter(prefix="/availability/me/settings", tags=["settings"])


@router.get("", response_model=SettingsOut)
def get_settings(db: Session = Depends(get_db), me: str = Depends(get_current_entity)):
    # senza record salvato tornano i default di sistema (is_default=true)
    return settings_store.effective_settings(db, me)


@router.put("", response_model=SettingsOut)
def put_settings(payload: SettingsIn, db: Session = Depends(get_db), me: str = Depends(get_current_entity)):
    settings_store.upsert_settings(db, me, payload.model_dump(exclude_unset=True))
    return settings_store.effective_settings(db, me)
