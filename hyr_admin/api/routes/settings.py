"""Key/value business settings."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hyr_admin.db.dependencies import get_db_session
from hyr_admin.services.settings_service import SettingsService

router = APIRouter(prefix="/settings", tags=["settings"])


class SettingPutPayload(BaseModel):
    value: object
    category: str | None = Field(default=None, min_length=1, max_length=64)
    description: str | None = Field(default=None, max_length=500)


def _settings_service(db: Session) -> SettingsService:
    return SettingsService(db)


@router.get("")
def list_settings(
    category: str | None = Query(default=None, max_length=64),
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    return {"items": _settings_service(db).list_settings(category)}


@router.get("/{key}")
def get_setting(key: str, db: Session = Depends(get_db_session)) -> dict[str, object]:
    return _settings_service(db).get_setting(key)


@router.put("/{key}")
def put_setting(key: str, payload: SettingPutPayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _settings_service(db)
    setting = service.put_setting(
        key,
        value=payload.value,
        category=payload.category,
        description=payload.description,
    )
    return service.serialize_setting(setting)


@router.delete("/{key}", status_code=status.HTTP_204_NO_CONTENT)
def delete_setting(key: str, db: Session = Depends(get_db_session)) -> Response:
    _settings_service(db).delete_setting(key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{key}/reset")
def reset_setting(key: str, db: Session = Depends(get_db_session)) -> dict[str, object]:
    return _settings_service(db).reset_setting(key)
