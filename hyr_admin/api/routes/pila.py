"""PILA social security sheets."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hyr_admin.db.dependencies import get_db_session
from hyr_admin.models.entities import PilaStatus
from hyr_admin.services.pila_service import PilaService

router = APIRouter(prefix="/pila", tags=["pila"])


class PilaGeneratePayload(BaseModel):
    period: str = Field(min_length=1, max_length=16)


class PilaStatusPayload(BaseModel):
    status: PilaStatus


def _pila_service(db: Session) -> PilaService:
    return PilaService(db)


@router.get("/submissions")
def list_submissions(db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _pila_service(db)
    return {
        "items": [
            service.serialize_submission(submission, include_rows=False) for submission in service.list_submissions()
        ]
    }


@router.post("/submissions", status_code=status.HTTP_201_CREATED)
def generate_submission(payload: PilaGeneratePayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _pila_service(db)
    return service.serialize_submission(service.generate(payload.period))


@router.get("/submissions/{period}")
def get_submission(period: str, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _pila_service(db)
    return service.serialize_submission(service.get_submission(period))


@router.get("/submissions/{period}/download")
def download_submission(
    period: str,
    format: str = Query(default="csv"),
    db: Session = Depends(get_db_session),
) -> Response:
    exported = _pila_service(db).download(period, format_name=format)
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )


@router.put("/submissions/{period}/status")
def update_submission_status(
    period: str,
    payload: PilaStatusPayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _pila_service(db)
    return service.serialize_submission(service.update_status(period, payload.status))


@router.delete("/submissions/{period}", status_code=status.HTTP_204_NO_CONTENT)
def delete_submission(period: str, db: Session = Depends(get_db_session)) -> Response:
    _pila_service(db).delete_submission(period)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
