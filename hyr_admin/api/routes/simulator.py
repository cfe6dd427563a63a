"""Cost simulator endpoints."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hyr_admin.db.dependencies import get_db_session
from hyr_admin.services.cost_estimator import EstimateItem
from hyr_admin.services.project_service import ProjectService
from hyr_admin.services.simulator_service import (
    ConvertData,
    EstimateRequestData,
    EstimationCreateData,
    SimulatorService,
)

router = APIRouter(prefix="/simulator", tags=["simulator"])


class EstimateItemPayload(BaseModel):
    category: str = Field(min_length=1, max_length=32)
    quantity: Decimal = Field(gt=0)
    subcategory: str | None = Field(default=None, max_length=64)
    name: str | None = Field(default=None, max_length=255)
    unit: str | None = Field(default=None, max_length=32)
    unit_cost: Decimal | None = Field(default=None, ge=0)


class EstimatePayload(BaseModel):
    template_type: str = Field(min_length=1, max_length=32)
    items: list[EstimateItemPayload] = Field(default_factory=list)
    duration_days: int = Field(default=30, ge=1, le=3650)
    apply_benefits: bool = True
    factors: dict[str, Decimal] | None = None

    def to_request(self) -> EstimateRequestData:
        return EstimateRequestData(
            template_type=self.template_type,
            items=[EstimateItem(**item.model_dump()) for item in self.items],
            duration_days=self.duration_days,
            apply_benefits=self.apply_benefits,
            factors=dict(self.factors) if self.factors else None,
        )


class EstimationCreatePayload(EstimatePayload):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    client_id: UUID | None = None


class ConvertPayload(BaseModel):
    code: str = Field(min_length=1, max_length=64)
    name: str | None = Field(default=None, min_length=1, max_length=255)
    client_id: UUID | None = None
    description: str | None = Field(default=None, max_length=2000)
    location: str | None = Field(default=None, max_length=255)
    start_date: date | None = None
    end_date: date | None = None


def _simulator_service(db: Session) -> SimulatorService:
    return SimulatorService(db)


@router.get("/templates")
def list_templates() -> dict[str, object]:
    return SimulatorService.templates()


@router.get("/presets/{template_type}")
def list_presets(template_type: str) -> dict[str, list[object]]:
    return {"items": SimulatorService.presets(template_type)}


@router.post("/calculate")
def calculate(payload: EstimatePayload) -> dict[str, object]:
    return SimulatorService.calculate(payload.to_request()).as_dict()


@router.get("/estimations")
def list_estimations(db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _simulator_service(db)
    return {"items": [service.serialize_estimation(row) for row in service.list_estimations()]}


@router.post("/estimations", status_code=status.HTTP_201_CREATED)
def create_estimation(payload: EstimationCreatePayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _simulator_service(db)
    estimation = service.create_estimation(
        EstimationCreateData(
            name=payload.name,
            request=payload.to_request(),
            description=payload.description,
            client_id=payload.client_id,
        )
    )
    return service.serialize_estimation(estimation)


@router.get("/estimations/{estimation_id}")
def get_estimation(estimation_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _simulator_service(db)
    return service.serialize_estimation(service.get_estimation(estimation_id))


@router.delete("/estimations/{estimation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_estimation(estimation_id: UUID, db: Session = Depends(get_db_session)) -> Response:
    _simulator_service(db).delete_estimation(estimation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/estimations/{estimation_id}/duplicate", status_code=status.HTTP_201_CREATED)
def duplicate_estimation(estimation_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _simulator_service(db)
    return service.serialize_estimation(service.duplicate_estimation(estimation_id))


@router.post("/estimations/{estimation_id}/convert", status_code=status.HTTP_201_CREATED)
def convert_estimation(
    estimation_id: UUID,
    payload: ConvertPayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    project = _simulator_service(db).convert_to_project(estimation_id, ConvertData(**payload.model_dump()))
    return ProjectService.serialize_project(project)
