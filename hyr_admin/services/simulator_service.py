"""Cost simulator: ad-hoc estimates, saved estimations and conversion to projects."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hyr_admin.models.entities import (
    BudgetItem,
    CostCategory,
    CostEstimation,
    EstimationStatus,
    Project,
    ProjectType,
    TemplateType,
)
from hyr_admin.repositories.office_repository import OfficeRepository
from hyr_admin.repositories.project_repository import ProjectRepository
from hyr_admin.services.audit_service import record_audit_event
from hyr_admin.services.cost_estimator import (
    PRESETS,
    CalculationFactors,
    Estimate,
    EstimateError,
    EstimateItem,
    calculate_estimate,
    serialize_templates,
)
from hyr_admin.services.project_service import ProjectCreateData, ProjectService

logger = logging.getLogger(__name__)


def _estimate_items(raw_items: list[dict[str, object]]) -> list[EstimateItem]:
    items = []
    for raw in raw_items:
        unit_cost = raw.get("unit_cost")
        items.append(
            EstimateItem(
                category=str(raw.get("category", "")),
                quantity=Decimal(str(raw.get("quantity", "0"))),
                subcategory=raw.get("subcategory"),
                name=raw.get("name"),
                unit=raw.get("unit"),
                unit_cost=None if unit_cost is None else Decimal(str(unit_cost)),
            )
        )
    return items


def _item_payload(item: EstimateItem) -> dict[str, object]:
    return {
        "category": item.category,
        "subcategory": item.subcategory,
        "name": item.name,
        "unit": item.unit,
        "quantity": str(item.quantity),
        "unit_cost": None if item.unit_cost is None else str(item.unit_cost),
    }


@dataclass(slots=True)
class EstimateRequestData:
    template_type: str
    items: list[EstimateItem] = field(default_factory=list)
    duration_days: int = 30
    apply_benefits: bool = True
    factors: dict[str, object] | None = None


@dataclass(slots=True)
class EstimationCreateData:
    name: str
    request: EstimateRequestData
    description: str | None = None
    client_id: UUID | None = None


@dataclass(slots=True)
class ConvertData:
    code: str
    name: str | None = None
    client_id: UUID | None = None
    description: str | None = None
    location: str | None = None
    start_date: date | None = None
    end_date: date | None = None


class SimulatorService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = OfficeRepository(db)
        self.projects = ProjectRepository(db)

    @staticmethod
    def serialize_estimation(estimation: CostEstimation) -> dict[str, object]:
        return {
            "id": str(estimation.id),
            "name": estimation.name,
            "description": estimation.description,
            "template_type": estimation.template_type.value,
            "client_id": str(estimation.client_id) if estimation.client_id else None,
            "duration_days": estimation.duration_days,
            "apply_benefits": estimation.apply_benefits,
            "items": list(estimation.items or []),
            "factors": dict(estimation.factors or {}),
            "breakdown": dict(estimation.breakdown or {}),
            "total_cost": str(estimation.total_cost),
            "status": estimation.status.value,
            "project_id": str(estimation.project_id) if estimation.project_id else None,
            "created_at": estimation.created_at.isoformat(),
            "updated_at": estimation.updated_at.isoformat(),
        }

    # ---------- Pure calculations ----------
    @staticmethod
    def templates() -> dict[str, object]:
        return serialize_templates()

    @staticmethod
    def presets(template_type: str) -> list[dict[str, object]]:
        presets = PRESETS.get(template_type)
        if presets is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Unknown template type '{template_type}'.",
            )
        return presets

    @staticmethod
    def calculate(data: EstimateRequestData) -> Estimate:
        try:
            return calculate_estimate(
                data.template_type,
                data.items,
                duration_days=data.duration_days,
                apply_benefits=data.apply_benefits,
                factors=CalculationFactors.from_overrides(data.factors),
            )
        except (EstimateError, ArithmeticError) as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    # ---------- Saved estimations ----------
    def list_estimations(self) -> list[CostEstimation]:
        return self.repo.list_estimations()

    def get_estimation(self, estimation_id: UUID) -> CostEstimation:
        estimation = self.repo.get_estimation(estimation_id)
        if estimation is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Estimation not found.")
        return estimation

    def create_estimation(self, data: EstimationCreateData) -> CostEstimation:
        if data.client_id is not None and self.projects.get_client(data.client_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found.")
        estimate = self.calculate(data.request)
        now = datetime.utcnow()
        estimation = CostEstimation(
            name=data.name.strip(),
            description=data.description,
            template_type=TemplateType(data.request.template_type),
            client_id=data.client_id,
            duration_days=data.request.duration_days,
            apply_benefits=data.request.apply_benefits,
            items=[_item_payload(item) for item in data.request.items],
            factors=estimate.factors.as_dict(),
            breakdown=estimate.as_dict(),
            total_cost=estimate.total,
            status=EstimationStatus.DRAFT,
            created_at=now,
            updated_at=now,
        )
        self.repo.add_estimation(estimation)
        self.db.commit()
        self.db.refresh(estimation)
        return estimation

    def delete_estimation(self, estimation_id: UUID) -> None:
        estimation = self.get_estimation(estimation_id)
        self.repo.delete_estimation(estimation)
        self.db.commit()

    def duplicate_estimation(self, estimation_id: UUID) -> CostEstimation:
        source = self.get_estimation(estimation_id)
        now = datetime.utcnow()
        copy = CostEstimation(
            name=f"{source.name} - Copia",
            description=source.description,
            template_type=source.template_type,
            client_id=source.client_id,
            duration_days=source.duration_days,
            apply_benefits=source.apply_benefits,
            items=list(source.items or []),
            factors=dict(source.factors or {}),
            breakdown=dict(source.breakdown or {}),
            total_cost=source.total_cost,
            status=EstimationStatus.DRAFT,
            created_at=now,
            updated_at=now,
        )
        self.repo.add_estimation(copy)
        self.db.commit()
        self.db.refresh(copy)
        return copy

    def convert_to_project(self, estimation_id: UUID, data: ConvertData) -> Project:
        """Create a planned project whose budget mirrors the saved estimate."""

        estimation = self.get_estimation(estimation_id)
        if estimation.status == EstimationStatus.CONVERTED:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Estimation was already converted to a project.",
            )

        estimate = self.calculate(
            EstimateRequestData(
                template_type=estimation.template_type.value,
                items=_estimate_items(list(estimation.items or [])),
                duration_days=estimation.duration_days,
                apply_benefits=estimation.apply_benefits,
                factors=dict(estimation.factors or {}),
            )
        )

        project_service = ProjectService(self.db)
        try:
            project = project_service.create_project(
                ProjectCreateData(
                    code=data.code,
                    name=data.name or estimation.name,
                    client_id=data.client_id or estimation.client_id,
                    description=data.description or estimation.description,
                    location=data.location,
                    project_type=ProjectType(estimation.template_type.value),
                    start_date=data.start_date,
                    end_date=data.end_date,
                    budget_materials=estimate.materials,
                    budget_labor=estimate.labor,
                    budget_equipment=estimate.equipment,
                    budget_overhead=estimate.overhead_items + estimate.overhead,
                ),
                commit=False,
            )
            now = datetime.utcnow()
            for line in estimate.lines:
                self.projects.add_budget_item(
                    BudgetItem(
                        project_id=project.id,
                        category=CostCategory(line.category),
                        description=line.name,
                        unit=line.unit,
                        quantity=line.quantity,
                        unit_price=line.unit_cost,
                        total=line.total_cost,
                        created_at=now,
                    )
                )
            estimation.status = EstimationStatus.CONVERTED
            estimation.project_id = project.id
            estimation.updated_at = now
            record_audit_event(
                self.db,
                entity_name="cost_estimation",
                entity_id=estimation.id,
                action_type="converted",
                payload={"project_id": str(project.id), "project_code": project.code, "total": str(estimate.total)},
            )
            self.db.commit()
        except HTTPException:
            self.db.rollback()
            raise
        except IntegrityError as exc:
            self.db.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Project code already exists.") from exc

        logger.info(
            "estimation converted",
            extra={"entity_id": str(estimation.id), "project_id": str(project.id)},
        )
        self.db.refresh(project)
        return project
