"""Stored business settings with built-in defaults."""

from __future__ import annotations

import copy
from datetime import datetime

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hyr_admin.core.config import get_settings
from hyr_admin.models.entities import Setting
from hyr_admin.repositories.office_repository import OfficeRepository
from hyr_admin.services.audit_service import record_audit_event
from hyr_admin.services.payroll_rules import EmployerProfile
from hyr_admin.services.personnel_service import ARL_CLASSES
from hyr_admin.services.time_rules import TimeRuleError, WorkdayRules

WORKDAY_RULES_KEY = "workday_rules"
COMPANY_PROFILE_KEY = "company_profile"


def _default_company_profile() -> dict[str, object]:
    settings = get_settings()
    return {
        "nit": settings.company_nit,
        "name": settings.company_name,
        "is_legal_entity": True,
        "employee_count": 10,
        "qualifies_law_114_1": True,
        "default_arl_risk_class": "V",
    }


# key -> (category, description, factory)
BUILTIN_DEFAULTS = {
    WORKDAY_RULES_KEY: (
        "payroll",
        "Daily legal hours, overtime multiplier, night window and lateness tolerance.",
        lambda: WorkdayRules().to_mapping(),
    ),
    COMPANY_PROFILE_KEY: (
        "company",
        "Employer data used for payroll exemptions and DIAN documents.",
        _default_company_profile,
    ),
}


class SettingsService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = OfficeRepository(db)

    @staticmethod
    def serialize_setting(setting: Setting) -> dict[str, object]:
        return {
            "key": setting.key,
            "value": setting.value,
            "category": setting.category,
            "description": setting.description,
            "is_default": False,
            "updated_at": setting.updated_at.isoformat(),
        }

    @staticmethod
    def serialize_default(key: str) -> dict[str, object]:
        category, description, factory = BUILTIN_DEFAULTS[key]
        return {
            "key": key,
            "value": factory(),
            "category": category,
            "description": description,
            "is_default": True,
            "updated_at": None,
        }

    def list_settings(self, category: str | None = None) -> list[dict[str, object]]:
        stored = {setting.key: setting for setting in self.repo.list_settings()}
        rows: list[dict[str, object]] = [self.serialize_setting(setting) for setting in stored.values()]
        rows.extend(self.serialize_default(key) for key in BUILTIN_DEFAULTS if key not in stored)
        if category:
            rows = [row for row in rows if row["category"] == category]
        return sorted(rows, key=lambda row: (str(row["category"]), str(row["key"])))

    def get_setting(self, key: str) -> dict[str, object]:
        setting = self.repo.get_setting(key)
        if setting is not None:
            return self.serialize_setting(setting)
        if key in BUILTIN_DEFAULTS:
            return self.serialize_default(key)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Setting not found.")

    def get_value(self, key: str) -> object:
        setting = self.repo.get_setting(key)
        if setting is not None:
            return copy.deepcopy(setting.value)
        if key in BUILTIN_DEFAULTS:
            return BUILTIN_DEFAULTS[key][2]()
        return None

    def _validate_value(self, key: str, value: object) -> object:
        if key == WORKDAY_RULES_KEY:
            if not isinstance(value, dict):
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail="workday_rules must be an object.",
                )
            try:
                return WorkdayRules.from_mapping(value).to_mapping()
            except TimeRuleError as exc:
                raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
        if key == COMPANY_PROFILE_KEY:
            if not isinstance(value, dict):
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail="company_profile must be an object.",
                )
            merged = {**_default_company_profile(), **value}
            count = merged.get("employee_count")
            if not isinstance(count, int) or count < 0:
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail="employee_count must be a non-negative integer.",
                )
            risk_class = merged.get("default_arl_risk_class")
            if risk_class not in ARL_CLASSES:
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail=f"default_arl_risk_class must be one of {', '.join(ARL_CLASSES)}.",
                )
            return merged
        return value

    def put_setting(
        self,
        key: str,
        *,
        value: object,
        category: str | None = None,
        description: str | None = None,
    ) -> Setting:
        value = self._validate_value(key, value)
        now = datetime.utcnow()
        setting = self.repo.get_setting(key)
        if setting is None:
            default_category = BUILTIN_DEFAULTS[key][0] if key in BUILTIN_DEFAULTS else "general"
            default_description = BUILTIN_DEFAULTS[key][1] if key in BUILTIN_DEFAULTS else None
            setting = Setting(
                key=key,
                value=value,
                category=category or default_category,
                description=description if description is not None else default_description,
                created_at=now,
                updated_at=now,
            )
            self.repo.add_setting(setting)
        else:
            setting.value = value
            if category is not None:
                setting.category = category
            if description is not None:
                setting.description = description
            setting.updated_at = now

        record_audit_event(
            self.db,
            entity_name="setting",
            entity_id=key,
            action_type="updated",
            payload={"value": value},
        )
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Setting key already exists.") from exc
        self.db.refresh(setting)
        return setting

    def delete_setting(self, key: str) -> None:
        setting = self.repo.get_setting(key)
        if setting is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Setting not found.")
        self.repo.delete_setting(setting)
        record_audit_event(self.db, entity_name="setting", entity_id=key, action_type="deleted")
        self.db.commit()

    def reset_setting(self, key: str) -> dict[str, object]:
        if key not in BUILTIN_DEFAULTS:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Setting has no built-in default.")
        setting = self.repo.get_setting(key)
        if setting is not None:
            self.repo.delete_setting(setting)
        record_audit_event(self.db, entity_name="setting", entity_id=key, action_type="reset")
        self.db.commit()
        return self.serialize_default(key)

    # ---------- Typed accessors ----------
    def get_workday_rules(self) -> WorkdayRules:
        value = self.get_value(WORKDAY_RULES_KEY)
        if not isinstance(value, dict):
            return WorkdayRules()
        try:
            return WorkdayRules.from_mapping(value)
        except TimeRuleError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Stored workday_rules are invalid: {exc}",
            ) from exc

    def get_company_profile(self) -> dict[str, object]:
        value = self.get_value(COMPANY_PROFILE_KEY)
        if not isinstance(value, dict):
            return _default_company_profile()
        return {**_default_company_profile(), **value}

    def get_employer_profile(self) -> EmployerProfile:
        profile = self.get_company_profile()
        return EmployerProfile(
            is_legal_entity=bool(profile.get("is_legal_entity", True)),
            employee_count=int(profile.get("employee_count") or 0),
            qualifies_law_114_1=bool(profile.get("qualifies_law_114_1", True)),
            default_arl_risk_class=str(profile.get("default_arl_risk_class") or "V"),
        )
