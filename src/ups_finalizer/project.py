from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping
class ProjectError(ValueError):
    """Raised when project data cannot be read or is incomplete."""
WIZARD_STEPS = [
    "Projekt",
    "Step 1 - Problem Investigation",
    "Step 2 - Root Cause",
    "Step 3 - Countermeasures",
    "Step 4 - Sustain Results",
    "Step 5 - Reapplication",
]
COUNTERMEASURE_STATUSES = ["Offen", "Geplant", "In Bearbeitung", "Erledigt"]
REAPPLICATION_STATUSES = ["Geplant", "Offen", "In Umsetzung", "Abgeschlossen"]
VALIDATION_OPTIONS = ["Ja", "Nein", "Teilweise"]
# python attribute -> JSON key used by saved project files
FIELD_KEYS: Dict[str, str] = {
    "project_title": "projectTitle",
    "team_name": "teamName",
    "business_impact": "businessImpact",
    "large_vague_problem": "largeVagueProblem",
    "what": "what",
    "where": "where",
    "when": "when",
    "who": "who",
    "which": "which",
    "how": "how",
    "how_much": "howMuch",
    "problem_statement": "problemStatement",
    "ishikawa_mensch": "ishikawaMensch",
    "ishikawa_maschine": "ishikawaMaschine",
    "ishikawa_methode": "ishikawaMethode",
    "ishikawa_material": "ishikawaMaterial",
    "ishikawa_umgebung": "ishikawaUmgebung",
    "why1": "why1",
    "why2": "why2",
    "why3": "why3",
    "why4": "why4",
    "why5": "why5",
    "root_cause": "rootCause",
    "verification": "verification",
    "validation": "validation",
    "before_after": "beforeAfter",
    "standardization": "standardization",
    "follow_up": "followUp",
}
REQUIRED_FIELDS = {
    "project_title": "Projekttitel",
    "problem_statement": "Problem Statement",
    "root_cause": "Root Cause",
}
def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""
@dataclass
class Countermeasure:
    action: str = ""
    responsible: str = ""
    due_date: str = ""
    status: str = ""
    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "responsible": self.responsible,
            "dueDate": self.due_date,
            "status": self.status,
        }
    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Countermeasure":
        return cls(
            action=_text(data.get("action")),
            responsible=_text(data.get("responsible")),
            due_date=_text(data.get("dueDate")),
            status=_text(data.get("status")),
        )
    def is_empty(self) -> bool:
        return not any((self.action, self.responsible, self.due_date, self.status))
@dataclass
class ReapplicationArea:
    area: str = ""
    contact: str = ""
    status: str = ""
    def to_dict(self) -> dict:
        return {"area": self.area, "contact": self.contact, "status": self.status}
    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ReapplicationArea":
        return cls(
            area=_text(data.get("area")),
            contact=_text(data.get("contact")),
            status=_text(data.get("status")),
        )
    def is_empty(self) -> bool:
        return not any((self.area, self.contact, self.status))
@dataclass
class UPSProject:
    project_title: str = ""
    team_name: str = ""
    business_impact: str = ""
    large_vague_problem: str = ""
    what: str = ""
    where: str = ""
    when: str = ""
    who: str = ""
    which: str = ""
    how: str = ""
    how_much: str = ""
    problem_statement: str = ""
    ishikawa_mensch: str = ""
    ishikawa_maschine: str = ""
    ishikawa_methode: str = ""
    ishikawa_material: str = ""
    ishikawa_umgebung: str = ""
    why1: str = ""
    why2: str = ""
    why3: str = ""
    why4: str = ""
    why5: str = ""
    root_cause: str = ""
    verification: str = ""
    validation: str = ""
    before_after: str = ""
    standardization: str = ""
    follow_up: str = ""
    countermeasures: List[Countermeasure] = field(default_factory=list)
    reapplication_areas: List[ReapplicationArea] = field(default_factory=list)
    def to_dict(self) -> dict:
        data: dict = {key: getattr(self, attr) for attr, key in FIELD_KEYS.items()}
        data["countermeasures"] = [cm.to_dict() for cm in self.countermeasures]
        data["reapplicationAreas"] = [ra.to_dict() for ra in self.reapplication_areas]
        return data
    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UPSProject":
        if not isinstance(data, Mapping):
            raise ProjectError("Project data must be a JSON object.")
        values = {attr: _text(data.get(key)) for attr, key in FIELD_KEYS.items()}
        countermeasures = [
            Countermeasure.from_dict(item)
            for item in data.get("countermeasures") or []
            if isinstance(item, Mapping)
        ]
        areas = [
            ReapplicationArea.from_dict(item)
            for item in data.get("reapplicationAreas") or []
            if isinstance(item, Mapping)
        ]
        return cls(countermeasures=countermeasures, reapplication_areas=areas, **values)
    @classmethod
    def from_form(cls, form: Mapping[str, str]) -> "UPSProject":
        """Build a project from the flat wizard form.
        List rows are posted as ``cm_<field>_<n>`` and ``ra_<field>_<n>``;
        rows left completely empty are dropped.
        """
        values = {attr: (form.get(key) or "").strip() for attr, key in FIELD_KEYS.items()}
        countermeasures = [
            cm
            for cm in (
                Countermeasure(
                    action=(form.get(f"cm_action_{idx}") or "").strip(),
                    responsible=(form.get(f"cm_responsible_{idx}") or "").strip(),
                    due_date=(form.get(f"cm_dueDate_{idx}") or "").strip(),
                    status=(form.get(f"cm_status_{idx}") or "").strip(),
                )
                for idx in _row_indices(form, "cm_")
            )
            if not cm.is_empty()
        ]
        areas = [
            ra
            for ra in (
                ReapplicationArea(
                    area=(form.get(f"ra_area_{idx}") or "").strip(),
                    contact=(form.get(f"ra_contact_{idx}") or "").strip(),
                    status=(form.get(f"ra_status_{idx}") or "").strip(),
                )
                for idx in _row_indices(form, "ra_")
            )
            if not ra.is_empty()
        ]
        return cls(countermeasures=countermeasures, reapplication_areas=areas, **values)
    def filled_countermeasures(self) -> List[Countermeasure]:
        return [cm for cm in self.countermeasures if not cm.is_empty()]
    def filled_reapplication_areas(self) -> List[ReapplicationArea]:
        return [ra for ra in self.reapplication_areas if not ra.is_empty()]
def _row_indices(form: Mapping[str, str], prefix: str) -> List[int]:
    indices = set()
    for key in form.keys():
        if not key.startswith(prefix):
            continue
        suffix = key.rsplit("_", 1)[-1]
        if suffix.isdigit():
            indices.add(int(suffix))
    return sorted(indices)
def missing_required_fields(project: UPSProject) -> List[str]:
    return [label for attr, label in REQUIRED_FIELDS.items() if not getattr(project, attr).strip()]
