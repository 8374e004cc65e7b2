from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from ..departments.model import Department
from ..equipment.model import Equipment

# Personal/document data; editing it needs documents.view on top of employees.edit.
DOCUMENT_FIELDS = frozenset(
    {
        "passport_series",
        "passport_number",
        "passport_issued_by",
        "passport_date",
        "address",
        "order_number",
        "order_date",
        "responsibility_act_number",
        "responsibility_act_date",
    }
)
BASIC_FIELDS = frozenset({"full_name", "position", "grade", "department_id", "photo_url"})
EDITABLE_FIELDS = BASIC_FIELDS | DOCUMENT_FIELDS


@dataclass(frozen=True)
class Employee:
    employee_id: int
    full_name: str
    position: str
    grade: str
    department_id: Optional[int] = None
    photo_url: Optional[str] = None
    passport_series: Optional[str] = None
    passport_number: Optional[str] = None
    passport_issued_by: Optional[str] = None
    passport_date: Optional[str] = None
    address: Optional[str] = None
    order_number: Optional[str] = None
    order_date: Optional[str] = None
    responsibility_act_number: Optional[str] = None
    responsibility_act_date: Optional[str] = None
    is_archived: bool = False
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class EmployeeDraft:
    """Input for creating an employee."""

    full_name: str
    position: str
    grade: str
    department_id: Optional[int] = None
    photo_url: Optional[str] = None
    passport_series: Optional[str] = None
    passport_number: Optional[str] = None
    passport_issued_by: Optional[str] = None
    passport_date: Optional[str] = None
    address: Optional[str] = None
    order_number: Optional[str] = None
    order_date: Optional[str] = None
    responsibility_act_number: Optional[str] = None
    responsibility_act_date: Optional[str] = None


@dataclass(frozen=True)
class EmployeeCard:
    employee: Employee
    equipment: Tuple[Equipment, ...] = field(default_factory=tuple)
    department: Optional[Department] = None
