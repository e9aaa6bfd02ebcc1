from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import WorkModel


@dataclass(frozen=True)
class EmployeeProfile:
    """Directory data the engine needs about an employee."""

    employee_id: str
    organization_id: str
    display_name: str
    employment_type: Optional[str] = None
    primary_location: Optional[str] = None
    work_model: Optional[WorkModel] = None
    department: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class Organization:
    organization_id: str
    name: str
    timezone: Optional[str] = None
