from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import EmployeeProfile, Organization


class DirectoryRepository(Protocol):
    """Read-only view of the organization directory.

    Note (DIP): services depend on this interface, not on a concrete store.
    """

    def get_employee(self, employee_id: str) -> Optional[EmployeeProfile]:
        raise NotImplementedError

    def get_organization(self, organization_id: str) -> Optional[Organization]:
        raise NotImplementedError

    def list_employees(self, employee_ids: Sequence[str]) -> Sequence[EmployeeProfile]:
        raise NotImplementedError

    def count_active_employees(self, organization_id: str) -> int:
        raise NotImplementedError
