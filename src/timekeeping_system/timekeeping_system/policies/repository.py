from __future__ import annotations

from typing import Optional, Protocol

from .model import WorkPolicy


class PolicyRepository(Protocol):
    """Work-policy store, one policy per organization."""

    def get_for_organization(self, organization_id: str) -> Optional[WorkPolicy]:
        raise NotImplementedError

    def save(self, policy: WorkPolicy) -> None:
        """Create or replace the organization's policy."""

        raise NotImplementedError
