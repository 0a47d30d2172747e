"""Company DTOs."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict

from modules.companies.constants import FULFILLMENT_ROLES, CompanyRole


class Requester(BaseModel):
    """Who is calling: the authenticated user's company and its role."""

    model_config = ConfigDict(frozen=True)

    company_id: UUID
    role: CompanyRole

    @property
    def is_admin(self) -> bool:
        return self.role == CompanyRole.ADMIN

    @property
    def can_fulfill(self) -> bool:
        return self.role in FULFILLMENT_ROLES
