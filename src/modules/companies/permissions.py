"""DRF permissions and requester resolution based on the user's company."""

from __future__ import annotations

from typing import Optional

from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import BasePermission
from rest_framework.request import Request

from modules.companies.constants import CompanyRole
from modules.companies.dtos import Requester
from modules.companies.models import Company


def _active_company(request: Request) -> Optional[Company]:
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return None
    # Reverse one-to-one access raises RelatedObjectDoesNotExist (an
    # AttributeError) when no profile exists.
    company = getattr(user, "company", None)
    if company is None or not company.is_active:
        return None
    return company


def get_requester(request: Request) -> Requester:
    company = _active_company(request)
    if company is None:
        raise PermissionDenied("No active company profile is linked to this user.")
    return Requester(company_id=company.id, role=company.role)


class HasCompanyProfile(BasePermission):
    """Authenticated user with an active company profile."""

    message = "No active company profile is linked to this user."

    def has_permission(self, request: Request, view) -> bool:
        return _active_company(request) is not None


class IsAdminCompany(BasePermission):
    message = "Admin access required."

    def has_permission(self, request: Request, view) -> bool:
        company = _active_company(request)
        return company is not None and company.role == CompanyRole.ADMIN
