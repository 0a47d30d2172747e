"""Company model: the identity behind every marketplace request.

Registration and third-party CNPJ verification live outside this service;
the model only stores what the order lifecycle needs to resolve a request
into ``(requester_id, role)``.

Business rules implemented:
- CNPJ must be unique and pass the check-digit validation (validate-docbr).
- CNPJ is stored as digits only (sanitised on save) and masked in ``__str__``.
"""

from __future__ import annotations

import re

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from validate_docbr import CNPJ

from modules.companies.constants import CompanyRole
from modules.core.models import BaseModel

logger = structlog.get_logger(__name__)


class Company(BaseModel):
    """A buyer, supplier or platform administrator."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="company",
    )
    name = models.CharField(max_length=255)
    cnpj = models.CharField(max_length=14, unique=True)
    role = models.CharField(
        max_length=20,
        choices=CompanyRole.choices,
        default=CompanyRole.CUSTOMER,
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "companies"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["role"], name="companies_role_idx"),
        ]

    @staticmethod
    def _sanitize_cnpj(value: str) -> str:
        return re.sub(r"\D", "", value)

    def clean(self) -> None:
        super().clean()
        if self.cnpj:
            self.cnpj = self._sanitize_cnpj(self.cnpj)
        if not CNPJ().validate(self.cnpj or ""):
            logger.warning(
                "company.invalid_cnpj",
                cnpj_suffix=self.cnpj[-4:] if self.cnpj else "",
            )
            raise ValidationError({"cnpj": "Invalid CNPJ number."})

    def save(self, *args, **kwargs) -> None:
        if self.cnpj:
            self.cnpj = self._sanitize_cnpj(self.cnpj)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        suffix = self.cnpj[-4:] if self.cnpj else "????"
        return f"{self.name} ({self.role}, CNPJ ***{suffix})"
