"""Company domain constants."""

from django.db import models


class CompanyRole(models.TextChoices):
    ADMIN = "admin", "Administrador"
    SUPPLIER = "supplier", "Fornecedor"
    CUSTOMER = "customer", "Cliente"


# Roles allowed to move an order through its lifecycle or touch fiscal data.
FULFILLMENT_ROLES: frozenset[str] = frozenset({CompanyRole.ADMIN, CompanyRole.SUPPLIER})
