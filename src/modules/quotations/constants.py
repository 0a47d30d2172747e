"""Quotation domain constants."""

from django.db import models


class QuotationStatus(models.TextChoices):
    PENDING = "pending", "Pendente"
    PROCESSED = "processed", "Processada"
    COMPLETED = "completed", "Concluída"
    REJECTED = "rejected", "Rejeitada"
