"""Quotation domain exceptions raised while converting a quotation into an order."""

from __future__ import annotations

from shared.domain.errors import ExpiredError, IllegalStateError, NotFoundError


class QuotationNotFound(NotFoundError):
    """The quotation does not exist or belongs to another company.

    Both cases share one error so non-owners cannot probe for existence.
    """


class QuotationNotProcessed(IllegalStateError):
    """Only ``processed`` quotations can be converted into orders."""


class QuotationExpired(ExpiredError):
    """The quotation's ``valid_until`` instant is in the past."""
