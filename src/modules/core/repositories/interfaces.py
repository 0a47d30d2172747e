"""Generic repository interface (Dependency Inversion Principle).

Provides ``IRepository[T]``, the base abstract class that domain-specific
repository interfaces extend.  Service-layer code depends on this
abstraction, never on the Django ORM directly.

Repositories hand out immutable snapshots (``T`` is a frozen DTO), so the
contract deliberately has no generic ``save``/``delete``: each aggregate
declares the explicit mutations it supports.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    Type parameter ``T`` is the snapshot type returned for the aggregate
    (e.g. ``OrderSnapshot``, ``QuotationSnapshot``).
    """

    @abstractmethod
    def get_by_id(self, id: Any) -> Optional[T]:
        """Retrieve a snapshot by primary key, ``None`` when absent."""
