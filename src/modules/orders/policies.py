"""Transition policy for the order state machine.

``TransitionPolicy.can_transition`` is a pure decision: it inspects the
current status, the requested status and the requester's role and returns a
``TransitionDecision``.  It never raises, whatever the inputs; callers that
want exceptions use ``decision.raise_if_denied()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from modules.companies.constants import FULFILLMENT_ROLES
from modules.orders.constants import VALID_TRANSITIONS
from modules.orders.exceptions import InvalidTransition, OrderAccessDenied
from shared.domain.errors import DomainError


@dataclass(frozen=True)
class TransitionDecision:
    allowed: bool
    error: Optional[DomainError] = None

    def raise_if_denied(self) -> None:
        if self.error is not None:
            raise self.error


ALLOW = TransitionDecision(allowed=True)


def allowed_next_statuses(status: str) -> frozenset[str]:
    return VALID_TRANSITIONS.get(status, frozenset())


class TransitionPolicy:
    def can_transition(self, current: str, requested: str, role: str) -> TransitionDecision:
        if role not in FULFILLMENT_ROLES:
            return TransitionDecision(
                allowed=False,
                error=OrderAccessDenied(
                    "Only admins and suppliers can update order status.",
                    role=str(role),
                ),
            )

        allowed = allowed_next_statuses(current)
        if requested not in allowed:
            return TransitionDecision(
                allowed=False,
                error=InvalidTransition(str(current), str(requested), allowed),
            )
        return ALLOW
