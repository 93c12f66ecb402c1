"""
Status vocabularies and the rental request transition tables.

Both status-update policies are expressed as explicit tables so every allowed
move is visible in one place:

- ``PERMISSIVE_TRANSITIONS``: the generic setter accepts any recognized
  status, except out of ``rejected`` and ``cancelled`` which are final.
  ``completed`` may still be changed (providers correcting a typo).
- ``STRICT_TRANSITIONS``: the lifecycle graph. ``approved`` is only reachable
  through ``RentalRequest.approve`` and is therefore absent from the setter
  table.
"""

from enum import Enum
from typing import Dict, FrozenSet

from gym_office.core.config import STATUS_POLICY_PERMISSIVE, STATUS_POLICY_STRICT
from gym_office.core.exceptions import InvalidStatusError


class RentalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value) -> "RentalStatus":
        """Case-insensitive lookup; raises InvalidStatusError for unknown values."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise InvalidStatusError(value)
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise InvalidStatusError(value) from None


class InvoiceStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value) -> "InvoiceStatus":
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise InvalidStatusError(value)
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise InvalidStatusError(value) from None


_ALL: FrozenSet[RentalStatus] = frozenset(RentalStatus)
_NONE: FrozenSet[RentalStatus] = frozenset()

PERMISSIVE_TRANSITIONS: Dict[RentalStatus, FrozenSet[RentalStatus]] = {
    RentalStatus.PENDING: _ALL,
    RentalStatus.APPROVED: _ALL,
    RentalStatus.COMPLETED: _ALL,
    RentalStatus.REJECTED: _NONE,
    RentalStatus.CANCELLED: _NONE,
}

STRICT_TRANSITIONS: Dict[RentalStatus, FrozenSet[RentalStatus]] = {
    RentalStatus.PENDING: frozenset({RentalStatus.REJECTED, RentalStatus.CANCELLED}),
    RentalStatus.APPROVED: frozenset(
        {RentalStatus.COMPLETED, RentalStatus.CANCELLED}
    ),
    RentalStatus.COMPLETED: _NONE,
    RentalStatus.REJECTED: _NONE,
    RentalStatus.CANCELLED: _NONE,
}

TRANSITION_TABLES = {
    STATUS_POLICY_PERMISSIVE: PERMISSIVE_TRANSITIONS,
    STATUS_POLICY_STRICT: STRICT_TRANSITIONS,
}


def is_transition_allowed(
    current: RentalStatus, target: RentalStatus, policy: str = STATUS_POLICY_PERMISSIVE
) -> bool:
    table = TRANSITION_TABLES.get(policy, PERMISSIVE_TRANSITIONS)
    return target in table[current]
