"""
Calling identities and the parties they play.

Authentication is handled upstream; this service receives an already
verified user id and role and only decides which parties (renter, owner,
admin, system) that identity holds for a given booking or listing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from student_housing.domain.statuses import Party

ADMIN_ROLE = "admin"
SYSTEM_ROLE = "system"


@dataclass(frozen=True)
class Actor:
    user_id: Optional[int]
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    @property
    def is_system(self) -> bool:
        return self.role == SYSTEM_ROLE


SYSTEM_ACTOR = Actor(user_id=None, role=SYSTEM_ROLE)


def listing_parties(actor: Actor, listing: Mapping[str, Any]) -> set[Party]:
    parties: set[Party] = set()
    if actor.is_system:
        parties.add(Party.SYSTEM)
    if actor.is_admin:
        parties.add(Party.ADMIN)
    if actor.user_id is not None and actor.user_id == listing["owner_id"]:
        parties.add(Party.OWNER)
    return parties


def booking_parties(
    actor: Actor, booking: Mapping[str, Any], listing: Mapping[str, Any]
) -> set[Party]:
    """
    Every party the actor holds for a booking.

    Example:
        >>> booking_parties(Actor(7), {"renter_id": 7}, {"owner_id": 3})
        {<Party.RENTER: 'renter'>}
    """
    parties = listing_parties(actor, listing)
    if actor.user_id is not None and actor.user_id == booking["renter_id"]:
        parties.add(Party.RENTER)
    return parties


def maintenance_parties(actor: Actor, request: Mapping[str, Any]) -> set[Party]:
    """A maintenance request carries both renter_id and owner_id, copied from its booking."""
    return booking_parties(actor, request, request)
