"""Request context for ownership enforcement."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class AuthContext:
    """Authenticated identity of the caller.

    account_id is None for anonymous callers and for credentials that could
    not be verified. All itinerary reads and writes filter on it.
    """

    account_id: UUID | None

    @property
    def is_authenticated(self) -> bool:
        return self.account_id is not None
