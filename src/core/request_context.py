"""Request context types attached by the auth dependency."""
from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class CurrentCredential:
    """
    Identity of the authenticated caller.

    Every bookmark query and mutation made on behalf of a request is scoped by `id`.
    """

    id: UUID
