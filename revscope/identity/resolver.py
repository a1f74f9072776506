"""Actor id <-> display name resolution.

IdentityDirectory  -- ABC for the external user directory.
IdentityResolver   -- Fallback chain display name -> system id -> "Unknown"
                      and best-effort reverse lookup; lookup failures are
                      logged and degraded, never raised.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from revscope.errors import IdentityLookupError
from revscope.models.revisions import ActorId
from revscope.observability.logging import get_logger

_log = get_logger("identity.resolver")

UNKNOWN_ACTOR = "Unknown"


@dataclass(frozen=True)
class Actor:
    """A user known to the identity directory."""

    actor_id: ActorId
    display_name: str = ""
    system_id: str = ""
    username: str = ""


class IdentityDirectory(ABC):
    """Lookup contract of the external identity directory."""

    @abstractmethod
    async def get_actor(self, actor_id: ActorId) -> Actor | None:
        """Return the actor with *actor_id*, or None if there is none.

        Raises:
            IdentityLookupError: if the directory cannot be queried.
        """

    @abstractmethod
    async def search_actors(self, text: str) -> list[Actor]:
        """Return actors whose names partially match *text*, best match first.

        Raises:
            IdentityLookupError: if the directory cannot be queried.
        """


class IdentityResolver:
    """Resolves actors for display and for filter input."""

    def __init__(self, directory: IdentityDirectory) -> None:
        self._directory = directory

    async def resolve_display_name(self, actor_id: ActorId | None) -> str:
        """Return a human-readable name for *actor_id*.

        A None id, an unknown actor or a failed lookup all yield "Unknown".
        """
        if actor_id is None:
            return UNKNOWN_ACTOR
        try:
            actor = await self._directory.get_actor(actor_id)
        except IdentityLookupError as exc:
            _log.warning("actor_lookup_failed", actor_id=actor_id, error=str(exc))
            return UNKNOWN_ACTOR
        if actor is None:
            return UNKNOWN_ACTOR
        return display_name_of(actor)

    async def resolve_actor_id(self, text: str | None) -> ActorId | None:
        """Return the id of the first actor matching *text*, or None.

        Blank input returns None without querying the directory.
        """
        if text is None or not text.strip():
            return None
        try:
            matches = await self._directory.search_actors(text.strip())
        except IdentityLookupError as exc:
            _log.warning("actor_search_failed", text=text, error=str(exc))
            return None
        if not matches:
            _log.debug("actor_search_no_match", text=text)
            return None
        return matches[0].actor_id


def display_name_of(actor: Actor) -> str:
    for candidate in (actor.display_name, actor.system_id):
        if candidate and candidate.strip():
            return candidate.strip()
    return UNKNOWN_ACTOR
