"""In-process identity directory."""

from __future__ import annotations

from collections.abc import Iterable

from revscope.identity.resolver import Actor, IdentityDirectory
from revscope.models.revisions import ActorId


class InMemoryIdentityDirectory(IdentityDirectory):
    """IdentityDirectory over a fixed set of actors.

    Search is a case-insensitive substring match over username, display
    name and system id.  Exact username matches sort first, then actor id.
    """

    def __init__(self, actors: Iterable[Actor] = ()) -> None:
        self._actors: dict[ActorId, Actor] = {a.actor_id: a for a in actors}

    def add(self, actor: Actor) -> None:
        self._actors[actor.actor_id] = actor

    async def get_actor(self, actor_id: ActorId) -> Actor | None:
        return self._actors.get(actor_id)

    async def search_actors(self, text: str) -> list[Actor]:
        needle = text.strip().lower()
        if not needle:
            return []
        matches = [
            actor
            for actor in self._actors.values()
            if any(needle in value.lower() for value in (actor.username, actor.display_name, actor.system_id))
        ]
        matches.sort(key=lambda a: (a.username.lower() != needle, a.actor_id))
        return matches
