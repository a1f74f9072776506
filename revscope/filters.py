"""Parsing of caller-supplied filter input into RevisionFilters.

Dates arrive as text in ``dd/mm/yyyy`` or ISO ``yyyy-mm-dd`` form and are
widened to whole UTC days, so a range from 01/03/2025 to 01/03/2025
covers that entire day.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time
from typing import TYPE_CHECKING

from revscope.models.revisions import ActorId, RevisionFilters

if TYPE_CHECKING:
    from revscope.identity.resolver import IdentityResolver

_DAY_FORMATS = ("%d/%m/%Y", "%Y-%m-%d")


def parse_day(text: str | None) -> date | None:
    """Parse a calendar day; blank input returns None.

    Raises:
        ValueError: if *text* matches none of the accepted formats.
    """
    if text is None or not text.strip():
        return None
    value = text.strip()
    for fmt in _DAY_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Invalid date: {value!r}. Expected dd/mm/yyyy or yyyy-mm-dd")


def day_start(day: date | None) -> datetime | None:
    if day is None:
        return None
    return datetime.combine(day, time.min, tzinfo=UTC)


def day_end(day: date | None) -> datetime | None:
    if day is None:
        return None
    return datetime.combine(day, time.max, tzinfo=UTC)


async def build_filters(
    resolver: IdentityResolver,
    actor_text: str | None = None,
    start_text: str | None = None,
    end_text: str | None = None,
    actor_id: ActorId | None = None,
) -> RevisionFilters:
    """Build RevisionFilters from raw input.

    An explicit *actor_id* wins over *actor_text*.  Actor text that matches
    nobody leaves the actor filter unset.
    """
    from_time = day_start(parse_day(start_text))
    to_time = day_end(parse_day(end_text))
    if actor_id is None:
        actor_id = await resolver.resolve_actor_id(actor_text)
    return RevisionFilters(actor_id=actor_id, from_time=from_time, to_time=to_time)
