"""Tests for filter input parsing."""

from __future__ import annotations

from datetime import UTC, date, datetime
from unittest.mock import AsyncMock

import pytest

from revscope.filters import build_filters, day_end, day_start, parse_day
from revscope.identity.memory_directory import InMemoryIdentityDirectory
from revscope.identity.resolver import Actor, IdentityResolver


def _make_resolver() -> IdentityResolver:
    return IdentityResolver(InMemoryIdentityDirectory([Actor(actor_id=3, display_name="Ada", username="ada")]))


class TestParseDay:
    @pytest.mark.parametrize("text", ["05/03/2025", "2025-03-05", "  05/03/2025 "])
    def test_accepted_formats(self, text: str) -> None:
        assert parse_day(text) == date(2025, 3, 5)

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_blank_is_none(self, text: str | None) -> None:
        assert parse_day(text) is None

    @pytest.mark.parametrize("text", ["03-05-2025", "31/02/2025", "yesterday"])
    def test_invalid_raises(self, text: str) -> None:
        with pytest.raises(ValueError, match="Invalid date"):
            parse_day(text)


class TestDayBounds:
    def test_whole_day(self) -> None:
        day = date(2025, 3, 5)
        assert day_start(day) == datetime(2025, 3, 5, 0, 0, tzinfo=UTC)
        end = day_end(day)
        assert end is not None
        assert (end.hour, end.minute, end.second, end.microsecond) == (23, 59, 59, 999_999)

    def test_none_passthrough(self) -> None:
        assert day_start(None) is None
        assert day_end(None) is None


class TestBuildFilters:
    async def test_empty_input(self) -> None:
        filters = await build_filters(_make_resolver())
        assert filters.is_empty

    async def test_dates_and_actor_text(self) -> None:
        filters = await build_filters(_make_resolver(), actor_text="ada", start_text="01/03/2025", end_text="01/03/2025")
        assert filters.actor_id == 3
        assert filters.from_time == datetime(2025, 3, 1, tzinfo=UTC)
        assert filters.to_time is not None
        assert filters.to_time.date() == date(2025, 3, 1)

    async def test_unmatched_actor_leaves_filter_unset(self) -> None:
        filters = await build_filters(_make_resolver(), actor_text="nobody")
        assert filters.actor_id is None

    async def test_explicit_actor_id_skips_lookup(self) -> None:
        resolver = AsyncMock(spec=IdentityResolver)
        filters = await build_filters(resolver, actor_text="ada", actor_id=9)
        assert filters.actor_id == 9
        resolver.resolve_actor_id.assert_not_called()

    async def test_invalid_date_propagates(self) -> None:
        with pytest.raises(ValueError):
            await build_filters(_make_resolver(), start_text="not a date")
