"""Tests for the client registry and the channel index."""

import asyncio
from datetime import datetime, timezone

import pytest

from relay import DuplicateIdentifier, UnknownClient


class TestClientRegistry:
    @pytest.mark.asyncio
    async def test_insert_creates_unjoined_record(self, registry, make_websocket):
        ws = make_websocket()
        record = await registry.insert("abc", ws)
        assert record.client_id == "abc"
        assert record.websocket is ws
        assert record.channel is None
        assert record.display_name is None
        assert not record.joined

    @pytest.mark.asyncio
    async def test_duplicate_insert_rejected(self, registry, make_websocket):
        first = make_websocket()
        await registry.insert("abc", first)
        with pytest.raises(DuplicateIdentifier) as excinfo:
            await registry.insert("abc", make_websocket())
        assert excinfo.value.client_id == "abc"
        assert (await registry.get("abc")).websocket is first

    @pytest.mark.asyncio
    async def test_set_membership(self, registry, make_websocket):
        await registry.insert("abc", make_websocket())
        record = await registry.set_membership("abc", "<42>", "Christopher")
        assert record.channel == "&lt;42&gt;"
        assert record.display_name == "Christophe"
        assert record.joined

    @pytest.mark.asyncio
    async def test_set_membership_unknown(self, registry):
        with pytest.raises(UnknownClient):
            await registry.set_membership("ghost", "1", "Bob")

    @pytest.mark.asyncio
    async def test_get_unknown(self, registry):
        with pytest.raises(UnknownClient):
            await registry.get("ghost")

    @pytest.mark.asyncio
    async def test_remove_tolerates_missing(self, registry, make_websocket):
        await registry.insert("abc", make_websocket())
        assert (await registry.remove("abc")).client_id == "abc"
        assert await registry.remove("abc") is None
        assert not await registry.contains("abc")

    @pytest.mark.asyncio
    async def test_removed_record_keeps_connect_time(self, registry, make_websocket):
        before = datetime.now(timezone.utc)
        await registry.insert("abc", make_websocket())
        record = await registry.remove("abc")
        assert before <= record.connected_at <= datetime.now(timezone.utc)

    @pytest.mark.asyncio
    async def test_identifier_reusable_after_remove(self, registry, make_websocket):
        await registry.insert("abc", make_websocket())
        await registry.remove("abc")
        await registry.insert("abc", make_websocket())
        assert await registry.contains("abc")

    @pytest.mark.asyncio
    async def test_concurrent_inserts(self, registry, make_websocket):
        await asyncio.gather(*(
            registry.insert(f"id{i}", make_websocket()) for i in range(100)
        ))
        stats = await registry.get_connection_stats()
        assert stats["total_clients"] == 100
        assert stats["joined_clients"] == 0

    @pytest.mark.asyncio
    async def test_connection_stats(self, registry, make_websocket):
        for client_id, channel in [("a", "1"), ("b", "1"), ("c", "2")]:
            await registry.insert(client_id, make_websocket())
            await registry.set_membership(client_id, channel, client_id)
        await registry.insert("d", make_websocket())

        assert await registry.get_connection_stats() == {
            "total_clients": 4,
            "joined_clients": 3,
            "total_channels": 2,
        }


class TestChannelIndex:
    @pytest.mark.asyncio
    async def test_n_joins_give_n_members(self, registry, channel_index, make_websocket):
        for i in range(7):
            await registry.insert(f"id{i}", make_websocket())
            await registry.set_membership(f"id{i}", "42", f"user{i}")

        members = await channel_index.members_of("42")
        assert sorted(m.client_id for m in members) == [f"id{i}" for i in range(7)]
        assert len(await channel_index.members_of("42")) == 7

    @pytest.mark.asyncio
    async def test_excludes_other_channels_and_unjoined(self, registry, channel_index, make_websocket):
        await registry.insert("a", make_websocket())
        await registry.set_membership("a", "42", "A")
        await registry.insert("b", make_websocket())
        await registry.set_membership("b", "7", "B")
        await registry.insert("c", make_websocket())

        assert [m.client_id for m in await channel_index.members_of("42")] == ["a"]

    @pytest.mark.asyncio
    async def test_exact_match_only(self, registry, channel_index, make_websocket):
        await registry.insert("a", make_websocket())
        await registry.set_membership("a", "042", "A")
        assert await channel_index.members_of("42") == []

    @pytest.mark.asyncio
    async def test_empty_or_unset_channel(self, registry, channel_index, make_websocket):
        await registry.insert("a", make_websocket())
        assert await channel_index.members_of("") == []
        assert await channel_index.members_of(None) == []

    @pytest.mark.asyncio
    async def test_reflects_removal(self, registry, channel_index, make_websocket):
        await registry.insert("a", make_websocket())
        await registry.set_membership("a", "42", "A")
        assert len(await channel_index.members_of("42")) == 1
        await registry.remove("a")
        assert len(await channel_index.members_of("42")) == 0
