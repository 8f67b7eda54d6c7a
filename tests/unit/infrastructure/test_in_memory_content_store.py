"""Unit tests for InMemoryContentStore."""

import pytest

from egp.domain.errors import StorageUnavailableError
from egp.infrastructure.stubs import InMemoryContentStore, content_id


class TestContentId:
    """Tests for content_id()."""

    def test_key_order_does_not_change_id(self) -> None:
        assert content_id({"a": 1, "b": 2}) == content_id({"b": 2, "a": 1})

    def test_base32_multibase_prefix(self) -> None:
        object_id = content_id({"type": "sense"})

        assert object_id.startswith("b")
        assert object_id == object_id.lower()
        assert object_id[1:].isalnum()

    def test_different_payloads_differ(self) -> None:
        assert content_id({"type": "sense"}) != content_id({"type": "propose"})


class TestInMemoryContentStore:
    """Tests for the in-memory store."""

    @pytest.mark.asyncio
    async def test_store_get_round_trip(self) -> None:
        store = InMemoryContentStore()
        payload = {"type": "sense", "issue": "water_shortage", "tags": ["water"]}

        object_id = await store.store(payload)

        assert await store.get(object_id) == payload

    @pytest.mark.asyncio
    async def test_identical_payloads_deduplicate(self) -> None:
        store = InMemoryContentStore()

        first = await store.store({"type": "sense", "issue": "x"})
        second = await store.store({"issue": "x", "type": "sense"})

        assert first == second
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_get_unknown_returns_none(self) -> None:
        assert await InMemoryContentStore().get("bunknown") is None

    @pytest.mark.asyncio
    async def test_pin_unknown_raises(self) -> None:
        with pytest.raises(StorageUnavailableError):
            await InMemoryContentStore().pin("bunknown")

    @pytest.mark.asyncio
    async def test_pin_marks_object(self) -> None:
        store = InMemoryContentStore()
        object_id = await store.store({"type": "sense"})

        await store.pin(object_id)

        assert store.is_pinned(object_id)
        assert store.operations == [("store", object_id), ("pin", object_id)]

    @pytest.mark.asyncio
    async def test_status_counts(self) -> None:
        store = InMemoryContentStore()
        object_id = await store.store({"type": "sense"})
        await store.store({"type": "propose"})
        await store.pin(object_id)

        status = await store.status()

        assert status == {"connected": True, "backend": "memory", "objects": 2, "pinned": 1}


class TestInjectedFailures:
    """Tests for failure injection."""

    @pytest.mark.asyncio
    async def test_failure_filtered_by_payload_type(self) -> None:
        store = InMemoryContentStore()
        store.inject_failure("store", payload_type="relationship")

        await store.store({"type": "sense"})
        with pytest.raises(StorageUnavailableError) as exc_info:
            await store.store({"type": "relationship"})

        assert exc_info.value.operation == "store"

    @pytest.mark.asyncio
    async def test_limited_failures_then_success(self) -> None:
        store = InMemoryContentStore()
        store.inject_failure("get", times=1)

        with pytest.raises(StorageUnavailableError):
            await store.get("bany")
        assert await store.get("bany") is None

    @pytest.mark.asyncio
    async def test_pin_failure_sees_stored_payload_type(self) -> None:
        store = InMemoryContentStore()
        store.inject_failure("pin", payload_type="propose")
        sense_id = await store.store({"type": "sense"})
        proposal_id = await store.store({"type": "propose"})

        await store.pin(sense_id)
        with pytest.raises(StorageUnavailableError):
            await store.pin(proposal_id)

    @pytest.mark.asyncio
    async def test_clear_failures(self) -> None:
        store = InMemoryContentStore()
        store.inject_failure("store")
        store.clear_failures()

        assert await store.store({"type": "sense"})

    @pytest.mark.asyncio
    async def test_put_raw_bypasses_addressing(self) -> None:
        store = InMemoryContentStore()
        store.put_raw("bbroken", ["not", "a", "record"])

        assert await store.get("bbroken") == ["not", "a", "record"]
        assert store.payloads_of_type("sense") == []
