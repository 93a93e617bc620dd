"""Tests for VersionedCodec."""

from unittest.mock import MagicMock

import pytest

from bindstore.domain.codec import VERSION_FIELD, VersionedCodec
from bindstore.domain.models import VersionDispatch
from tests.fixtures.compliant_objects import Counter, FailingLoad, Inventory, Profile


@pytest.fixture
def binding():
    return MagicMock(name="binding")


class TestEncode:
    def test_stamps_latest_version(self, codec):
        record = codec.encode(Inventory(contents=[1, 2], gold=3))

        assert record == {"contents": [1, 2], "gold": 3, VERSION_FIELD: "v2"}

    def test_does_not_mutate_object_data(self, codec):
        class Shared:
            latest = "v1"
            versions = {"v1": lambda obj, stored, binding: True}

            def __init__(self):
                self.data = {"a": 1}

            def serialize(self):
                return self.data

        obj = Shared()
        codec.encode(obj)

        assert VERSION_FIELD not in obj.data

    def test_rejects_non_mapping(self, codec):
        obj = Counter()
        obj.serialize = lambda: [1, 2, 3]

        with pytest.raises(TypeError):
            codec.encode(obj)


class TestDecode:
    async def test_dispatches_on_stored_version(self, codec, binding):
        inventory = Inventory()

        ok = await codec.decode(inventory, {"items": [4, 5], VERSION_FIELD: "v1"}, binding)

        assert ok
        assert inventory.calls == ["v1"]
        assert inventory.contents == [4, 5]
        assert inventory.retrieved is True

    async def test_missing_version_falls_back_to_latest(self, codec, binding):
        inventory = Inventory()

        await codec.decode(inventory, {"contents": [9], "gold": 2}, binding)

        assert inventory.calls == ["v2"]
        assert inventory.gold == 2

    @pytest.mark.parametrize("tag", [1, None, ["v1"]])
    async def test_non_string_version_falls_back_to_latest(self, codec, binding, tag):
        counter = Counter()

        ok = await codec.decode(counter, {"value": 3, VERSION_FIELD: tag}, binding)

        assert ok
        assert counter.retrieved is True
        assert counter.value == 3

    def test_resolve_version(self, codec):
        assert codec.resolve_version(Inventory(), "v1") == "v1"
        assert codec.resolve_version(Inventory(), 1) == "v2"
        assert codec.resolve_version(Inventory(), None) == "v2"

    async def test_latest_dispatch_ignores_stored_tag(self, binding):
        codec = VersionedCodec(VersionDispatch.LATEST)
        inventory = Inventory()

        await codec.decode(inventory, {"items": [4, 5], VERSION_FIELD: "v1"}, binding)

        assert inventory.calls == ["v2"]
        assert inventory.contents == []

    async def test_version_field_stripped_and_binding_passed(self, codec, binding):
        profile = Profile()

        await codec.decode(profile, {"name": "ada", VERSION_FIELD: "v1"}, binding)

        assert profile.seen_stored == {"name": "ada"}
        assert profile.seen_binding is binding
        assert profile.name == "ada"

    async def test_stored_record_not_mutated(self, codec, binding):
        stored = {"name": "ada", VERSION_FIELD: "v1"}

        await codec.decode(Profile(), stored, binding)

        assert stored[VERSION_FIELD] == "v1"

    async def test_failure_keeps_partial_state_and_unretrieved(self, codec, binding):
        obj = FailingLoad()

        ok = await codec.decode(obj, {"x": 1}, binding)

        assert not ok
        assert obj.retrieved is False
        assert obj.partial == {"x": 1}

    async def test_unknown_version_fails(self, codec, binding):
        inventory = Inventory()

        ok = await codec.decode(inventory, {VERSION_FIELD: "v9"}, binding)

        assert not ok
        assert inventory.calls == []
        assert inventory.retrieved is False

    async def test_raising_procedure_is_contained(self, codec, binding):
        obj = Counter()

        def explode(o, stored, b):
            raise ValueError("corrupt")

        obj.versions = {"v1": explode}

        assert await codec.decode(obj, {}, binding) is False
        assert obj.retrieved is False


class TestRoundTrip:
    async def test_decode_of_encode_restores_state(self, codec, binding):
        source = Inventory(contents=[3, 1, 4], gold=15)
        target = Inventory()

        await codec.decode(target, codec.encode(source), binding)

        assert target.contents == source.contents
        assert target.gold == source.gold

    async def test_old_record_is_reencoded_at_latest(self, codec, binding):
        inventory = Inventory()
        await codec.decode(inventory, {"items": [7], VERSION_FIELD: "v1"}, binding)

        record = codec.encode(inventory)

        assert record[VERSION_FIELD] == "v2"
        assert record["contents"] == [7]
