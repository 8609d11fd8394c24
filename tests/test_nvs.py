import json

import pytest

from yelpanel.nvs import (
    INVALID_ARG,
    INVALID_SIZE,
    INVALID_STATE,
    MAX_BLOB_SIZE,
    MAX_STRING_LENGTH,
    NOT_FOUND,
    NvsError,
    NvsStore,
)


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "settings.json"


def test_example_flow_round_trips(store_path):
    with NvsStore(store_path, "settings") as store:
        store.set_string("test", "test")
        assert store.get_string("test", 10) == "test"
        store.set_int32("counter", 123)
        assert store.get_int32("counter") == 123
        store.set_uint32("flags", 0xABCD)
        assert store.get_uint32("flags") == 0xABCD
        store.commit()
    with NvsStore(store_path, "settings") as reopened:
        assert reopened.get_string("test") == "test"
        assert reopened.get_int32("counter") == 123
        assert reopened.get_uint32("flags") == 0xABCD


def test_uncommitted_changes_are_not_persisted(store_path):
    with NvsStore(store_path, "settings") as store:
        store.set_int32("counter", 5)
    with NvsStore(store_path, "settings") as reopened:
        with pytest.raises(NvsError) as info:
            reopened.get_int32("counter")
    assert info.value.code == NOT_FOUND


def test_namespaces_are_separate(store_path):
    with NvsStore(store_path, "one") as first:
        first.set_string("name", "alpha")
        first.commit()
    with NvsStore(store_path, "two") as second:
        second.set_string("name", "beta")
        second.commit()
    with NvsStore(store_path, "one") as first:
        assert first.get_string("name") == "alpha"
    with NvsStore(store_path, "two") as second:
        assert second.get_string("name") == "beta"


def test_blob_round_trip(store_path):
    payload = bytes(range(200))
    with NvsStore(store_path, "blobs") as store:
        store.set_blob("data", payload)
        store.commit()
    with NvsStore(store_path, "blobs") as store:
        assert store.get_blob("data") == payload


def test_blob_too_large(store_path):
    with NvsStore(store_path, "blobs") as store:
        with pytest.raises(NvsError) as info:
            store.set_blob("data", b"x" * (MAX_BLOB_SIZE + 1))
    assert info.value.code == INVALID_SIZE


def test_string_too_long(store_path):
    with NvsStore(store_path, "s") as store:
        with pytest.raises(NvsError) as info:
            store.set_string("k", "a" * MAX_STRING_LENGTH)
    assert info.value.code == INVALID_ARG


def test_get_string_buffer_too_small(store_path):
    with NvsStore(store_path, "s") as store:
        store.set_string("k", "test")
        assert store.get_string("k", 5) == "test"
        with pytest.raises(NvsError) as info:
            store.get_string("k", 4)
    assert info.value.code == INVALID_SIZE


def test_type_mismatch_is_not_found(store_path):
    with NvsStore(store_path, "s") as store:
        store.set_string("k", "text")
        with pytest.raises(NvsError) as info:
            store.get_int32("k")
    assert info.value.code == NOT_FOUND


def test_delete_string_and_blob(store_path):
    with NvsStore(store_path, "s") as store:
        store.set_string("a", "x")
        store.set_blob("b", b"\x01")
        store.delete_string("a")
        store.delete_blob("b")
        with pytest.raises(NvsError) as first:
            store.get_string("a")
        with pytest.raises(NvsError) as second:
            store.delete_blob("b")
    assert first.value.code == NOT_FOUND
    assert second.value.code == NOT_FOUND


def test_erase_all_then_commit(store_path):
    with NvsStore(store_path, "s") as store:
        store.set_int32("a", 1)
        store.commit()
        store.erase_all()
        store.commit()
    with NvsStore(store_path, "s") as store:
        with pytest.raises(NvsError) as info:
            store.get_int32("a")
    assert info.value.code == NOT_FOUND


@pytest.mark.parametrize("value", [1 << 31, -(1 << 31) - 1])
def test_int32_range(store_path, value):
    with NvsStore(store_path, "s") as store:
        with pytest.raises(NvsError) as info:
            store.set_int32("k", value)
    assert info.value.code == INVALID_ARG


def test_uint32_rejects_negative(store_path):
    with NvsStore(store_path, "s") as store:
        with pytest.raises(NvsError) as info:
            store.set_uint32("k", -1)
    assert info.value.code == INVALID_ARG


def test_operations_after_close_fail(store_path):
    store = NvsStore(store_path, "s")
    store.close()
    store.close()
    assert store.is_open is False
    with pytest.raises(NvsError) as info:
        store.set_string("k", "v")
    assert info.value.code == INVALID_STATE


def test_missing_key_is_invalid_arg(store_path):
    with NvsStore(store_path, "s") as store:
        with pytest.raises(NvsError) as info:
            store.set_int32(None, 1)
    assert info.value.code == INVALID_ARG


def test_namespace_validation(store_path):
    with pytest.raises(NvsError) as too_long:
        NvsStore(store_path, "n" * 32)
    with pytest.raises(NvsError) as missing:
        NvsStore(store_path, None)
    assert too_long.value.code == INVALID_ARG
    assert missing.value.code == INVALID_ARG


def test_corrupt_file_starts_empty_and_is_replaced(store_path):
    store_path.write_text("not json", encoding="utf-8")
    with NvsStore(store_path, "s") as store:
        store.set_string("k", "v")
        store.commit()
    data = json.loads(store_path.read_text(encoding="utf-8"))
    assert data["s"]["k"]["value"] == "v"