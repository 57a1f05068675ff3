import pytest

from app_utils import config, storage
from features.habits import HabitState, apply_load_decay, undo_last


def test_defaults_on_empty_store(eng):
    state = storage.load_state(eng)
    assert state == HabitState(flower_every=config.DEFAULT_FLOWER_EVERY)
    assert storage.read_leaves(eng) == 0
    assert storage.read_history(eng) == []
    assert storage.read_last(eng) is None
    assert storage.read_decayed(eng) is None


def test_save_and_load_round_trip(eng):
    state = HabitState(leaves=4, last_date="2024-01-10", history=["2024-01-09", "2024-01-10"],
                       flower_every=3, decayed_through="2024-01-10")
    storage.save_state(state, eng)
    assert storage.load_state(eng) == state


def test_save_state_removes_absent_last_date(eng):
    storage.save_state(HabitState(leaves=1, last_date="2024-01-10", history=["2024-01-10"]), eng)
    storage.save_state(HabitState(leaves=0, last_date=None, history=[]), eng)
    assert storage.get_value(storage.STORAGE_LAST, eng) is None
    assert storage.load_state(eng).last_date is None


def test_history_is_stored_as_json(eng):
    storage.write_history(["2024-01-10", "2024-01-10"], eng)
    assert storage.get_value(storage.STORAGE_HISTORY, eng) == '["2024-01-10", "2024-01-10"]'
    assert storage.read_history(eng) == ["2024-01-10", "2024-01-10"]


@pytest.mark.parametrize("raw", ["not json", "{\"a\": 1}", "[1, 2", "42"])
def test_corrupt_history_reads_as_empty(eng, raw):
    storage.set_value(storage.STORAGE_HISTORY, raw, eng)
    assert storage.read_history(eng) == []
    assert storage.load_state(eng).history == []


def test_leaves_are_clamped(eng):
    storage.write_leaves(-3, eng)
    assert storage.read_leaves(eng) == 0
    storage.set_value(storage.STORAGE_LEAVES, "-7", eng)
    assert storage.read_leaves(eng) == 0
    storage.set_value(storage.STORAGE_LEAVES, "abc", eng)
    assert storage.read_leaves(eng) == 0


def test_flower_every_is_clamped(eng):
    storage.write_flower_every(0, eng)
    assert storage.read_flower_every(eng) == 1
    storage.set_value(storage.STORAGE_FLOWER_EVERY, "junk", eng)
    assert storage.read_flower_every(eng) == 1
    storage.write_flower_every(5, eng)
    assert storage.read_flower_every(eng) == 5


def test_write_last_none_deletes_key(eng):
    storage.write_last("2024-01-10", eng)
    assert storage.read_last(eng) == "2024-01-10"
    storage.write_last(None, eng)
    assert storage.read_last(eng) is None


def test_write_decayed(eng):
    storage.write_decayed("2024-01-10", eng)
    assert storage.read_decayed(eng) == "2024-01-10"
    storage.write_decayed(None, eng)
    assert storage.read_decayed(eng) is None


def test_set_value_overwrites(eng):
    storage.set_value("k", "a", eng)
    storage.set_value("k", "b", eng)
    assert storage.get_value("k", eng) == "b"
    storage.delete_value("k", eng)
    assert storage.get_value("k", eng) is None


def test_kv_frame(eng):
    storage.save_state(HabitState(leaves=2, history=["2024-01-10"], last_date="2024-01-10"), eng)
    frame = storage.load_kv_frame(eng)
    assert list(frame.columns) == ["key", "value"]
    assert dict(zip(frame["key"], frame["value"]))[storage.STORAGE_LEAVES] == "2"


@pytest.mark.parametrize("key", [storage.STORAGE_LAST, storage.STORAGE_DECAYED])
def test_unparsable_stored_dates_load_as_absent(eng, key):
    storage.save_state(HabitState(leaves=3, last_date="2024-01-10", history=["2024-01-10"],
                                  decayed_through="2024-01-10"), eng)
    storage.set_value(key, "garbage", eng)

    state = storage.load_state(eng)
    assert getattr(state, "last_date" if key == storage.STORAGE_LAST else "decayed_through") is None
    assert storage.read_last(eng) in (None, "2024-01-10")
    assert storage.read_decayed(eng) in (None, "2024-01-10")

    decayed, _ = apply_load_decay(state, "2024-01-12")
    assert decayed.decayed_through == "2024-01-12"


def test_history_drops_entries_that_are_not_dates(eng):
    storage.set_value(storage.STORAGE_HISTORY, '[5, "garbage", null, "2024-01-10"]', eng)
    assert storage.read_history(eng) == ["2024-01-10"]


def test_undo_past_bad_history_entry_survives_reload(eng):
    storage.set_value(storage.STORAGE_HISTORY, '[5, "2024-01-09", "2024-01-10"]', eng)
    storage.set_value(storage.STORAGE_LAST, "2024-01-10", eng)
    storage.write_leaves(2, eng)

    storage.save_state(undo_last(storage.load_state(eng)), eng)
    storage.save_state(undo_last(storage.load_state(eng)), eng)

    state = storage.load_state(eng)
    assert state.history == []
    assert state.last_date is None
    decayed, removed = apply_load_decay(state, "2024-01-12")
    assert removed == 0
    assert decayed.leaves == 0
