import pytest
from weakcoll.core.storage import EntryArray, EntrySet, EntryTable, grown_capacity


def test_grown_capacity():
    assert grown_capacity(0, 1) == 4
    assert grown_capacity(4, 5) == 8
    assert grown_capacity(4, 20) == 20
    assert grown_capacity(8, 3) == 8


def test_array_tracks_capacity():
    array = EntryArray()
    for i in range(5):
        array.append(i)
    assert array.capacity == 8
    array.insert(0, -1)
    assert list(array) == [-1, 0, 1, 2, 3, 4]

    assert array.remove_where(lambda e: e % 2 == 0) == 3
    assert list(array) == [-1, 1, 3]
    array.trim_excess(extra=1)
    assert array.capacity == 4
    array.trim_excess(extra=5)
    assert array.capacity == 4


def test_array_capacity_setter():
    array = EntryArray(capacity=2)
    array.append("a")
    array.append("b")
    with pytest.raises(ValueError):
        array.capacity = 1
    array.clear()
    assert len(array) == 0
    assert array.capacity == 2


def test_negative_capacity_is_rejected():
    with pytest.raises(ValueError):
        EntrySet(capacity=-1)


def test_set_only_grows_for_new_entries():
    entries = EntrySet()
    entries.add("a")
    entries.add("a")
    assert len(entries) == 1
    assert entries.capacity == 4
    assert entries.ensure_capacity(6) == 6
    entries.trim_excess()
    assert entries.capacity == 1


def test_table_remove_where():
    table = EntryTable()
    for key in "abcde":
        table[key] = key.upper()
    table["a"] = "A2"
    assert table.capacity == 8
    assert table.remove_where(lambda key, entry: key in "bd") == 2
    assert dict(table.items()) == {"a": "A2", "c": "C", "e": "E"}
    assert table.get("b") is None
