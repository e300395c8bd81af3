# tests/test_store.py
from modules.scholarship_catalog.lib.store import ListingStore


def test_append_keeps_arrival_order(listings):
    store = ListingStore()
    # Deliberately not sorted by created_at: the store must not re-sort.
    batch = [listings[5], listings[2], listings[9]]
    assert store.append(batch) == 3
    assert [x.id for x in store] == ["g005", "g002", "g009"]
    assert len(store) == 3


def test_append_skips_known_ids(listings):
    store = ListingStore(listings[:15])
    added = store.append(listings[10:20])
    assert added == 5
    assert len(store) == 20
    assert [x.id for x in store.items] == [x.id for x in listings[:20]]


def test_snapshot_changes_only_when_something_was_added(listings):
    store = ListingStore(listings[:3])
    before = store.items
    store.append(listings[:3])
    assert store.items is before
    store.append(listings[3:4])
    assert store.items is not before
    assert before == tuple(listings[:3])


def test_lookup(listings):
    store = ListingStore(listings[:3])
    assert "g001" in store
    assert "g050" not in store
    assert store.get("g002") is listings[2]
    assert store.get("missing") is None
