import threading
from concurrent.futures import ThreadPoolExecutor

from petstore.database.memory import InMemoryPetStore
from petstore.database.models import Pet


def _pet(pet_id, name="Buddy"):
    return Pet(id=pet_id, name=name, type="Dog", age=3)


def test_next_id_starts_at_one_and_increments(store):
    assert store.next_id() == 1
    assert store.next_id() == 2
    assert store.next_id() == 3


def test_list_is_a_snapshot_in_insertion_order(store):
    store.insert(_pet(3, "C"))
    store.insert(_pet(1, "A"))
    snapshot = store.list()

    store.insert(_pet(2, "B"))

    assert [p.name for p in snapshot] == ["C", "A"]
    assert [p.name for p in store.list()] == ["C", "A", "B"]


def test_get_returns_none_for_missing_id(store):
    store.insert(_pet(1))
    assert store.get(1).name == "Buddy"
    assert store.get(2) is None


def test_replace_keeps_position_and_reports_absence(store):
    store.insert(_pet(1, "A"))
    store.insert(_pet(2, "B"))
    store.insert(_pet(3, "C"))

    replaced = store.replace(2, _pet(2, "Bee"))

    assert replaced.name == "Bee"
    assert [p.name for p in store.list()] == ["A", "Bee", "C"]
    assert store.replace(9, _pet(9, "Nope")) is None
    assert len(store) == 3


def test_remove_reports_whether_a_pet_was_removed(store):
    store.insert(_pet(1))
    assert store.remove(1) is True
    assert store.remove(1) is False
    assert store.list() == []


def test_reset_replaces_contents_and_counter(store):
    store.insert(_pet(1))
    store.next_id()

    store.reset([_pet(7, "Seven")], next_id=8)

    assert [p.id for p in store.list()] == [7]
    assert store.next_id() == 8


def test_next_id_never_repeats_under_concurrency():
    store = InMemoryPetStore()
    with ThreadPoolExecutor(max_workers=16) as pool:
        ids = list(pool.map(lambda _: store.next_id(), range(500)))

    assert len(set(ids)) == 500
    assert sorted(ids) == list(range(1, 501))


def test_atomic_blocks_other_writers_until_released(store):
    inserted = threading.Event()

    def writer():
        store.insert(_pet(2, "Other"))
        inserted.set()

    with store.atomic():
        store.insert(_pet(1))
        thread = threading.Thread(target=writer)
        thread.start()
        assert not inserted.wait(0.1)
        assert [p.id for p in store.list()] == [1]

    thread.join(timeout=5)
    assert [p.id for p in store.list()] == [1, 2]
