import pytest

from menuphotos.errors import ConfigurationError
from menuphotos.services.assign import MenuItem, assign, load_items
from menuphotos.services.classifier import Classifier, Rule
from menuphotos.services.pool import load

PIZZA_ONLY = Classifier([Rule("pizza", ("pizza",))])

NAMES = [
    "Cheese Pizza", "Pepperoni Pizza", "BBQ Chicken Pizza", "Chicken Curry",
    "Cola", "Fish Fry", "Veggie Pizza", "Chicken Tikka", "Lassi", "Garden Salad",
]


def _items(n, names=NAMES):
    return [MenuItem(id=f"id{i}", name=names[i % len(names)]) for i in range(n)]


def _pool(size):
    ids = [str(1000 + i) for i in range(size)]
    return load(ids, {"pizza": ids[:3], "chicken": ids[3:6]})


CLF = Classifier([Rule("pizza", ("pizza",)), Rule("chicken", ("chicken",))])


def test_example_bucket_then_fallback():
    pool = load(["100", "200", "300"], {"pizza": ["100"]})
    items = [MenuItem("a", "Cheese Pizza"), MenuItem("b", "Pepperoni Pizza"), MenuItem("c", "Cola")]
    res = assign(items, pool, PIZZA_ONLY)
    assert res.mapping() == {"a": "100", "b": "200", "c": "300"}
    assert res.warnings == []
    assert res.is_injective
    assert res.bucket_of == {"a": "pizza", "b": "pizza", "c": None}


def test_example_forced_reuse():
    pool = load(["1"])
    items = [MenuItem("x", "Soup"), MenuItem("y", "Bread")]
    res = assign(items, pool, PIZZA_ONLY)
    assert [pid for _, pid in res.pairs] == ["1", "1"]
    assert len(res.warnings) == 1
    assert "y" in res.warnings[0] and "1" in res.warnings[0]
    assert not res.is_injective


def test_bucket_offset_rotates():
    pool = load(["p1", "p2", "p3", "z"], {"pizza": ["p1", "p2", "p3"]})
    items = [MenuItem(str(i), "Pizza") for i in range(3)]
    res = assign(items, pool, PIZZA_ONLY)
    assert [pid for _, pid in res.pairs] == ["p1", "p2", "p3"]


def test_global_scan_starts_at_position():
    pool = load(["a", "b", "c", "d"])
    items = [MenuItem("1", "x"), MenuItem("2", "y"), MenuItem("3", "z")]
    res = assign(items, pool, PIZZA_ONLY)
    assert [pid for _, pid in res.pairs] == ["a", "b", "c"]


def test_unknown_bucket_from_classifier_falls_back():
    pool = load(["a", "b"])
    res = assign([MenuItem("1", "Pizza")], pool, PIZZA_ONLY)
    assert res.pairs[0][1] == "a"
    assert res.bucket_of["1"] is None


@pytest.mark.parametrize("n", [1, 5, 9, 12])
def test_injective_when_pool_is_big_enough(n):
    res = assign(_items(n), _pool(12), CLF)
    ids = [pid for _, pid in res.pairs]
    assert len(set(ids)) == n
    assert res.warnings == []


@pytest.mark.parametrize("k", [1, 3, 10])
def test_graceful_degradation_exactly_k_warnings(k):
    pool = _pool(8)
    res = assign(_items(8 + k), pool, CLF)
    assert len(res.pairs) == 8 + k
    assert len(res.warnings) == k


def test_order_preserved_and_deterministic():
    items = _items(15)
    first = assign(items, _pool(10), CLF)
    second = assign(items, _pool(10), CLF)
    assert [it.id for it, _ in first.pairs] == [it.id for it in items]
    assert first.pairs == second.pairs
    assert first.warnings == second.warnings


def test_bucket_preference_honored_while_bucket_has_room():
    pool = _pool(12)
    res = assign(_items(10), pool, CLF)
    used = set()
    for item, pid in res.pairs:
        bucket = CLF.classify(item.name)
        members = pool.bucket(bucket)
        if members and any(m not in used for m in members):
            assert pid in members, (item, pid)
        used.add(pid)


def test_no_state_leaks_between_calls():
    pool = load(["a", "b"])
    assign([MenuItem("1", "x"), MenuItem("2", "y")], pool, PIZZA_ONLY)
    res = assign([MenuItem("1", "x")], pool, PIZZA_ONLY)
    assert res.pairs[0][1] == "a"


def test_load_items_validates_records():
    assert load_items([{"id": " u1 ", "name": "Naan"}]) == [MenuItem("u1", "Naan")]
    with pytest.raises(ConfigurationError):
        load_items([{"name": "Naan"}])
    with pytest.raises(ConfigurationError):
        load_items([{"id": "u1", "name": "  "}])
    with pytest.raises(ConfigurationError):
        load_items([{"id": "u1", "name": "A"}, {"id": "u1", "name": "B"}])
    with pytest.raises(ConfigurationError):
        load_items(["u1"])
