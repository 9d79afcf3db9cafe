import pytest

from menuphotos.errors import ConfigurationError
from menuphotos.services.classifier import Classifier, Rule, classify, rules_from_config


@pytest.mark.parametrize("name,bucket", [
    ("Margherita Pizza 10\"", "pizza"),
    ("Beef Burger", "burger"),
    ("Chicken Chowmein", "pasta"),
    ("Chicken Biryani", "chicken"),
    ("Chicken Fried Rice", "rice"),
    ("Hilsa Fish Curry", "fish"),
    ("Prawn Fish Fry", "prawn"),
    ("Tandoori Chicken", "kabab"),
    ("Mutton Rezala", "beef"),
    ("Thai Soup", "soup"),
    ("Greek Salad", "salad"),
])
def test_default_priority(name, bucket):
    assert classify(name) == bucket


def test_no_match_is_none():
    assert classify("Coca Cola 250ml") is None
    assert classify("") is None


def test_case_insensitive():
    assert classify("CHEESE PIZZA") == "pizza"


def test_first_rule_wins():
    clf = Classifier([Rule("a", ("x",)), Rule("b", ("x", "y"))])
    assert clf.classify("x and y") == "a"
    assert clf("only y") == "b"
    assert clf.buckets == ["a", "b"]


def test_rules_from_config_lowercases_keywords():
    rules = rules_from_config([{"bucket": "pizza", "keywords": [" Pizza "], "exclude": ["NOT"]}])
    assert rules == (Rule("pizza", ("pizza",), ("not",)),)


@pytest.mark.parametrize("raw", [
    [{"keywords": ["pizza"]}],
    [{"bucket": "pizza", "keywords": []}],
    ["pizza"],
    [{"bucket": "pizza", "keywords": "pizza"}],
    [{"bucket": "pizza", "keywords": ["pizza"], "exclude": "fried rice"}],
    {"bucket": "pizza", "keywords": ["pizza"]},
])
def test_rules_from_config_rejects_bad_entries(raw):
    with pytest.raises(ConfigurationError):
        rules_from_config(raw)
