import os

import pytest

from menuphotos.errors import EmissionValidationError
from menuphotos.services.assign import Assignment, MenuItem, assign
from menuphotos.services.classifier import Classifier, Rule
from menuphotos.services.emit import build_photo_url, render, write_atomic
from menuphotos.services.pool import PoolConfig, config_from_dict, load


def _config(**kw):
    base = {"identifiers": ["100", "200", "300"], "buckets": {"pizza": ["100"]},
            "rules": [{"bucket": "pizza", "keywords": ["pizza"]}]}
    base.update(kw)
    return config_from_dict(base)


def _result(config, items):
    return assign(items, config.pool, Classifier(config.rules))


ITEMS = [
    MenuItem("a1b2c3d4-0000-4000-8000-000000000001", "Cheese Pizza"),
    MenuItem("a1b2c3d4-0000-4000-8000-000000000002", "Cola"),
]


def test_build_photo_url_default_template():
    assert build_photo_url("825661") == (
        "https://images.pexels.com/photos/825661/pexels-photo-825661.jpeg"
        "?auto=compress&cs=tinysrgb&w=800&h=600"
    )


def test_build_photo_url_missing_param():
    with pytest.raises(EmissionValidationError):
        build_photo_url("1", "https://x/{photo_id}?q={quality}")


def test_render_has_one_branch_per_item_and_verification_queries():
    cfg = _config()
    sql = render(_result(cfg, ITEMS), cfg)
    assert sql.count("    WHEN id = '") == 2
    assert "WHEN id = 'a1b2c3d4-0000-4000-8000-000000000001' THEN " \
           "'https://images.pexels.com/photos/100/pexels-photo-100.jpeg" in sql
    assert "UPDATE menu_items" in sql
    assert "ELSE image_url" in sql
    assert "WHERE id IN (" in sql
    assert "COUNT(DISTINCT image_url) AS unique_image_urls" in sql
    assert "HAVING COUNT(*) > 1" in sql
    assert "--   pizza: 1 items" in sql
    assert "-- Photo IDs reused: 0" in sql


def test_render_is_byte_identical_across_runs():
    cfg = _config()
    assert render(_result(cfg, ITEMS), cfg) == render(_result(cfg, ITEMS), cfg)


@pytest.mark.parametrize("bad_id", ["x'; DROP TABLE menu_items; --", "a b", "", "-x", "id\\1"])
def test_render_rejects_unsafe_item_ids(bad_id):
    cfg = _config()
    res = Assignment(pairs=[(MenuItem(bad_id, "Pizza"), "100")], bucket_of={bad_id: None})
    with pytest.raises(EmissionValidationError):
        render(res, cfg)


def test_render_rejects_unsafe_url():
    cfg = _config(url_template="https://x/{photo_id}?n='o'")
    with pytest.raises(EmissionValidationError):
        render(_result(cfg, ITEMS), cfg)


def test_render_rejects_unsafe_table():
    cfg = _config(table="menu_items; --")
    with pytest.raises(EmissionValidationError):
        render(_result(cfg, ITEMS), cfg)


def test_render_custom_table_and_columns():
    cfg = _config(table="public.menu_items", url_column="photo_url")
    sql = render(_result(cfg, ITEMS), cfg)
    assert "UPDATE public.menu_items\nSET photo_url =" in sql
    assert "ELSE photo_url" in sql


def test_render_empty_assignment():
    cfg = PoolConfig(pool=load(["1"]))
    with pytest.raises(EmissionValidationError):
        render(Assignment(), cfg)


def test_write_atomic(tmp_path):
    target = tmp_path / "out" / "photos.sql"
    path = write_atomic(str(target), "SELECT 1;\n")
    assert path == str(target)
    assert target.read_text(encoding="utf-8") == "SELECT 1;\n"
    assert [p for p in os.listdir(target.parent) if p.startswith(".tmp_")] == []
