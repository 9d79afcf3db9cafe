import json

from menuphotos.extensions import db
from menuphotos.models import MenuItem
from tools import import_menu


def test_import_is_idempotent(test_app, tmp_path):
    path = tmp_path / "menu.json"
    path.write_text(json.dumps([
        {"id": "u1", "name": "Cheese Pizza", "category": "Pizza"},
        {"id": "u2", "name": "Cola", "image_url": "https://x/1.jpg"},
    ]), encoding="utf-8")

    with test_app.app_context():
        first = import_menu.import_file(str(path))
        second = import_menu.import_file(str(path))
        assert first == {"new": 2, "updated": 0, "same": 0}
        assert second == {"new": 0, "updated": 0, "same": 2}
        assert db.session.get(MenuItem, "u2").image_url == "https://x/1.jpg"


def test_import_updates_changed_names(test_app, tmp_path):
    path = tmp_path / "menu.json"
    path.write_text(json.dumps([{"id": "u1", "name": "Pizza"}]), encoding="utf-8")
    with test_app.app_context():
        import_menu.import_file(str(path))
        path.write_text(json.dumps({"items": [{"id": "u1", "name": "Cheese Pizza"}]}), encoding="utf-8")
        assert import_menu.import_file(str(path)) == {"new": 0, "updated": 1, "same": 0}
        assert db.session.get(MenuItem, "u1").name == "Cheese Pizza"


def test_import_cli_rejects_malformed(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'imp.db'}")
    monkeypatch.setenv("AUTH_DB", str(tmp_path / "imp_auth.db"))
    path = tmp_path / "menu.json"
    path.write_text(json.dumps([{"id": "u1"}]), encoding="utf-8")
    assert import_menu.main(["--file", str(path)]) == 1
    assert "[ERR]" in capsys.readouterr().err
    assert import_menu.main(["--file", str(tmp_path / "nope.json")]) == 1
