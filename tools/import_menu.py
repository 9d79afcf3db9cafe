# tools/import_menu.py
import os
import sys
import json
import argparse
from pathlib import Path

# 保证从项目根目录执行均可找到 menuphotos 包
THIS = Path(__file__).resolve()
ROOT = THIS.parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from menuphotos import create_app                 # noqa: E402
from menuphotos.extensions import db              # noqa: E402
from menuphotos.errors import ConfigurationError  # noqa: E402
from menuphotos.models import MenuItem            # noqa: E402
from menuphotos.services.assign import load_items  # noqa: E402


def upsert_one(rec: dict) -> str:
    """Insert or update one exported row. Returns 'new' | 'updated' | 'same'."""
    item = db.session.get(MenuItem, rec["id"])
    category = rec.get("category")
    image_url = rec.get("image_url")
    if item is None:
        db.session.add(MenuItem(id=rec["id"], name=rec["name"],
                                category=category, image_url=image_url))
        return "new"

    changed = False
    for attr, value in (("name", rec["name"]), ("category", category), ("image_url", image_url)):
        if value is not None and getattr(item, attr) != value:
            setattr(item, attr, value)
            changed = True
    return "updated" if changed else "same"


def import_file(path: str, batch_size: int = 200) -> dict:
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    if isinstance(data, dict):
        data = data.get("items")
    if not isinstance(data, list):
        raise ConfigurationError(f"{path}: expected a list of menu item records")

    # validate ids/names first; nothing is written if any record is malformed
    items = load_items(data)
    extras = {str(r.get("id")).strip(): r for r in data}

    counts = {"new": 0, "updated": 0, "same": 0}
    for i, it in enumerate(items, start=1):
        raw = extras.get(it.id, {})
        status = upsert_one({
            "id": it.id,
            "name": it.name,
            "category": raw.get("category"),
            "image_url": raw.get("image_url"),
        })
        counts[status] += 1
        if i % batch_size == 0:
            db.session.commit()
            print(f"  [import] processed {i} rows... (+{counts['new']}/upd {counts['updated']})")
    db.session.commit()
    return counts


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Load a menu_items JSON export into the local mirror table.")
    parser.add_argument("--file", default="menu_items_list.json", help="JSON export, e.g. menu_items_list.json")
    parser.add_argument("--batch-size", type=int, default=200)
    args = parser.parse_args(argv)

    if not os.path.exists(args.file):
        print(f"[ERR] file not found: {args.file}", file=sys.stderr)
        return 1

    app = create_app(light=True)  # 轻量模式
    with app.app_context():
        print(f"[import] file = {args.file}")
        print(f"[import] DB   = {app.config['SQLALCHEMY_DATABASE_URI']}")
        try:
            counts = import_file(args.file, args.batch_size)
        except (ConfigurationError, ValueError) as e:
            db.session.rollback()
            print(f"[ERR] {e}", file=sys.stderr)
            return 1

    print("=" * 60)
    print(f"[summary] inserted={counts['new']}, updated={counts['updated']}, unchanged={counts['same']}")
    print("Tip: run `python tools/assign_photos.py --from-db` to generate the photo SQL.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
