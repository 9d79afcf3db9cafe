# tools/assign_photos.py
"""
Assign one stock photo per menu item and write the batch UPDATE as SQL.

  python tools/assign_photos.py --items menu_items_list.json --out ASSIGNED_PHOTOS.sql
  python tools/assign_photos.py --from-db

The SQL is only written; running it against the live store is a separate step.
Exit code: 0 on success (reuse warnings go to stderr), 1 on config/validation/write errors.
"""
import os
import sys
import json
import argparse
import pathlib

# ---- 保证能 import menuphotos 包 ----
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from menuphotos.errors import ConfigurationError, EmissionValidationError  # noqa: E402
from menuphotos.services.emit import write_atomic  # noqa: E402
from menuphotos.services.pipeline import generate, summarize  # noqa: E402
from menuphotos.services.pool import load_pool_config  # noqa: E402

DEFAULT_POOL = os.environ.get("PHOTO_POOL_CONFIG") or str(ROOT / "config" / "photo_pool.json")
DEFAULT_OUT = os.environ.get("PHOTO_SQL_OUT", "ASSIGNED_PHOTOS.sql")


def read_items_json(path: str) -> list:
    if not os.path.exists(path):
        raise ConfigurationError(f"items file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"cannot read items file {path}: {e}") from e
    if isinstance(data, dict):
        data = data.get("items")
    if not isinstance(data, list):
        raise ConfigurationError(f"{path}: expected a list of {{id, name}} records")
    return data


def read_items_db() -> list:
    """Needs an app context (see main)."""
    from menuphotos.models import MenuItem
    rows = MenuItem.query.order_by(MenuItem.name.asc(), MenuItem.id.asc()).all()
    return [r.to_record() for r in rows]


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Assign unique stock photos to menu items (SQL output).")
    ap.add_argument("--items", default="menu_items_list.json",
                    help="JSON export of [{id, name}, ...] (default: menu_items_list.json)")
    ap.add_argument("--from-db", action="store_true",
                    help="read items from the local menu_items table instead of --items")
    ap.add_argument("--pool", default=DEFAULT_POOL, help="pool config JSON (default: config/photo_pool.json)")
    ap.add_argument("--out", default=DEFAULT_OUT, help="output SQL path (default: ASSIGNED_PHOTOS.sql)")
    return ap


def run(args) -> int:
    try:
        config = load_pool_config(args.pool)
        print(f"[pool] {args.pool} (version {config.version}, "
              f"{len(config.pool)} ids, {len(config.pool.buckets)} buckets)")
        records = read_items_db() if args.from_db else read_items_json(args.items)
        print(f"[items] {len(records)} records from {'db' if args.from_db else args.items}")
        sql, result = generate(records, config)
        path = write_atomic(args.out, sql)
    except (ConfigurationError, EmissionValidationError, OSError) as e:
        print(f"[ERR] {e}", file=sys.stderr)
        if args.from_db:
            from menuphotos.logging_utils import record_audit
            record_audit("assign_cli", target_type="menu_items", status="error",
                         level="ERROR", message=str(e))
        return 1

    summary = summarize(result, config)
    if args.from_db:
        from menuphotos.logging_utils import record_audit
        record_audit("assign_cli", target_type="menu_items", message=f"wrote {path}",
                     meta={**summary, "reuse": result.warnings})
    print(f"[done] wrote {path}")
    print(f"[summary] items={summary['items']} distinct_photos={summary['distinct_photos']} "
          f"pool={summary['pool_size']} buckets={summary['buckets']}")

    if result.warnings:
        print(f"[WARN] {len(result.warnings)} photo id(s) reused, pool too small:", file=sys.stderr)
        for w in result.warnings:
            print(f"  ! {w}", file=sys.stderr)
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if not args.from_db:
        return run(args)

    from menuphotos import create_app
    app = create_app(light=True)  # DB only
    with app.app_context():
        print(f"[DB] {app.config['SQLALCHEMY_DATABASE_URI']}")
        return run(args)


if __name__ == "__main__":
    sys.exit(main())
