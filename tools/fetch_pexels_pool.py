# tools/fetch_pexels_pool.py
import os
import sys
import json
import argparse
import logging
from datetime import date
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from menuphotos.errors import ConfigurationError             # noqa: E402
from menuphotos.services import pexels as PX                 # noqa: E402
from menuphotos.services.pool import config_from_dict        # noqa: E402


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Fetch real photo ids from the Pexels API into a pool config.")
    parser.add_argument("--out", default=str(ROOT / "config" / "photo_pool.pexels.json"),
                        help="where to write the pool config JSON")
    parser.add_argument("--rules-from", default=str(ROOT / "config" / "photo_pool.json"),
                        help="copy the keyword rules from this config (default: config/photo_pool.json)")
    parser.add_argument("--version", default=date.today().isoformat(), help="config version tag")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    api_key = os.environ.get("PEXELS_API_KEY", "")
    if not api_key:
        print("[ERR] PEXELS_API_KEY is not set", file=sys.stderr)
        return 1

    ids, buckets = PX.fetch_pool(api_key)
    print(f"[pexels] unique photo ids: {len(ids)}")

    rules = None
    if args.rules_from and os.path.exists(args.rules_from):
        with open(args.rules_from, "r", encoding="utf-8") as fh:
            rules = json.load(fh).get("rules")
        if rules is not None:
            rules = [r for r in rules if r.get("bucket") in buckets]

    doc = PX.pool_document(ids, buckets, version=args.version, rules=rules)
    try:
        config_from_dict(doc)  # refuse to write a config the assigner would reject
    except ConfigurationError as e:
        print(f"[ERR] fetched pool is not usable: {e}", file=sys.stderr)
        return 1

    os.makedirs(os.path.dirname(os.path.abspath(args.out)), exist_ok=True)
    with open(args.out, "w", encoding="utf-8") as fh:
        json.dump(doc, fh, indent=2, ensure_ascii=False)
    print(f"[done] wrote {args.out} ({len(ids)} ids, {len(buckets)} buckets)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
