# menuphotos/services/pexels.py
"""
Build a photo pool from the Pexels search API.

Each search query feeds one bucket; the pool is the stable-deduplicated
union of all results. A failed query is logged and skipped so one bad
search term does not lose the rest of the run.
"""
from __future__ import annotations

import logging
import time
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import requests

from .pool import stable_dedup

log = logging.getLogger(__name__)

SEARCH_URL = "https://api.pexels.com/v1/search"

# (query, count, bucket)
DEFAULT_QUERIES: Tuple[Tuple[str, int, str], ...] = (
    ("pizza", 25, "pizza"),
    ("burger", 20, "burger"),
    ("hamburger", 10, "burger"),
    ("pasta", 15, "pasta"),
    ("noodles", 15, "pasta"),
    ("fried chicken", 20, "chicken"),
    ("grilled chicken", 15, "chicken"),
    ("chicken curry", 10, "chicken"),
    ("beef steak", 15, "beef"),
    ("beef curry", 10, "beef"),
    ("fish fillet", 15, "fish"),
    ("grilled fish", 10, "fish"),
    ("seafood", 10, "prawn"),
    ("fried rice", 15, "rice"),
    ("biryani", 10, "rice"),
    ("soup bowl", 10, "soup"),
    ("salad", 10, "salad"),
    ("kebab", 10, "kabab"),
)


def search_photo_ids(query: str, per_page: int, api_key: str,
                     session: Optional[requests.Session] = None,
                     timeout: float = 15.0) -> List[str]:
    http = session or requests
    resp = http.get(
        SEARCH_URL,
        params={"query": query, "per_page": int(per_page), "orientation": "landscape"},
        headers={"Authorization": api_key},
        timeout=timeout,
    )
    resp.raise_for_status()
    data = resp.json() or {}
    return [str(p["id"]) for p in data.get("photos", []) if p.get("id") is not None]


def fetch_pool(api_key: str,
               queries: Iterable[Tuple[str, int, str]] = DEFAULT_QUERIES,
               session: Optional[requests.Session] = None,
               pause: float = 0.1) -> Tuple[List[str], Dict[str, List[str]]]:
    """Returns (identifiers, buckets) ready for pool.load()."""
    all_ids: List[str] = []
    buckets: Dict[str, List[str]] = {}
    for query, count, bucket in queries:
        try:
            ids = search_photo_ids(query, count, api_key, session=session)
        except (requests.RequestException, ValueError, KeyError) as e:
            log.warning("[pexels] skip %r: %s", query, e)
            continue
        log.info("[pexels] %r: %d photos", query, len(ids))
        all_ids.extend(ids)
        buckets.setdefault(bucket, []).extend(ids)
        if pause > 0:
            time.sleep(pause)  # rate limit

    pool = stable_dedup(all_ids)
    return pool, {name: stable_dedup(ids) for name, ids in buckets.items() if ids}


def pool_document(identifiers: List[str], buckets: Mapping[str, List[str]],
                  version: str, rules: Optional[list] = None) -> dict:
    """JSON document in the shape load_pool_config() reads."""
    doc = {
        "version": version,
        "source": "pexels",
        "identifiers": list(identifiers),
        "buckets": {k: list(v) for k, v in buckets.items()},
    }
    if rules is not None:
        doc["rules"] = rules
    return doc
