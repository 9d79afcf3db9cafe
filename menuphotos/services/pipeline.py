# menuphotos/services/pipeline.py
from __future__ import annotations

from collections import Counter
from typing import Iterable, Mapping, Tuple

from ..errors import ConfigurationError
from .assign import Assignment, assign, load_items
from .classifier import Classifier
from .emit import build_photo_url, render
from .pool import PoolConfig


def generate(records: Iterable[Mapping[str, object]], config: PoolConfig) -> Tuple[str, Assignment]:
    """items -> assignment -> SQL text. No I/O; callers decide where it goes."""
    items = load_items(records)
    if not items:
        raise ConfigurationError("no menu items to assign")
    result = assign(items, config.pool, Classifier(config.rules))
    return render(result, config), result


def summarize(result: Assignment, config: PoolConfig) -> dict:
    per_bucket = Counter(b or "(fallback)" for b in result.bucket_of.values())
    return {
        "items": len(result),
        "pool_size": len(config.pool),
        "distinct_photos": len({pid for _, pid in result.pairs}),
        "injective": result.is_injective,
        "warnings": len(result.warnings),
        "buckets": dict(sorted(per_bucket.items())),
    }


def preview_rows(result: Assignment, config: PoolConfig) -> list:
    return [{
        "id": item.id,
        "name": item.name,
        "bucket": result.bucket_of.get(item.id),
        "photo_id": pid,
        "image_url": build_photo_url(pid, config.url_template, config.url_params),
    } for item, pid in result.pairs]
