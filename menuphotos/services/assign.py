# menuphotos/services/assign.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from ..errors import ConfigurationError
from .pool import PhotoPool

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MenuItem:
    id: str
    name: str


def load_items(records: Iterable[Mapping[str, object]]) -> List[MenuItem]:
    """Validate raw {id, name} records. Order is kept; it drives the rotation."""
    items: List[MenuItem] = []
    seen: Set[str] = set()
    for i, rec in enumerate(records):
        if not isinstance(rec, Mapping):
            raise ConfigurationError(f"item #{i} is not an object: {rec!r}")
        iid = rec.get("id")
        name = rec.get("name")
        if iid is None or not str(iid).strip():
            raise ConfigurationError(f"item #{i} has no id: {dict(rec)!r}")
        if name is None or not str(name).strip():
            raise ConfigurationError(f"item #{i} (id={iid}) has no name")
        iid = str(iid).strip()
        if iid in seen:
            raise ConfigurationError(f"item #{i} repeats id {iid}")
        seen.add(iid)
        items.append(MenuItem(id=iid, name=str(name).strip()))
    return items


@dataclass
class Assignment:
    pairs: List[Tuple[MenuItem, str]] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    bucket_of: Dict[str, Optional[str]] = field(default_factory=dict)  # item id -> matched bucket

    @property
    def is_injective(self) -> bool:
        return len({pid for _, pid in self.pairs}) == len(self.pairs)

    def mapping(self) -> Dict[str, str]:
        return {item.id: pid for item, pid in self.pairs}

    def __len__(self) -> int:
        return len(self.pairs)


def _scan(candidates: Tuple[str, ...], start: int, used: Set[str]) -> Optional[str]:
    """First unused candidate, starting at `start` and wrapping once."""
    n = len(candidates)
    for step in range(n):
        pid = candidates[(start + step) % n]
        if pid not in used:
            return pid
    return None


def assign(items: Iterable[MenuItem],
           pool: PhotoPool,
           classifier: Callable[[str], Optional[str]]) -> Assignment:
    """
    One photo per item, in input order.
      1) classified + bucket has a free id -> take it, scanning from
         (items seen so far in that bucket) % bucket size
      2) otherwise scan the whole pool from position % pool size
      3) pool exhausted -> reuse pool[position % pool size] and record a warning
    Pure: same inputs (including order) give the same output.
    """
    if not len(pool):
        raise ConfigurationError("resource pool is empty")

    result = Assignment()
    used: Set[str] = set()
    seen_in_bucket: Dict[str, int] = {}
    ids = pool.identifiers
    total = len(ids)

    for position, item in enumerate(items):
        bucket = classifier(item.name)
        members = pool.bucket(bucket)
        pid = None

        if members:
            offset = seen_in_bucket.get(bucket, 0) % len(members)
            seen_in_bucket[bucket] = seen_in_bucket.get(bucket, 0) + 1
            pid = _scan(members, offset, used)
        elif bucket is not None:
            # classifier produced a name the pool does not declare
            bucket = None

        if pid is None:
            pid = _scan(ids, position % total, used)

        if pid is None:
            pid = ids[position % total]
            msg = (f"item {item.id} ({item.name}) reuses photo {pid}: "
                   f"pool has {total} ids")
            result.warnings.append(msg)
            log.warning("[assign] %s", msg)

        used.add(pid)
        result.pairs.append((item, pid))
        result.bucket_of[item.id] = bucket

    return result
