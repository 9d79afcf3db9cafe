# menuphotos/services/pool.py
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..errors import ConfigurationError
from .classifier import DEFAULT_RULES, Rule, rules_from_config

DEFAULT_URL_TEMPLATE = (
    "https://images.pexels.com/photos/{photo_id}/pexels-photo-{photo_id}.jpeg"
    "?auto=compress&cs=tinysrgb&w={width}&h={height}"
)
DEFAULT_URL_PARAMS: Dict[str, object] = {"width": 800, "height": 600}


def stable_dedup(values: Iterable[str]) -> List[str]:
    """Drop repeats, keep first-seen order (not sort based)."""
    out: List[str] = []
    seen = set()
    for v in values:
        if v in seen:
            continue
        seen.add(v)
        out.append(v)
    return out


@dataclass(frozen=True)
class PhotoPool:
    identifiers: Tuple[str, ...]
    buckets: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)

    def bucket(self, name: Optional[str]) -> Tuple[str, ...]:
        if not name:
            return ()
        return self.buckets.get(name, ())

    def __len__(self) -> int:
        return len(self.identifiers)

    def __contains__(self, photo_id: object) -> bool:
        return photo_id in self.identifiers

    def __repr__(self) -> str:
        return f"<PhotoPool size={len(self.identifiers)} buckets={len(self.buckets)}>"


def _as_identifier(raw: object, where: str) -> str:
    # JSON 里 id 可能写成数字；int 在 bucket 里表示下标，所以这里只接受字符串
    if isinstance(raw, bool) or not isinstance(raw, str):
        raise ConfigurationError(f"{where}: identifier must be a string, got {raw!r}")
    s = raw.strip()
    if not s:
        raise ConfigurationError(f"{where}: blank identifier")
    return s


def _resolve_slice(bounds: object, ids: List[str], where: str) -> List[str]:
    """{"slice": [start, end]} -> ids[start:end]; bounds must lie inside the pool."""
    if (not isinstance(bounds, Sequence) or isinstance(bounds, str) or len(bounds) != 2
            or not all(isinstance(b, int) and not isinstance(b, bool) for b in bounds)):
        raise ConfigurationError(f"{where}: slice must be [start, end], got {bounds!r}")
    start, end = bounds
    if not 0 <= start < end <= len(ids):
        raise ConfigurationError(f"{where}: slice {start}:{end} outside pool of {len(ids)}")
    return ids[start:end]


def load(raw_identifiers: Sequence[str],
         buckets: Optional[Mapping[str, Sequence[object]]] = None) -> PhotoPool:
    """
    Build the pool.
      - identifiers are deduplicated, first-seen order preserved
      - bucket entries are identifiers (str), indices (int) or {"slice": [start, end]}
        into the deduplicated pool
      - any dangling reference is a ConfigurationError (catches curation typos)
    Buckets may overlap; they are views, not partitions.
    """
    # a bare string would be iterated per character
    if isinstance(raw_identifiers, (str, bytes)) or not isinstance(raw_identifiers, (Sequence, type(None))):
        raise ConfigurationError(f"identifiers must be a list, got {type(raw_identifiers).__name__}")
    if buckets is not None and not isinstance(buckets, Mapping):
        raise ConfigurationError(f"buckets must be an object of name -> list, got {type(buckets).__name__}")

    ids = stable_dedup(_as_identifier(x, f"identifiers[{i}]") for i, x in enumerate(raw_identifiers or ()))
    if not ids:
        raise ConfigurationError("resource pool is empty")

    known = set(ids)
    resolved: Dict[str, Tuple[str, ...]] = {}
    for name, entries in (buckets or {}).items():
        if not str(name).strip():
            raise ConfigurationError("bucket with blank name")
        if isinstance(entries, (str, bytes)) or not isinstance(entries, Sequence):
            raise ConfigurationError(f"bucket {name!r} must be a list")
        members: List[str] = []
        for j, entry in enumerate(entries):
            where = f"bucket {name!r}[{j}]"
            if isinstance(entry, Mapping) and "slice" in entry:
                members.extend(_resolve_slice(entry["slice"], ids, where))
                continue
            if isinstance(entry, int) and not isinstance(entry, bool):
                if not 0 <= entry < len(ids):
                    raise ConfigurationError(f"{where}: index {entry} out of range (pool size {len(ids)})")
                members.append(ids[entry])
                continue
            pid = _as_identifier(entry, where)
            if pid not in known:
                raise ConfigurationError(f"{where}: identifier {pid!r} is not in the pool")
            members.append(pid)
        members = stable_dedup(members)
        if not members:
            raise ConfigurationError(f"bucket {name!r} is empty")
        resolved[str(name)] = tuple(members)

    return PhotoPool(identifiers=tuple(ids), buckets=resolved)


# ---------------------------------------------------------------------
# Versioned config file
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class PoolConfig:
    pool: PhotoPool
    rules: Tuple[Rule, ...] = DEFAULT_RULES
    version: str = "1"
    url_template: str = DEFAULT_URL_TEMPLATE
    url_params: Mapping[str, object] = field(default_factory=lambda: dict(DEFAULT_URL_PARAMS))
    table: str = "menu_items"
    id_column: str = "id"
    url_column: str = "image_url"
    name_column: str = "name"


def config_from_dict(data: Mapping[str, object]) -> PoolConfig:
    """
    {
      "version": "2025-11-01",
      "identifiers": ["315755", ...],
      "buckets": {"pizza": ["315755", 3, ...]},
      "rules": [{"bucket": "pizza", "keywords": ["pizza"]}],
      "url_template": "...{photo_id}...", "url_params": {"width": 800, "height": 600},
      "table": "menu_items"
    }
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError("pool config must be a JSON object")

    pool = load(data.get("identifiers") or [], data.get("buckets") or {})
    if data.get("rules") is None:
        # no explicit rules: built-in priority list, limited to the declared buckets
        rules = tuple(r for r in DEFAULT_RULES if r.bucket in pool.buckets)
    else:
        rules = rules_from_config(data.get("rules"))
        for r in rules:
            if r.bucket not in pool.buckets:
                raise ConfigurationError(f"rule for {r.bucket!r} references an undeclared bucket")

    template = str(data.get("url_template") or DEFAULT_URL_TEMPLATE)
    if "{photo_id}" not in template:
        raise ConfigurationError("url_template must contain {photo_id}")
    raw_params = data.get("url_params") or {}
    if not isinstance(raw_params, Mapping):
        raise ConfigurationError(f"url_params must be an object, got {type(raw_params).__name__}")
    params = dict(DEFAULT_URL_PARAMS)
    params.update(raw_params)

    return PoolConfig(
        pool=pool,
        rules=rules,
        version=str(data.get("version") or "1"),
        url_template=template,
        url_params=params,
        table=str(data.get("table") or "menu_items"),
        id_column=str(data.get("id_column") or "id"),
        url_column=str(data.get("url_column") or "image_url"),
        name_column=str(data.get("name_column") or "name"),
    )


def load_pool_config(path: str) -> PoolConfig:
    if not path or not os.path.exists(path):
        raise ConfigurationError(f"pool config not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"cannot read pool config {path}: {e}") from e
    return config_from_dict(data)
