# menuphotos/services/emit.py
from __future__ import annotations

import os
import re
import tempfile
from collections import Counter
from typing import List, Mapping, Optional

from ..errors import EmissionValidationError
from .assign import Assignment
from .pool import DEFAULT_URL_PARAMS, DEFAULT_URL_TEMPLATE, PoolConfig

# uuid / slug style ids only; anything else is rejected rather than escaped
_SAFE_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.:\-]*$")
_SAFE_IDENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")
_UNSAFE_URL = re.compile(r"['\\\s;]|--")

RULE = "-- " + "=" * 53


def build_photo_url(photo_id: str,
                    template: str = DEFAULT_URL_TEMPLATE,
                    params: Optional[Mapping[str, object]] = None) -> str:
    values = dict(DEFAULT_URL_PARAMS)
    values.update(params or {})
    values["photo_id"] = photo_id
    try:
        return template.format(**values)
    except (KeyError, IndexError) as e:
        raise EmissionValidationError(f"url_template needs a value for {e}") from e


def _check_ident(value: str, what: str) -> str:
    if not _SAFE_IDENT.match(value or ""):
        raise EmissionValidationError(f"unsafe SQL identifier for {what}: {value!r}")
    return value


def _check_item_id(item_id: str, name: str) -> str:
    if not _SAFE_ID.match(item_id or ""):
        raise EmissionValidationError(f"item id {item_id!r} ({name}) is unsafe for a SQL literal")
    return item_id


def _check_url(url: str, item_id: str) -> str:
    if _UNSAFE_URL.search(url):
        raise EmissionValidationError(f"photo url for item {item_id} is unsafe for a SQL literal: {url!r}")
    return url


def render(assignment: Assignment, config: PoolConfig) -> str:
    """
    UPDATE ... CASE with one branch per item, then verification queries.
    Every value is validated before any text is produced; no timestamps so
    identical input gives byte-identical output.
    """
    if not assignment.pairs:
        raise EmissionValidationError("nothing to emit: assignment is empty")

    table = _check_ident(config.table, "table")
    id_col = _check_ident(config.id_column, "id column")
    url_col = _check_ident(config.url_column, "url column")
    name_col = _check_ident(config.name_column, "name column")

    branches: List[str] = []
    in_list: List[str] = []
    for item, photo_id in assignment.pairs:
        iid = _check_item_id(item.id, item.name)
        url = _check_url(build_photo_url(photo_id, config.url_template, config.url_params), iid)
        branches.append(f"    WHEN {id_col} = '{iid}' THEN '{url}'")
        in_list.append(f"  '{iid}'")

    used = Counter(pid for _, pid in assignment.pairs)
    reused = sum(1 for c in used.values() if c > 1)
    per_bucket = Counter(b or "(fallback)" for b in assignment.bucket_of.values())

    head = [
        RULE,
        "-- MENU PHOTO ASSIGNMENT",
        RULE,
        f"-- Pool config version: {config.version}",
        f"-- Photo IDs available: {len(config.pool)}",
        f"-- Menu items: {len(assignment.pairs)}",
        f"-- Distinct photo IDs assigned: {len(used)}",
        f"-- Photo IDs reused: {reused}",
    ]
    for bucket in sorted(per_bucket):
        head.append(f"--   {bucket}: {per_bucket[bucket]} items")
    head += [RULE, ""]

    update = [
        f"UPDATE {table}",
        f"SET {url_col} =",
        "  CASE",
        *branches,
        f"    ELSE {url_col}",
        "  END",
        f"WHERE {id_col} IN (",
        ",\n".join(in_list),
        ");",
        "",
    ]

    verify = [
        RULE,
        "-- VERIFICATION QUERIES",
        RULE,
        "",
        "-- Totals: unique_image_urls should equal items_with_images",
        "SELECT",
        "  COUNT(*) AS total_items,",
        f"  COUNT({url_col}) AS items_with_images,",
        f"  COUNT(DISTINCT {url_col}) AS unique_image_urls,",
        f"  COUNT({url_col}) - COUNT(DISTINCT {url_col}) AS duplicate_urls",
        f"FROM {table};",
        "",
        "-- Image URLs used more than once (should be empty)",
        "SELECT",
        f"  {url_col},",
        "  COUNT(*) AS times_used,",
        f"  STRING_AGG({name_col}, ' | ') AS items_using_this_photo",
        f"FROM {table}",
        f"WHERE {url_col} IS NOT NULL",
        f"GROUP BY {url_col}",
        "HAVING COUNT(*) > 1",
        "ORDER BY times_used DESC;",
        "",
        "-- Sample",
        f"SELECT {name_col}, {url_col}",
        f"FROM {table}",
        f"WHERE {url_col} IS NOT NULL",
        f"ORDER BY {name_col}",
        "LIMIT 10;",
        "",
    ]
    return "\n".join(head + update + verify)


def write_atomic(path: str, text: str) -> str:
    """Write via temp file + rename; a failed run never leaves half a file."""
    path = os.path.abspath(path)
    folder = os.path.dirname(path)
    os.makedirs(folder, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".tmp_", suffix=".sql", dir=folder)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as fh:
            fh.write(text)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise
    return path
