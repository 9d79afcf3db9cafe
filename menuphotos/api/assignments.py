# menuphotos/api/assignments.py
from __future__ import annotations

from flask import Blueprint, Response, current_app, jsonify

from ..auth import admin_required, current_user_id
from ..errors import ConfigurationError, EmissionValidationError
from ..logging_utils import record_audit
from ..models import MenuItem
from ..services.pipeline import generate, preview_rows, summarize
from ..services.pool import load_pool_config

bp = Blueprint("assignments", __name__, url_prefix="/api/photo-assignments")


def _run():
    """Items from the local mirror, ordered by name then id (the rotation depends on it)."""
    config = load_pool_config(current_app.config["PHOTO_POOL_CONFIG"])
    rows = MenuItem.query.order_by(MenuItem.name.asc(), MenuItem.id.asc()).all()
    sql, result = generate([r.to_record() for r in rows], config)
    return config, sql, result


def _error(e: Exception, action: str):
    current_app.logger.warning(f"[assign] {action} failed: {e}")
    record_audit(action, target_type="menu_items", status="400", level="ERROR",
                 message=str(e), user_id=current_user_id())
    return jsonify(error=str(e), kind=type(e).__name__), 400


@bp.get("/preview")
@admin_required
def preview():
    """
    GET /api/photo-assignments/preview
    Return: { items: [{id,name,bucket,photo_id,image_url}], warnings: [...], summary: {...} }
    """
    try:
        config, _sql, result = _run()
    except (ConfigurationError, EmissionValidationError) as e:
        return _error(e, "assign_preview")

    summary = summarize(result, config)
    record_audit("assign_preview", target_type="menu_items", message=f"{summary['items']} items",
                 meta=summary, user_id=current_user_id())
    return jsonify(items=preview_rows(result, config), warnings=result.warnings, summary=summary)


@bp.get("/sql")
@admin_required
def download_sql():
    """GET /api/photo-assignments/sql -> text/plain attachment"""
    try:
        config, sql, result = _run()
    except (ConfigurationError, EmissionValidationError) as e:
        return _error(e, "assign_sql")

    summary = summarize(result, config)
    record_audit("assign_sql", target_type="menu_items", message=f"{summary['items']} items",
                 meta={**summary, "reuse": result.warnings}, user_id=current_user_id())
    headers = {
        "Content-Disposition": "attachment; filename=ASSIGNED_PHOTOS.sql",
        "X-Reuse-Warnings": str(len(result.warnings)),
    }
    return Response(sql, headers=headers, mimetype="text/plain; charset=utf-8")
