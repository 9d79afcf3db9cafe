# menuphotos/api/maintenance.py
from flask import Blueprint, jsonify
from sqlalchemy import func

from ..auth import admin_required
from ..extensions import db
from ..models import MenuItem

bp = Blueprint("maintenance", __name__)


@bp.get("/api/maintenance/_counts")
@admin_required
def counts():
    """Same numbers as the verification queries, computed on the local mirror."""
    total = db.session.query(func.count(MenuItem.id)).scalar() or 0
    with_images = db.session.query(func.count(MenuItem.image_url)).scalar() or 0
    distinct_urls = db.session.query(func.count(func.distinct(MenuItem.image_url))).scalar() or 0

    dup_rows = (
        db.session.query(MenuItem.image_url, func.count(MenuItem.id))
        .filter(MenuItem.image_url.isnot(None))
        .group_by(MenuItem.image_url)
        .having(func.count(MenuItem.id) > 1)
        .order_by(func.count(MenuItem.id).desc(), MenuItem.image_url.asc())
        .all()
    )
    return jsonify(
        total_items=total,
        items_with_images=with_images,
        unique_image_urls=distinct_urls,
        duplicate_urls=with_images - distinct_urls,
        reused=[{"image_url": url, "times_used": n} for url, n in dup_rows],
    )
