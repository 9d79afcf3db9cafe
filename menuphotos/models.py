# menuphotos/models.py
from __future__ import annotations

from datetime import datetime

from .extensions import db


# NOTE:
# Admin users live in a separate database/bind (see menuphotos/models_user.py).
# This file only contains the menu-side models that live in the primary DB.


class MenuItem(db.Model):
    """
    Local mirror of the hosted `menu_items` table.
    ids are the opaque (uuid) strings of the hosted store, not autoincrement.
    """
    __tablename__ = "menu_items"

    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(64), index=True, nullable=True, default=None)
    image_url = db.Column(db.String(1024), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<MenuItem id={self.id} name={self.name!r}>"

    def to_record(self) -> dict:
        """Shape expected by services.assign.load_items()."""
        return {"id": self.id, "name": self.name}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "image_url": self.image_url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class AuditLog(db.Model):
    __tablename__ = "audit_log"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, index=True)
    action = db.Column(db.String(64))
    level = db.Column(db.String(16), default="INFO")
    status = db.Column(db.String(16))
    target_type = db.Column(db.String(64))
    target_id = db.Column(db.String(64))
    ip = db.Column(db.String(128))
    ua = db.Column(db.String(256))
    message = db.Column(db.String(512))
    meta_json = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<AuditLog id={self.id} action={self.action} status={self.status}>"
