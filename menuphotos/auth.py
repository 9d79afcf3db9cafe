# menuphotos/auth.py
from __future__ import annotations

from functools import wraps

from flask import Blueprint, request, jsonify
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    jwt_required,
    get_jwt_identity,
    get_jwt,
    verify_jwt_in_request,
)

from .extensions import db
from .models_user import User

bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _access_token_for(user: User) -> str:
    return create_access_token(
        identity=str(user.id),
        additional_claims={"email": user.email, "role": user.role},
    )


def admin_required(fn):
    """jwt_required() + role claim must be 'admin'."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        if get_jwt().get("role") != "admin":
            return jsonify(error="admin only"), 403
        return fn(*args, **kwargs)
    return wrapper


def current_user_id() -> int | None:
    uid = get_jwt_identity()
    try:
        return int(uid) if uid is not None else None
    except (TypeError, ValueError):
        return None


@bp.post("/login")
def login():
    """
    POST /api/auth/login
    JSON: { "email": ".", "password": "." }
    Return: { "access_token", "refresh_token", "user": {id,email,role,...} }
    """
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    if not email or not password:
        return jsonify(error="email and password required"), 400

    user = User.query.filter_by(email=email).first()
    if not user or not user.check_password(password):
        return jsonify(error="invalid credentials"), 401

    return jsonify(
        ok=True,
        access_token=_access_token_for(user),
        refresh_token=create_refresh_token(identity=str(user.id)),
        user=user.to_public(),
    )


@bp.get("/me")
@jwt_required()
def me():
    uid = current_user_id()
    user = db.session.get(User, uid) if uid is not None else None
    if not user:
        return jsonify(error="user not found"), 404
    return jsonify(user=user.to_public(), jwt=get_jwt())


@bp.post("/refresh")
@jwt_required(refresh=True)
def refresh():
    uid = current_user_id()
    user = db.session.get(User, uid) if uid is not None else None
    if not user:
        return jsonify(error="user not found"), 404
    return jsonify(ok=True, access_token=_access_token_for(user))
