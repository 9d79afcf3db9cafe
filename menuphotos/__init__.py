import os
import logging
from importlib import import_module
from flask import Flask, jsonify

from .extensions import db, jwt

# service warnings stay silent until an app or CLI configures handlers
logging.getLogger(__name__).addHandler(logging.NullHandler())

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def _sqlite_uri(path: str) -> str:
    return "sqlite:///" + os.path.abspath(path).replace("\\", "/")


def create_app(light: bool = False, config: dict | None = None):
    """
    light=True: DB only (CLI tools); no blueprints, no file logging.
    config: overrides applied after the environment defaults (tests).
    """
    app = Flask(__name__)

    # ---------- Core config ----------
    app.config["SECRET_KEY"] = os.environ.get("SECRET_KEY", "dev-secret")
    app.config["JWT_SECRET_KEY"] = os.environ.get("JWT_SECRET_KEY", "dev-jwt-secret")
    os.makedirs(app.instance_path, exist_ok=True)

    # 菜单镜像库，默认 instance/menu.db；也兼容外部传入 DATABASE_URL
    app.config["SQLALCHEMY_DATABASE_URI"] = os.environ.get(
        "DATABASE_URL", _sqlite_uri(os.path.join(app.instance_path, "menu.db"))
    )
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False

    # 单独的认证库（auth.db），可通过 AUTH_DB 覆盖
    auth_db_file = os.environ.get("AUTH_DB", os.path.join(app.instance_path, "auth.db"))
    app.config["SQLALCHEMY_BINDS"] = {"auth": _sqlite_uri(auth_db_file)}

    # photo pool config + default output artifact
    app.config["PHOTO_POOL_CONFIG"] = os.path.abspath(
        os.environ.get("PHOTO_POOL_CONFIG")
        or os.path.join(PROJECT_ROOT, "config", "photo_pool.json")
    )
    app.config["PHOTO_SQL_OUT"] = os.environ.get("PHOTO_SQL_OUT", "ASSIGNED_PHOTOS.sql")
    app.config["PEXELS_API_KEY"] = os.environ.get("PEXELS_API_KEY", "")

    app.config["LOG_DIR"] = os.environ.get("LOG_DIR")
    app.config["LOG_LEVEL"] = os.environ.get("LOG_LEVEL", "INFO")
    app.config["LOG_MAX_BYTES"] = int(os.environ.get("LOG_MAX_BYTES", 10 * 1024 * 1024))
    app.config["LOG_BACKUP_COUNT"] = int(os.environ.get("LOG_BACKUP_COUNT", 5))

    if config:
        app.config.update(config)

    db.init_app(app)
    jwt.init_app(app)

    with app.app_context():
        from . import models, models_user  # noqa: F401
        db.create_all()

    env_light = os.environ.get("LIGHT_MODE") == "1"
    if light or env_light:
        return app

    from .logging_utils import configure_file_logging
    configure_file_logging(app)

    # ---------- Blueprints ----------
    def _register(dotted: str):
        mod = import_module(dotted, __name__)
        bp = getattr(mod, "bp", None)
        if bp is None:
            app.logger.warning(f"[blueprint] {dotted} has no 'bp'")
            return
        if bp.name in app.blueprints:
            app.logger.info(f"[blueprint] skip duplicate: {bp.name}")
            return
        app.register_blueprint(bp)
        app.logger.info(f"[blueprint] registered: {bp.name}")

    _register(".auth")
    _register(".api.assignments")
    _register(".api.maintenance")

    @app.get("/health")
    def health():
        return jsonify(ok=True)

    return app
