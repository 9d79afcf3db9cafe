# menuphotos/logging_utils.py
from __future__ import annotations
import os, json, logging
from logging.handlers import RotatingFileHandler
from datetime import datetime, timezone
from flask import current_app, request, has_request_context
from sqlalchemy.exc import SQLAlchemyError

from .extensions import db
from .models import AuditLog


def _attach(logger, handler):
    """Add handler; an older rotating handler for the same file name is closed and dropped."""
    name = os.path.basename(handler.baseFilename)
    for old in list(logger.handlers):
        if old is handler or not isinstance(old, RotatingFileHandler):
            continue
        if os.path.basename(old.baseFilename) == name:
            logger.removeHandler(old)
            old.close()
    logger.addHandler(handler)


# ---------- 文件日志（轮转） ----------
def configure_file_logging(app):
    log_dir = app.config.get("LOG_DIR") or os.path.join(app.instance_path, "logs")
    os.makedirs(log_dir, exist_ok=True)

    max_bytes = int(app.config.get("LOG_MAX_BYTES", 10 * 1024 * 1024))  # 10MB
    backup = int(app.config.get("LOG_BACKUP_COUNT", 5))
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)

    fmt = logging.Formatter(
        "[%(asctime)s] %(levelname)s in %(module)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S%z",
    )

    # app.log（通用）
    app_handler = RotatingFileHandler(os.path.join(log_dir, "app.log"),
                                      maxBytes=max_bytes, backupCount=backup, encoding="utf-8")
    app_handler.setLevel(level); app_handler.setFormatter(fmt)
    _attach(app.logger, app_handler)
    app.logger.setLevel(level)

    # services use module loggers under "menuphotos.*"
    pkg_log = logging.getLogger("menuphotos")
    pkg_log.setLevel(level)
    _attach(pkg_log, app_handler)

    # error.log（告警及以上）
    err_handler = RotatingFileHandler(os.path.join(log_dir, "error.log"),
                                      maxBytes=max_bytes, backupCount=backup, encoding="utf-8")
    err_handler.setLevel(logging.WARNING); err_handler.setFormatter(fmt)
    _attach(app.logger, err_handler)
    _attach(pkg_log, err_handler)

    # audit.log
    audit_handler = RotatingFileHandler(os.path.join(log_dir, "audit.log"),
                                        maxBytes=max_bytes, backupCount=backup, encoding="utf-8")
    audit_handler.setLevel(logging.INFO); audit_handler.setFormatter(fmt)
    app.audit_logger = logging.getLogger("menuphotos.audit")
    app.audit_logger.setLevel(logging.INFO)
    _attach(app.audit_logger, audit_handler)

    app.logger.info("File logging configured: %s", log_dir)


# ---------- 审计 ----------
def _remote_ip():
    xf = request.headers.get("X-Forwarded-For")
    return (xf.split(",")[0].strip() if xf else request.remote_addr) or "unknown"


def record_audit(action: str,
                 target_type: str | None = None,
                 target_id: str | None = None,
                 status: str | None = "200",
                 level: str = "INFO",
                 message: str | None = None,
                 meta: dict | None = None,
                 user_id: int | None = None) -> AuditLog | None:
    """Persist one audit row. Failures are logged and rolled back, never raised."""
    in_req = has_request_context()
    log = AuditLog(
        user_id=user_id,
        action=action,
        level=level,
        status=str(status),
        target_type=target_type,
        target_id=target_id,
        ip=_remote_ip() if in_req else None,
        ua=(request.user_agent.string[:256] if in_req else None),
        message=(message or "")[:512],
        meta_json=json.dumps(meta or {}, ensure_ascii=False),
        created_at=datetime.now(timezone.utc),
    )
    try:
        db.session.add(log)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.warning(f"[audit] write failed: {e}")
        return None

    audit_logger = getattr(current_app, "audit_logger", None)
    if audit_logger is not None:
        audit_logger.info("%s status=%s %s", action, status, message or "")
    return log
