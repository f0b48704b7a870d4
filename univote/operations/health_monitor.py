# univote/operations/health_monitor.py
# Liveness and clock health checks

from typing import Dict

from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from univote.extensions import db
from univote.operations.time_sync import check_time_sync


def check_database() -> Dict:
    try:
        db.session.execute(text("SELECT 1"))
        return {"ok": True, "detail": "database reachable"}
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Database health probe failed: {e}")
        return {"ok": False, "error": "database unreachable"}


def check_clock() -> Dict:
    return check_time_sync(
        servers=current_app.config['NTP_SERVERS'],
        max_offset=current_app.config['MAX_TIME_OFFSET_S'],
    )


def check_health() -> Dict:
    """Aggregate liveness; the NTP probe is kept out so it stays fast."""
    database = check_database()
    return {"db": database, "overall_ok": database["ok"]}
