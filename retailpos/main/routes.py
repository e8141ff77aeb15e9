"""
retailpos/main/routes.py
────────────────────────
Health check for load balancers and monitoring.
"""
from datetime import datetime

from flask import current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from retailpos import db
from retailpos.main import main


@main.route("/health")
def health():
    status = "ok"
    failures = []

    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        status = "error"
        failures.append(f"DB: {e}")
        current_app.logger.error(f"Health check failed (DB): {e}")

    body = {
        "status": status,
        "time": datetime.utcnow().isoformat(),
        "failures": failures,
    }
    return jsonify(body), 200 if status == "ok" else 503
