#!/usr/bin/env python
"""
Database connectivity check.

Opens the configured database, confirms the ``users`` table carries the
expected columns and runs a handful of sample queries. Prints a report and
exits non-zero on the first failure. Run with ``khandeshwar-db-diagnostics``,
``flask --app khandeshwar_backend diagnose-db`` or ``scripts/db_diagnostics.py``.
"""
import sys

from sqlalchemy import inspect, text

from khandeshwar_backend.extensions import db
from khandeshwar_backend.models import User

EXPECTED_USER_COLUMNS = [
    "id", "username", "email", "password_hash", "role", "status",
    "last_login", "created_at", "updated_at",
]


def _masked(url) -> str:
    return url.render_as_string(hide_password=True)


def run_diagnostics(app, out=print) -> bool:
    with app.app_context():
        engine = db.engine
        out(f"DB URI: {_masked(engine.url)}")
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            out("connection: ok")
            pool = engine.pool
            out(f"pool: {pool.__class__.__name__} {pool.status()}")

            columns = [c["name"] for c in inspect(engine).get_columns("users")]
            out(f"users columns: {columns}")
            missing = [c for c in EXPECTED_USER_COLUMNS if c not in columns]
            if missing:
                out(f"FAIL: users table is missing columns {missing}")
                return False
            out("users schema: ok")

            out(f"user count: {User.query.count()}")
            for u in User.query.limit(3).all():
                out(f"  sample: {u.username} <{u.email}> {u.role} {u.status}")
            out(f"admins: {User.query.filter_by(role='Admin').count()}")
            out(f"active users: {User.query.filter_by(status='Active').count()}")
            page = User.query.order_by(User.created_at.desc()).limit(2).offset(0).all()
            out(f"first page (2, newest first): {[u.username for u in page]}")
        except Exception as e:
            out(f"FAIL: {e.__class__.__name__}: {e}")
            return False
    out("diagnostics passed")
    return True


def main(argv=None) -> int:
    from khandeshwar_backend import create_app

    app = create_app()
    return 0 if run_diagnostics(app) else 1


if __name__ == "__main__":
    sys.exit(main())
