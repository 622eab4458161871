import click
from flask import current_app

from khandeshwar_backend.extensions import db
from khandeshwar_backend.models import User


def register_commands(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables (development / SQLite)."""
        db.create_all()
        click.echo("Database tables created")

    @app.cli.command("seed-admin")
    @click.option("--username", default="admin", show_default=True)
    @click.option("--email", required=True)
    @click.option("--password", required=True)
    def seed_admin(username, email, password):
        """Create or reset an Admin account."""
        user = User.query.filter_by(email=email.lower()).first()
        if not user:
            user = User(username=username, email=email.lower(), role="Admin", status="Active")
            db.session.add(user)
        user.role = "Admin"
        user.status = "Active"
        user.set_password(password)
        db.session.commit()
        click.echo(f"Admin upserted: {user.id} {user.email}")

    @app.cli.command("import-csv")
    @click.argument("path", type=click.Path(exists=True, dir_okay=False))
    @click.option("--dry-run", is_flag=True)
    def import_csv(path, dry_run):
        """Import transactions from a CSV export."""
        from khandeshwar_backend.services.transactions import bulk_import
        from khandeshwar_backend.utils.csv_io import parse_import
        from khandeshwar_backend.utils.dates import parse_iso_date

        with open(path, newline="", encoding="utf-8-sig") as f:
            result = parse_import(f.read())
        click.echo(f"{len(result.rows)} valid rows, {result.skipped} skipped")
        if dry_run or not result.rows:
            return
        created = bulk_import([dict(r, date=parse_iso_date(r["date"])) for r in result.rows])
        click.echo(f"Imported {len(created)} transactions")

    @app.cli.command("diagnose-db")
    def diagnose_db():
        """Check database connectivity and the users table."""
        from khandeshwar_backend.diagnostics import run_diagnostics

        if not run_diagnostics(current_app._get_current_object(), out=click.echo):
            raise SystemExit(1)
