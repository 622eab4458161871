#!/usr/bin/env python
"""Ensure an Admin account exists. Credentials come from ADMIN_EMAIL / ADMIN_PASSWORD."""
import os
import sys

from khandeshwar_backend import create_app
from khandeshwar_backend.extensions import db
from khandeshwar_backend.models import User

EMAIL = os.getenv("ADMIN_EMAIL", "admin@khandeshwar.local").lower()
USERNAME = os.getenv("ADMIN_USERNAME", "admin")
PASSWORD = os.getenv("ADMIN_PASSWORD")

if not PASSWORD:
    sys.exit("ADMIN_PASSWORD is not set")

app = create_app()
with app.app_context():
    u = User.query.filter_by(email=EMAIL).first()
    if not u:
        u = User(username=USERNAME, email=EMAIL)
        db.session.add(u)
    u.role = "Admin"
    u.status = "Active"
    u.set_password(PASSWORD)
    db.session.commit()
    print("Admin upserted:", u.id, u.email)
