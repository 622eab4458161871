from . import (
    agreements,
    auth,
    dashboard,
    donations,
    expenses,
    loans,
    penalties,
    rent,
    reports,
    shops,
    tenants,
    transactions,
    users,
)

BLUEPRINTS = [
    auth.bp,
    users.bp,
    shops.bp,
    tenants.bp,
    agreements.bp,
    loans.bp,
    penalties.bp,
    donations.bp,
    expenses.bp,
    rent.bp,
    transactions.bp,
    reports.bp,
    dashboard.bp,
]
